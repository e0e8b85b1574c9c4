"""Tests for application startup — engine connection and lifespan wiring."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from customers_api.config import Settings
from customers_api.database import engine as engine_module
from customers_api.database.repository import CustomerRepository
from customers_api.main import create_app


@pytest.mark.asyncio
async def test_lifespan_serves_requests_from_file_db(tmp_path):
    config = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'customers.db'}")
    app = create_app(config)

    async with app.router.lifespan_context(app):
        assert isinstance(app.state.customers, CustomerRepository)

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.post(
                "/customers.save", data={"name": "Ann", "phone": "555-0100"}
            )
            assert resp.status_code == 200
            created = resp.json()

            resp = await client.get("/customers.getById", params={"id": created["id"]})
            assert resp.status_code == 200
            assert resp.json() == created


@pytest.mark.asyncio
async def test_connect_times_out_and_disposes_engine(monkeypatch):
    fake_engine = MagicMock()
    fake_engine.dispose = AsyncMock()
    fake_engine.url.render_as_string.return_value = "sqlite+aiosqlite:///customers.db"

    async def _never_ready(engine):
        await asyncio.sleep(60)

    monkeypatch.setattr(engine_module, "build_engine", lambda settings: fake_engine)
    monkeypatch.setattr(engine_module, "init_db", _never_ready)

    with pytest.raises(TimeoutError):
        await engine_module.connect(Settings(db_connect_timeout=0.05))

    fake_engine.dispose.assert_awaited_once()


@pytest.mark.asyncio
async def test_connect_uses_configured_pool_size(tmp_path):
    config = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'customers.db'}",
        db_pool_size=3,
    )
    engine = await engine_module.connect(config)
    try:
        assert engine.sync_engine.pool.size() == 3
    finally:
        await engine.dispose()
