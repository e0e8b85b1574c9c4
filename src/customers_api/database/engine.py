"""Database engine construction and schema bootstrap."""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from customers_api.config import Settings
from customers_api.models.customer import Base

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine (and its connection pool) from *settings*."""
    url = make_url(settings.database_url)
    kwargs: dict = {"echo": settings.debug}
    # In-memory SQLite runs on a single static connection; no pool to size.
    if url.get_backend_name() != "sqlite" or url.database not in (None, "", ":memory:"):
        kwargs["pool_size"] = settings.db_pool_size
        kwargs["max_overflow"] = settings.db_max_overflow
    return create_async_engine(url, **kwargs)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables that don't yet exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def connect(settings: Settings) -> AsyncEngine:
    """Build the engine and prepare the schema within ``db_connect_timeout``.

    The engine is disposed if the database cannot be reached in time.
    """
    engine = build_engine(settings)
    try:
        await asyncio.wait_for(init_db(engine), timeout=settings.db_connect_timeout)
    except Exception:
        logger.exception("Could not connect to %s", engine.url.render_as_string())
        await engine.dispose()
        raise
    return engine
