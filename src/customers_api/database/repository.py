"""Customer repository — data access layer for the ``customers`` table."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from pydantic import ValidationError
from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from customers_api.models.customer import Customer
from customers_api.schemas.customer import CustomerOut

logger = logging.getLogger(__name__)

customers = Customer.__table__

_COLUMNS = (
    customers.c.id,
    customers.c.name,
    customers.c.phone,
    customers.c.active,
    customers.c.created,
)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class CustomerError(Exception):
    """Base class for customer data-access failures."""


class CustomerNotFoundError(CustomerError):
    """No customer row matched the given identifier."""

    def __init__(self, customer_id: int) -> None:
        super().__init__(f"customer {customer_id} not found")
        self.customer_id = customer_id


class CustomerStorageError(CustomerError):
    """Any other data-access failure (connectivity, constraints, bad rows)."""


class CustomerRepository:
    """Encapsulates all database queries related to customers.

    Every public method borrows one connection from the engine's pool for the
    duration of the call and gives it back when the call finishes, whether it
    succeeded or not. Failures are never retried.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    # ── Lookups ──────────────────────────────────────────

    async def all(self) -> list[CustomerOut]:
        """Return every customer. An empty table yields an empty list."""
        return await self._fetch_all(select(*_COLUMNS))

    async def all_active(self) -> list[CustomerOut]:
        """Return every customer that is not blocked."""
        return await self._fetch_all(
            select(*_COLUMNS).where(customers.c.active.is_(True))
        )

    async def by_id(self, customer_id: int) -> CustomerOut:
        """Return the customer with *customer_id*.

        Raises ``CustomerNotFoundError`` if there is no such row.
        """
        async with self._connect() as conn:
            return await self._get(conn, customer_id)

    # ── Mutations ────────────────────────────────────────

    async def save(self, customer_id: int, name: str, phone: str) -> CustomerOut:
        """Create or update a customer and return the persisted row.

        With ``customer_id == 0`` the row is upserted on ``phone``: a new
        customer is inserted, or the existing customer with that phone is
        renamed. Otherwise the existing row is updated in place; a phone
        already owned by another customer is rejected by the store and
        surfaces as ``CustomerStorageError``.
        """
        async with self._connect() as conn:
            if customer_id == 0:
                stmt = self._upsert_statement(conn, name, phone)
            else:
                await self._get(conn, customer_id)
                stmt = (
                    update(customers)
                    .where(customers.c.id == customer_id)
                    .values(name=name, phone=phone)
                    .returning(*_COLUMNS)
                )
            result = await self._execute(conn, stmt)
            return self._to_customer(result.one())

    async def remove_by_id(self, customer_id: int) -> CustomerOut:
        """Delete a customer and return the row as it was before deletion."""
        async with self._connect() as conn:
            removed = await self._get(conn, customer_id)
            await self._execute(conn, delete(customers).where(customers.c.id == customer_id))
        logger.info("Removed customer %s", customer_id)
        return removed

    async def block_by_id(self, customer_id: int) -> CustomerOut:
        """Mark a customer inactive.

        Returns the customer as it was *before* the update.
        """
        return await self._set_active(customer_id, False)

    async def unblock_by_id(self, customer_id: int) -> CustomerOut:
        """Mark a customer active again.

        Returns the customer as it was *before* the update.
        """
        return await self._set_active(customer_id, True)

    # ── Internals ────────────────────────────────────────

    async def _set_active(self, customer_id: int, active: bool) -> CustomerOut:
        async with self._connect() as conn:
            snapshot = await self._get(conn, customer_id)
            await self._execute(
                conn,
                update(customers)
                .where(customers.c.id == customer_id)
                .values(active=active),
            )
        logger.info("Customer %s active=%s", customer_id, active)
        return snapshot

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[AsyncConnection]:
        try:
            async with self._engine.begin() as conn:
                yield conn
        except SQLAlchemyError as exc:
            logger.exception("Customer transaction failed")
            raise CustomerStorageError("database unavailable") from exc

    async def _fetch_all(self, stmt) -> list[CustomerOut]:
        async with self._connect() as conn:
            result = await self._execute(conn, stmt)
            return [self._to_customer(row) for row in result]

    async def _get(self, conn: AsyncConnection, customer_id: int) -> CustomerOut:
        stmt = select(*_COLUMNS).where(customers.c.id == customer_id)
        row = (await self._execute(conn, stmt)).one_or_none()
        if row is None:
            raise CustomerNotFoundError(customer_id)
        return self._to_customer(row)

    @staticmethod
    def _upsert_statement(conn: AsyncConnection, name: str, phone: str):
        try:
            insert = _UPSERT_DIALECTS[conn.dialect.name]
        except KeyError:
            raise CustomerStorageError(
                f"upsert is not supported on {conn.dialect.name!r}"
            ) from None
        stmt = insert(customers).values(name=name, phone=phone)
        return stmt.on_conflict_do_update(
            index_elements=[customers.c.phone],
            set_={"name": stmt.excluded.name},
        ).returning(*_COLUMNS)

    @staticmethod
    async def _execute(conn: AsyncConnection, stmt):
        try:
            return await conn.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("Customer query failed")
            raise CustomerStorageError("customer query failed") from exc

    @staticmethod
    def _to_customer(row) -> CustomerOut:
        try:
            return CustomerOut.model_validate(row)
        except ValidationError as exc:
            logger.error("Malformed customer row: %s", exc)
            raise CustomerStorageError("malformed customer row") from exc

