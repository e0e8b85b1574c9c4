"""Seed script — populates the database with sample customers for testing."""

import asyncio

from customers_api.config import settings
from customers_api.database.engine import connect
from customers_api.database.repository import CustomerRepository

SAMPLE_CUSTOMERS = [
    ("Alice Johnson", "+15551234567"),
    ("Bob Smith", "+15559876543"),
    ("Carol Davis", "+442071234567"),
    ("Dan Wilson", "+919876543210"),
]


async def seed() -> None:
    """Upsert sample customers into the database."""
    engine = await connect(settings)
    try:
        repo = CustomerRepository(engine)
        for name, phone in SAMPLE_CUSTOMERS:
            await repo.save(0, name, phone)
    finally:
        await engine.dispose()
    print(f"✅ Seeded {len(SAMPLE_CUSTOMERS)} customers into the database.")


if __name__ == "__main__":
    asyncio.run(seed())
