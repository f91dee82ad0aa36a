"""Pytest configuration and shared fixtures for reconciliation tests."""

import os
from datetime import date
from decimal import Decimal

# Keep tests away from a developer's .env database
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.domain.lease import Lease, RentRevision
from src.models import Base
from src.services.config import reset_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test starts from freshly loaded settings."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
async def async_db_session():
    """Create async test database session on an in-memory SQLite schema."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def lease():
    """Lease from 2024-01-01: rent 800 + charges 150, due on the 5th."""
    return Lease(
        id=1,
        property_id=10,
        tenant_ids=(100,),
        start_date=date(2024, 1, 1),
        rent_amount=Decimal("800"),
        charges_amount=Decimal("150"),
        payment_due_day=5,
    )


@pytest.fixture
def march_revision():
    """Revision raising the rent to 850 + 150 from 2024-03-01."""
    return RentRevision(
        id=1,
        lease_id=1,
        effective_date=date(2024, 3, 1),
        rent_amount=Decimal("850"),
        charges_amount=Decimal("150"),
        reason="Annual indexation",
    )

