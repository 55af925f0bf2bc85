import os

# Settings are read at import time; point the default engine at SQLite before any app import.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.uow import UnitOfWork
from app.models import Vendor, VendorPlan
from app.models.base import Base
from factories import FakeGateway, make_quota


@pytest.fixture
def mock_db_session():
    return AsyncMock(spec=AsyncSession)


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.fixture
def uow(session_factory):
    return UnitOfWork(session_factory)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest_asyncio.fixture
async def seeded(session_factory):
    """One plan and three vendors, each with a fully populated lead quota."""
    async with session_factory() as db:
        db.add(VendorPlan(id=1, name="Gold", price=1000, duration_days=365, daily_limit=5, weekly_limit=20, yearly_limit=500))
        for vendor_id in (1, 2, 3):
            db.add(Vendor(id=vendor_id, company_name=f"Vendor {vendor_id}", email=f"v{vendor_id}@example.com"))
            db.add(make_quota(vendor_id))
        await db.commit()
    return session_factory
