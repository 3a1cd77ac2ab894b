"""Test configuration and fixtures"""

from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.config import settings
from app.database import Base, get_db
from app.models.reservation import Reservation
from app.utils.dates import utcnow


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def tomorrow_at(hour: int = 10, days: int = 1):
    """Naive UTC datetime ``days`` ahead at ``hour``:00"""
    return (utcnow() + timedelta(days=days)).replace(hour=hour, minute=0, second=0, microsecond=0)


def iso_utc(value) -> str:
    return value.isoformat() + "Z"


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def make_reservation(test_db):
    """Factory inserting a reservation row directly"""
    counter = {"n": 0}

    async def _make(**overrides) -> Reservation:
        counter["n"] += 1
        values = {
            "guest_name": "Test Guest",
            "guest_phone": f"1380000{counter['n']:04d}",
            "expected_arrival_date": tomorrow_at(),
            "expected_arrival_time": "dinner",
            "table_size": 2,
            "status": "requested",
            "reservation_code": f"TST{counter['n']:03d}",
        }
        values.update(overrides)
        reservation = Reservation(**values)
        test_db.add(reservation)
        await test_db.commit()
        await test_db.refresh(reservation)
        return reservation

    return _make


@pytest.fixture
async def client(test_db):
    """Create guest test client with overridden database"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def staff_client(client):
    """Create staff test client carrying the basic auth credential"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        auth=(settings.basic_auth_username, settings.basic_auth_password),
    ) as staff:
        yield staff
