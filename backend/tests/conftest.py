"""Shared test configuration and fixtures.

Each test gets a fresh database engine and schema:
- ``TEST_DATABASE_URL`` selects the database (defaults to in-memory SQLite via
  aiosqlite, so the suite runs without a PostgreSQL server).
- Fixtures commit what they create so that API requests, which open their own
  sessions, can see it.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-suite")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.auth.jwt import create_token_for_user  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.booking import Booking  # noqa: E402
from app.models.car import Car  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services.pricing import compute_breakdown, count_days  # noqa: E402

_test_db_url = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _make_engine():
    if _test_db_url.startswith("sqlite"):
        return create_async_engine(
            _test_db_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(_test_db_url, pool_pre_ping=True)


# ---------------------------------------------------------------------------
# Per-test engine, schema and sessions
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Create the schema on a fresh engine and drop it afterwards."""
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for direct database setup and service-level tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient whose requests use the test database.

    Every request gets its own session that commits on success and rolls back
    on error, exactly like ``app.database.get_db``.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: users
# ---------------------------------------------------------------------------


async def _create_user(db: AsyncSession, name: str, role: str = "user", is_active: bool = True) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{name.lower().replace(' ', '-')}-{unique}@test.com",
        name=name,
        is_active=is_active,
        role=role,
    )
    db.add(user)
    await db.commit()
    return user


def _headers_for(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_token_for_user(user.id)}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """A renter."""
    return await _create_user(db_session, "Test Renter")


@pytest_asyncio.fixture
async def host_user(db_session: AsyncSession) -> User:
    """Owner of ``test_car``."""
    return await _create_user(db_session, "Test Host")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A user with no part in any booking."""
    return await _create_user(db_session, "Other User")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Admin User", role="admin")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict[str, str]:
    """Return Authorization headers for the renter."""
    return _headers_for(test_user)


@pytest_asyncio.fixture
async def host_headers(host_user: User) -> dict[str, str]:
    return _headers_for(host_user)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict[str, str]:
    return _headers_for(other_user)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return _headers_for(admin_user)


# ---------------------------------------------------------------------------
# Convenience fixtures: cars and bookings
# ---------------------------------------------------------------------------


async def _create_car(db: AsyncSession, owner: User, **overrides) -> Car:
    values = {
        "make": "Maruti",
        "model": "Swift",
        "year": 2022,
        "car_type": "hatchback",
        "transmission": "manual",
        "fuel_type": "petrol",
        "seats": 5,
        "daily_price": Decimal("1000.00"),
        "location": "Bengaluru",
        "description": "Well kept city car.",
        "images": ["https://img.test/swift.jpg"],
        "features": ["ac", "bluetooth"],
        "status": "active",
    }
    values.update(overrides)
    car = Car(owner_id=owner.id, **values)
    db.add(car)
    await db.commit()
    return car


async def _insert_booking(
    db: AsyncSession,
    car: Car,
    renter: User,
    start: date,
    end: date,
    status: str = "confirmed",
    payment_status: str = "pending",
) -> Booking:
    """Write a booking straight to the database, bypassing validation."""
    total_days = count_days(start, end)
    breakdown = compute_breakdown(car.daily_price, total_days)
    booking = Booking(
        car_id=car.id,
        renter_id=renter.id,
        host_id=car.owner_id,
        start_date=start,
        end_date=end,
        total_days=total_days,
        daily_rate=breakdown.daily_rate,
        subtotal=breakdown.subtotal,
        service_fee=breakdown.service_fee,
        insurance_fee=breakdown.insurance_fee,
        gst=breakdown.gst,
        discount=breakdown.discount,
        total_amount=breakdown.total_amount,
        status=status,
        payment_status=payment_status,
    )
    db.add(booking)
    await db.commit()
    return booking


@pytest_asyncio.fixture
async def test_car(db_session: AsyncSession, host_user: User) -> Car:
    """An active car at 1000.00 per day owned by ``host_user``."""
    return await _create_car(db_session, host_user)


@pytest.fixture
def make_car(db_session: AsyncSession):
    """Factory fixture: ``await make_car(owner, status="inactive", ...)``."""

    async def _factory(owner: User, **overrides) -> Car:
        return await _create_car(db_session, owner, **overrides)

    return _factory


@pytest.fixture
def make_booking(db_session: AsyncSession):
    """Factory fixture inserting a booking without going through the service."""

    async def _factory(car: Car, renter: User, start: date, end: date, **kwargs) -> Booking:
        return await _insert_booking(db_session, car, renter, start, end, **kwargs)

    return _factory
