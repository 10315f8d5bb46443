import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fleetquote.main import app
from fleetquote.core import redis as redis_module
from fleetquote.db.session import get_db
from fleetquote.models.base import Base
from fleetquote.models.tenant import Tenant
from fleetquote.models.user import User
from fleetquote.models.vehicle import Vehicle
from fleetquote.core.security import create_access_token, hash_password
from fleetquote.core.enums import DistanceUnit, FuelEfficiencyUnit, UserRole, VehicleStatus
from fleetquote.schemas.parameters import CostParameters
from fleetquote.schemas.vehicle import VehicleProfile
from fleetquote.services.parameters import create_default_parameters


TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture
async def setup_db():
    """Fresh schema on a per-test engine, wired into the app's get_db"""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False} if TEST_DATABASE_URL.startswith("sqlite") else {},
        poolclass=StaticPool,
    )
    session_factory = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    app.dependency_overrides[get_db] = override_get_db

    yield session_factory

    app.dependency_overrides.clear()
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
async def db_session(setup_db):
    async with setup_db() as session:
        yield session


@pytest.fixture
async def worker_session(setup_db):
    """Separate session with an empty identity map, like a background worker's"""
    async with setup_db() as session:
        yield session


@pytest.fixture
async def test_client(setup_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def _make_tenant(session: AsyncSession, slug: str) -> Tenant:
    tenant = Tenant(name=slug.title(), slug=slug)
    session.add(tenant)
    await session.commit()
    await session.refresh(tenant)
    await create_default_parameters(session, tenant.id)
    return tenant


async def _make_user(session: AsyncSession, tenant: Tenant, username: str, role: UserRole) -> User:
    user = User(
        tenant_id=tenant.id,
        username=username,
        password_hash=hash_password("secret123"),
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def tenant(db_session):
    return await _make_tenant(db_session, "acme-tours")


@pytest.fixture
async def other_tenant(db_session):
    return await _make_tenant(db_session, "rival-travel")


@pytest.fixture
async def admin_user(db_session, tenant):
    return await _make_user(db_session, tenant, "admin_1", UserRole.ADMIN)


@pytest.fixture
async def agent_user(db_session, tenant):
    return await _make_user(db_session, tenant, "agent_1", UserRole.AGENT)


@pytest.fixture
async def agent_user_2(db_session, tenant):
    return await _make_user(db_session, tenant, "agent_2", UserRole.AGENT)


@pytest.fixture
async def other_admin(db_session, other_tenant):
    return await _make_user(db_session, other_tenant, "admin_2", UserRole.ADMIN)


def _auth(user: User) -> dict:
    token = create_access_token(str(user.id), user.role, tenant_id=user.tenant_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return _auth(admin_user)


@pytest.fixture
def agent_headers(agent_user):
    return _auth(agent_user)


@pytest.fixture
def agent_2_headers(agent_user_2):
    return _auth(agent_user_2)


@pytest.fixture
def other_admin_headers(other_admin):
    return _auth(other_admin)


@pytest.fixture
def expired_headers(admin_user):
    token = create_access_token(str(admin_user.id), admin_user.role, tenant_id=admin_user.tenant_id, expires_minutes=-5)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def vehicle(db_session, tenant):
    vehicle = Vehicle(
        tenant_id=tenant.id,
        name="Coaster 30",
        make="Toyota",
        model="Coaster",
        plate="HBA-1234",
        passenger_capacity=30,
        fuel_capacity=70.0,
        fuel_efficiency=12.0,
        fuel_efficiency_unit=FuelEfficiencyUnit.KPL,
        cost_per_distance=2.5,
        cost_per_day=1200.0,
        distance_unit=DistanceUnit.KM,
        status=VehicleStatus.ACTIVE,
    )
    db_session.add(vehicle)
    await db_session.commit()
    await db_session.refresh(vehicle)
    return vehicle


@pytest.fixture
def vehicle_profile():
    return VehicleProfile(
        name="Coaster 30",
        passenger_capacity=30,
        fuel_capacity=70.0,
        fuel_efficiency=12.0,
        fuel_efficiency_unit=FuelEfficiencyUnit.KPL,
        cost_per_distance=2.5,
        cost_per_day=1200.0,
    )


@pytest.fixture
def cost_parameters():
    return CostParameters(
        fuel_price=110.0,
        meal_cost_per_day=300.0,
        hotel_cost_per_night=800.0,
        driver_incentive_per_day=500.0,
        exchange_rate=24.75,
        rounding_local=100,
        rounding_usd=5,
        markup_options=[10, 15, 20, 25, 30],
        recommended_markup=15,
    )


@pytest.fixture
def route_payload():
    return {
        "total_distance": 300.0,
        "total_time": 480.0,
        "base_location": "San Pedro Sula",
        "origin": "San Pedro Sula",
        "destination": "La Ceiba",
        "segments": [],
    }


class FakeRedis:
    """In-memory stand-in for the handful of commands the app issues"""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value

    async def incr(self, key):
        self.store[key] = int(self.store.get(key, 0)) + 1
        return self.store[key]

    async def expire(self, key, seconds):
        self.ttls[key] = seconds

    async def ttl(self, key):
        return self.ttls.get(key, -1)

    async def delete(self, key):
        self.store.pop(key, None)


@pytest.fixture
def fake_redis(monkeypatch):
    client = FakeRedis()
    monkeypatch.setattr(redis_module, "redis", client)
    return client
