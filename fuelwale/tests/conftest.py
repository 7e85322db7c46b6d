"""
Centralized Test Configuration.
"""

import fnmatch
from decimal import Decimal
from types import SimpleNamespace

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from fuelwale.app.main import app
from fuelwale.app.db.session import get_db, Base
from fuelwale.app.core.jwt import issue_token
from fuelwale.app.core.security import get_password_hash
import fuelwale.app.core.redis_client as redis_client_module
from fuelwale.app.models.customer import Customer
from fuelwale.app.models.depot import Depot
from fuelwale.app.models.driver import Driver
from fuelwale.app.models.enums import UserRole
from fuelwale.app.models.loading_station import LoadingStation
from fuelwale.app.models.order import Order, OrderItem
from fuelwale.app.models.order_enums import OrderStatus
from fuelwale.app.models.route import Route
from fuelwale.app.models.user import User
from fuelwale.app.models.vehicle import Vehicle

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "secret123"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}
        self._closed = False

    async def ping(self):
        return not self._closed

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None, nx=False):
        if self._closed:
            return False
        if nx and key in self.store:
            return None
        self.store[key] = value
        if ex:
            self.ttls[key] = ex
        return True

    async def setex(self, key, seconds, value):
        return await self.set(key, value, ex=seconds)

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.store:
                del self.store[key]
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    async def keys(self, pattern="*"):
        return [k for k in self.store if fnmatch.fnmatch(k, pattern)]

    async def flushdb(self):
        self.store = {}
        self.ttls = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def mock_redis(monkeypatch):
    redis = MockRedis()
    monkeypatch.setattr(redis_client_module, "redis_client", redis)
    return redis


@pytest.fixture(autouse=True)
def apply_overrides(session_factory, mock_redis):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides = {}


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture
def password():
    """Password of every fixture user."""
    return TEST_PASSWORD


@pytest.fixture
def headers():
    """headers(user) -> Authorization header for that user."""
    return bearer


async def make_user(db, username: str, role: UserRole, is_active: bool = True) -> User:
    user = User(
        email=f"{username}@example.com",
        username=username,
        full_name=username.title(),
        hashed_password=get_password_hash(TEST_PASSWORD),
        role=role,
        is_active=is_active,
    )
    db.add(user)
    await db.flush()
    return user


@pytest.fixture
async def world(db_session):
    """
    Users, masters and one PENDING order:

    customer billing state "27 - Maharashtra", depot "101", one line of
    5000 L Diesel, vehicle MH01AB1234 on route R1, driver D1.
    """
    db = db_session
    admin = await make_user(db, "admin", UserRole.ADMIN)
    executive = await make_user(db, "exec", UserRole.EXECUTIVE)
    driver_user = await make_user(db, "driver1", UserRole.DRIVER)
    other_driver_user = await make_user(db, "driver2", UserRole.DRIVER)
    accounts = await make_user(db, "accounts", UserRole.ACCOUNTS)

    depot = Depot(depot_cd="101", name="Thane Depot", state_cd="27", city="Thane")
    db.add(depot)
    await db.flush()

    route = Route(name="R1", depot_id=depot.id)
    db.add(route)
    await db.flush()

    customer = Customer(
        cust_cd="C001",
        name="Acme Infra",
        depot_id=depot.id,
        bill_state_cd="27 - Maharashtra",
        bill_address="Plot 4, MIDC, Thane",
        ship_to=["Site A, Bhiwandi"],
        mobile="9800000000",
    )
    db.add(customer)

    driver = Driver(name="D1", peso_license_no="PESO-001", depot_id=depot.id, user_id=driver_user.id)
    other_driver = Driver(name="D2", peso_license_no="PESO-002", depot_id=depot.id, user_id=other_driver_user.id)
    db.add_all([driver, other_driver])

    vehicle = Vehicle(
        vehicle_no="MH01AB1234",
        display_no="MH-01 AB 1234",
        depot_id=depot.id,
        route_id=route.id,
        make="Tata",
        capacity_liters=Decimal("6000"),
    )
    second_vehicle = Vehicle(
        vehicle_no="MH04XY9999",
        display_no="MH04 XY 9999",
        depot_id=depot.id,
        route_id=route.id,
    )
    db.add_all([vehicle, second_vehicle])
    await db.flush()

    station = LoadingStation(name="BPCL Wadala", route_id=route.id)
    db.add(station)

    order = Order(customer_id=customer.id, ship_to="Site A, Bhiwandi", status=OrderStatus.PENDING)
    db.add(order)
    await db.flush()
    db.add(OrderItem(order_id=order.id, product="Diesel", qty=Decimal("5000"), rate=Decimal("90")))

    await db.commit()

    return SimpleNamespace(
        admin=admin,
        executive=executive,
        driver_user=driver_user,
        other_driver_user=other_driver_user,
        accounts=accounts,
        depot=depot,
        route=route,
        customer=customer,
        driver=driver,
        other_driver=other_driver,
        vehicle=vehicle,
        second_vehicle=second_vehicle,
        station=station,
        order=order,
    )


@pytest.fixture
def new_order(db_session, world):
    """new_order(lines) -> PENDING order of the world customer with (product, qty) lines."""

    async def make(lines, ship_to="Site A, Bhiwandi") -> Order:
        order = Order(customer_id=world.customer.id, ship_to=ship_to, status=OrderStatus.PENDING)
        db_session.add(order)
        await db_session.flush()
        for product, qty in lines:
            db_session.add(OrderItem(order_id=order.id, product=product, qty=Decimal(str(qty)), rate=Decimal("90")))
        await db_session.commit()
        return order

    return make


@pytest.fixture
def trips(client, world, headers):
    """Shortcuts for driving trips through the API."""

    async def assign(order_id=None, vehicle_no="MH01AB1234", driver_id=None, capacity="5000", user=None, extra_headers=None):
        h = dict(headers(user or world.executive))
        if extra_headers:
            h.update(extra_headers)
        return await client.post("/v1/trips/assign", json={
            "orderId": order_id or world.order.id,
            "routeId": world.route.id,
            "vehicleNo": vehicle_no,
            "driverId": driver_id or world.driver.id,
            "capacity": capacity,
        }, headers=h)

    async def start(trip_id, start_km="1000", totalizer_start="500", user=None):
        return await client.post("/v1/trips/login", json={
            "tripId": trip_id, "startKm": start_km, "totalizerStart": totalizer_start,
        }, headers=headers(user or world.driver_user))

    async def deliver(trip_id, pending_id, qty, rate="90", user=None, extra_headers=None):
        h = dict(headers(user or world.driver_user))
        if extra_headers:
            h.update(extra_headers)
        return await client.post("/v1/deliveries", json={
            "tripId": trip_id, "pendingDeliveryId": pending_id, "qty": qty, "rate": rate,
        }, headers=h)

    async def end(trip_id, end_km="1100", totalizer_end="520", user=None):
        return await client.post("/v1/trips/logout", json={
            "tripId": trip_id, "endKm": end_km, "totalizerEnd": totalizer_end,
        }, headers=headers(user or world.driver_user))

    async def assigned_and_started(**kwargs):
        resp = await assign(**kwargs)
        assert resp.status_code == 201, resp.text
        trip_id = resp.json()["tripId"]
        started = await start(trip_id)
        assert started.status_code == 200, started.text
        return trip_id, started.json()

    return SimpleNamespace(
        assign=assign, start=start, deliver=deliver, end=end, assigned_and_started=assigned_and_started
    )
