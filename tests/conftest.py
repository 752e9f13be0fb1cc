"""Test configuration and fixtures"""

import hashlib
import hmac
import time
from datetime import date, time as dt_time
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from restodesk.main import app
from restodesk.config import settings
from restodesk.database import Base, get_db
from restodesk.models.tenant import Tenant, Profile
from restodesk.models.user import User, UserRole
from restodesk.models.menu import MenuPrice
from restodesk.models.order import Order
from restodesk.models.reservation import Reservation
from restodesk.api.auth import create_access_token, get_password_hash

STRIPE_WEBHOOK_SECRET = "whsec_test_secret"


def sign_stripe_payload(payload: str, secret: str = STRIPE_WEBHOOK_SECRET, timestamp: int = None) -> str:
    """Build a Stripe-Signature header the way Stripe signs deliveries"""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


@pytest.fixture
async def test_engine(tmp_path):
    """SQLite file database; every connection sees committed data"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(session_factory):
    """Session used by tests to arrange data and inspect results"""
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def stripe_settings(monkeypatch):
    monkeypatch.setattr(settings, "stripe_webhook_secret", STRIPE_WEBHOOK_SECRET)
    monkeypatch.setattr(settings, "stripe_secret_key", "sk_test_dummy")
    monkeypatch.setattr(settings, "stripe_price_basic", "price_basic")
    monkeypatch.setattr(settings, "stripe_price_pro", "price_pro")
    monkeypatch.setattr(settings, "stripe_price_premium", "price_premium")


async def make_tenant(db, name: str, contact_email: str, minutes_balance: int = 100) -> Tenant:
    tenant = Tenant(
        id=uuid4(),
        name=name,
        contact_email=contact_email,
        timezone="Europe/Paris",
    )
    db.add(tenant)
    await db.flush()

    db.add(Profile(
        tenant_id=tenant.id,
        display_name=name,
        minutes_balance=minutes_balance,
        auto_recharge_threshold=10,
    ))
    await db.commit()

    return tenant


@pytest.fixture
async def test_tenant(test_db):
    """Create a test tenant with its profile"""
    return await make_tenant(test_db, "Test Restaurant", "owner@test-restaurant.fr")


@pytest.fixture
async def other_tenant(test_db):
    """A second tenant the test user has no access to"""
    return await make_tenant(test_db, "Other Restaurant", "owner@other-restaurant.fr")


@pytest.fixture
async def test_user(test_db, test_tenant):
    """Create a restaurant admin for the test tenant"""
    user = User(
        id=uuid4(),
        tenant_id=test_tenant.id,
        email="test@example.com",
        hashed_password=get_password_hash("testpass123"),
        full_name="Test User",
        role=UserRole.RESTAURANT_ADMIN,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def test_viewer(test_db, test_tenant):
    """Create a read-only staff user for the test tenant"""
    user = User(
        id=uuid4(),
        tenant_id=test_tenant.id,
        email="viewer@example.com",
        hashed_password=get_password_hash("viewerpass123"),
        full_name="Kitchen Screen",
        role=UserRole.STAFF_VIEWER,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def test_admin_user(test_db):
    """Create a super admin user"""
    user = User(
        id=uuid4(),
        email="admin@example.com",
        hashed_password=get_password_hash("adminpass123"),
        full_name="Admin User",
        role=UserRole.SUPER_ADMIN,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def test_menu_prices(test_db, test_tenant):
    """Create test menu prices"""
    prices = [
        MenuPrice(tenant_id=test_tenant.id, item_name="Pizza", price_cents=1200, category="Pizzas"),
        MenuPrice(tenant_id=test_tenant.id, item_name="Coke", price_cents=300, category="Boissons"),
    ]

    for price in prices:
        test_db.add(price)

    await test_db.commit()
    return prices


@pytest.fixture
async def test_order(test_db, test_tenant):
    """A freshly received order"""
    order = Order(
        tenant_id=test_tenant.id,
        client_name="Alice",
        order_time=dt_time(19, 30),
        items_json=["Pizza", "Coke"],
        total_cents=1500,
        status="received",
    )
    test_db.add(order)
    await test_db.commit()

    return order


@pytest.fixture
async def test_reservation(test_db, test_tenant):
    """A confirmed reservation"""
    reservation = Reservation(
        tenant_id=test_tenant.id,
        client_name="Bob",
        client_phone="+33612345678",
        reservation_date=date(2026, 5, 1),
        reservation_time=dt_time(20, 0),
        party_size=4,
        status="confirmed",
    )
    test_db.add(reservation)
    await test_db.commit()

    return reservation


@pytest.fixture
async def client(session_factory):
    """Create test client; each request gets its own session"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(client, test_user):
    """Create client authenticated as the tenant's restaurant admin"""
    token = create_access_token(test_user)
    client.headers["Authorization"] = f"Bearer {token}"

    return client


@pytest.fixture
async def viewer_client(client, test_viewer):
    """Create client authenticated as a staff viewer"""
    token = create_access_token(test_viewer)
    client.headers["Authorization"] = f"Bearer {token}"

    return client


@pytest.fixture
async def admin_client(client, test_admin_user):
    """Create admin authenticated test client"""
    token = create_access_token(test_admin_user)
    client.headers["Authorization"] = f"Bearer {token}"

    return client
