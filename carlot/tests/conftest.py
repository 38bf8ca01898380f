"""
Pytest configuration and shared fixtures for the carlot test suite.

This module provides:
- Environment defaults (set before the app is imported)
- Database fixtures (in-memory SQLite for fast tests)
- An async HTTP client bound to the FastAPI app
- Profile factories and bearer-token headers per role
"""

import os

os.environ.setdefault("BACKEND_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BACKEND_PUBLIC_KEY", "test-public-key")
os.environ.setdefault("JWT_SECRET", "testsecret")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from carlot.auth.auth_handler import sign_jwt
from carlot.auth.passwords_handler import UNUSABLE_PASSWORD
from carlot.core.db import Base, get_db
from carlot.main import app
from carlot.store.backend import BackendStore
from carlot.store.notifications import ChangeFeed

# Test Database Configuration
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PUBLIC_KEY = os.environ["BACKEND_PUBLIC_KEY"]


@pytest.fixture
async def async_engine():
    """Create async engine for testing with in-memory SQLite."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def async_db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def feed() -> ChangeFeed:
    """A private change feed so subscriptions never leak between tests."""
    return ChangeFeed()


@pytest.fixture
def store(async_db_session, feed) -> BackendStore:
    return BackendStore(async_db_session, feed)


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client sending the public key; one DB session per request."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers={"apikey": PUBLIC_KEY}) as client:
        yield client

    app.dependency_overrides.clear()


# Test Data Factories
@pytest.fixture
def make_profile(store):
    async def _make(role: str = "seller", **overrides) -> dict:
        values = {
            "email": f"{role}-{overrides.get('username', 'user')}@example.com",
            "username": f"{role}_user",
            "role": role,
            "password": UNUSABLE_PASSWORD,
        }
        values.update(overrides)
        return await store.insert("profiles", values)
    return _make


@pytest.fixture
async def admin(make_profile) -> dict:
    return await make_profile("admin", username="admin")


@pytest.fixture
async def seller(make_profile) -> dict:
    return await make_profile("seller", username="seller")


@pytest.fixture
async def transporter(make_profile) -> dict:
    return await make_profile("transporter", username="transporter")


def bearer(profile: dict) -> dict:
    token = sign_jwt(profile["id"], profile["role"])["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin) -> dict:
    return bearer(admin)


@pytest.fixture
def seller_headers(seller) -> dict:
    return bearer(seller)


@pytest.fixture
def transporter_headers(transporter) -> dict:
    return bearer(transporter)


@pytest.fixture
def vehicle_payload() -> dict:
    return {
        "make": "Toyota",
        "model": "Camry",
        "year": 2020,
        "vin": "4T1B11HK5KU123456",
        "purchase_date": "2024-03-01",
        "pickup_location": "Manheim Atlanta",
        "odometer": 42000,
        "bought_price": 15500.0,
    }


@pytest.fixture
async def vehicle(store, seller, vehicle_payload) -> dict:
    return await store.insert("vehicles", {**vehicle_payload, "created_by": seller["id"]})


@pytest.fixture
async def sold_vehicle(store, seller, vehicle_payload) -> dict:
    return await store.insert("vehicles", {**vehicle_payload, "status": "sold", "created_by": seller["id"]})


@pytest.fixture
def headers_for():
    return bearer
