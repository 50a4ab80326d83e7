import os

# Settings are read at import time, so the environment comes first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["API_PREFIX"] = "/api"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from finance_api.core.database import Base, enable_sqlite_foreign_keys, get_async_session
from finance_api.main import app


@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_async_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user and return (auth headers, response body)."""

    async def _register(email="alice@example.com", name="Alice", password="secret123"):
        resp = await client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return {"Authorization": f"Bearer {body['token']}"}, body

    return _register


@pytest_asyncio.fixture
async def auth_headers(register):
    headers, _ = await register()
    return headers


@pytest.fixture
def category_id(client):
    """Look up one of the caller's categories by name."""

    async def _category_id(headers, name):
        resp = await client.get("/api/categories", headers=headers)
        assert resp.status_code == 200
        for category in resp.json()["categories"]:
            if category["name"] == name:
                return category["id"]
        raise AssertionError(f"category {name!r} not found")

    return _category_id


@pytest.fixture
def create_transaction(client):
    async def _create(headers, category_id, type="EXPENSE", amount=10.0,
                      date="2024-01-15", description="Test transaction", notes=None):
        payload = {
            "type": type,
            "amount": amount,
            "description": description,
            "date": date,
            "categoryId": category_id,
        }
        if notes is not None:
            payload["notes"] = notes
        resp = await client.post("/api/transactions", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["transaction"]

    return _create
