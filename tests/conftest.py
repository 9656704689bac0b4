"""
Pytest configuration and fixtures.

Fixtures cover both storage backends so that contract tests run once per
backend, plus an HTTP client over the ASGI app with a fake payment
provider and an in-memory token blacklist.
"""

import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-derra")
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["SEED_DEFAULT_CATEGORIES"] = "false"

from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from derra.core import auth as auth_module
from derra.db.session import use_unicode_lower
from derra.main import create_app
from derra.models import Base
from derra.services.paypal_client import get_payment_client
from derra.storage.database import DatabaseStorage
from derra.storage.factory import database_provider, memory_provider
from derra.storage.interface import Storage
from derra.storage.memory import MemoryStorage
from tests.factories import FakePaymentClient

# WHY: SQLite in memory keeps the database backend tests self-contained.
# StaticPool shares the single connection, otherwise every checkout would
# see a fresh, empty database.
TEST_ASYNC_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeRedis:
    """The two Redis calls the token blacklist makes, backed by a dict."""

    def __init__(self):
        self.values: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.values[key] = value
        self.ttls[key] = ttl

    async def exists(self, key: str) -> int:
        return 1 if key in self.values else 0

    async def aclose(self) -> None:
        pass


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch) -> FakeRedis:
    """
    Replace the blacklist's Redis client for every test.

    WHY: Logout writes to Redis; tests must not need a running server.
    """
    redis = FakeRedis()

    async def get_fake_redis():
        return redis

    monkeypatch.setattr(auth_module, "_redis_client", None)
    monkeypatch.setattr(auth_module, "get_redis", get_fake_redis)
    return redis


# ============================================================================
# Storage backends
# ============================================================================


@asynccontextmanager
async def fresh_database() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory database with every table created."""
    engine = create_async_engine(TEST_ASYNC_DATABASE_URL, echo=False, poolclass=StaticPool)
    use_unicode_lower(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with fresh_database() as engine:
        async with session_factory(engine)() as session:
            yield session


@pytest_asyncio.fixture(params=["memory", "database"])
async def storage(request) -> AsyncGenerator[Storage, None]:
    """
    Each test using this fixture runs once per backend.

    WHY: Both backends must be observably identical; the same assertions
    run against each.
    """
    if request.param == "memory":
        yield MemoryStorage()
    else:
        async with fresh_database() as engine:
            async with session_factory(engine)() as session:
                yield DatabaseStorage(session)


# ============================================================================
# HTTP client
# ============================================================================


@pytest.fixture
def payments() -> FakePaymentClient:
    return FakePaymentClient()


@pytest_asyncio.fixture(params=["memory", "database"])
async def client(request, payments: FakePaymentClient) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client over the app, once per storage backend.

    Each request gets its own Storage from the provider, as in production.
    """
    async with AsyncExitStack() as stack:
        if request.param == "memory":
            provider = memory_provider(MemoryStorage())
        else:
            engine = await stack.enter_async_context(fresh_database())
            provider = database_provider(session_factory(engine))

        app = create_app(storage_provider=provider)
        app.dependency_overrides[get_payment_client] = lambda: payments

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
