import os

# Tests run against an in-memory SQLite database; set before settings load.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from contextlib import asynccontextmanager  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from guestlist.cache.service import CacheService, get_cache_service  # noqa: E402
from guestlist.cache.tests.inmemory_redis import InMemoryRedis  # noqa: E402
from guestlist.config.database import engine  # noqa: E402
from guestlist.guests.repository.store import SqlGuestStore  # noqa: E402
from guestlist.guests.service import GuestAggregateService, get_guest_service  # noqa: E402
from guestlist.main import app  # noqa: E402
from guestlist.models.base import BaseModel  # noqa: E402


@pytest_asyncio.fixture
async def test_db():
    """Create the schema before a test and drop it afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.drop_all)


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


@pytest_asyncio.fixture
async def cache(fake_redis):
    cache = CacheService(client=fake_redis)
    await cache.connect()
    return cache


@pytest.fixture
def store(test_db):
    return SqlGuestStore()


@pytest.fixture
def service(store, cache):
    return GuestAggregateService(store=store, cache=cache)


@pytest.fixture
def client_factory():
    """Build an HTTP client with dependency overrides applied to the app."""

    @asynccontextmanager
    async def factory(overrides: dict | None = None):
        app.dependency_overrides.update(overrides or {})
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest_asyncio.fixture
async def client(client_factory, service, cache):
    """Client wired to the SQLite store and in-memory cache."""
    overrides = {
        get_guest_service: lambda: service,
        get_cache_service: lambda: cache,
    }
    async with client_factory(overrides) as client:
        yield client
