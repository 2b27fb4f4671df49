import pytest

from guestlist.cache.service import CacheService, get_cache_service
from guestlist.cache.tests.inmemory_redis import UnavailableRedis


@pytest.mark.asyncio
async def test_health_check(client):
    """Test the health check endpoint returns healthy status."""
    response = await client.get("/healthz/")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "0.1.0"
    assert data["cache"] == "connected"


@pytest.mark.asyncio
async def test_health_check_without_cache(client_factory):
    """An unavailable cache is reported but the API stays healthy."""
    cache = CacheService(client=UnavailableRedis())
    overrides = {
        get_cache_service: lambda: cache,
    }

    async with client_factory(overrides) as client:
        response = await client.get("/healthz/")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": "0.1.0", "cache": "disconnected"}


@pytest.mark.asyncio
async def test_cache_stats(client):
    response = await client.get("/healthz/cache")

    assert response.status_code == 200
    data = response.json()
    assert data["connected"] is True
    assert "db0" in data["keyspace"]


@pytest.mark.asyncio
async def test_cache_stats_without_cache(client_factory):
    cache = CacheService(client=UnavailableRedis())

    async with client_factory({get_cache_service: lambda: cache}) as client:
        response = await client.get("/healthz/cache")

    assert response.json() == {"connected": False, "stats": None, "keyspace": None}


@pytest.mark.asyncio
async def test_root_endpoint(client):
    """Test the root endpoint returns welcome message."""
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Welcome to the Guest List API"
