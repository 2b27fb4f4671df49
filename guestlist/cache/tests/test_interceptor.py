import pytest
from starlette.requests import Request

from guestlist.cache.interceptor import CacheInterceptor
from guestlist.cache.service import CacheService
from guestlist.cache.tests.inmemory_redis import UnavailableRedis


def make_request(path: str, query: str = "", method: str = "GET") -> Request:
    return Request(
        {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query.encode(),
            "headers": [],
        }
    )


class CountingHandler:
    def __init__(self, response):
        self.calls = 0
        self.response = response

    async def __call__(self):
        self.calls += 1
        return self.response


def test_cache_key_ignores_query_parameter_order():
    interceptor = CacheInterceptor(CacheService(client=None), prefix="guests:history")

    first = interceptor.cache_key(make_request("/api/v1/guests/history", "page=2&limit=5"))
    second = interceptor.cache_key(make_request("/api/v1/guests/history", "limit=5&page=2"))

    assert first == second
    assert first.startswith("guests:history:/api/v1/guests/history:")


def test_cache_key_differs_per_path():
    interceptor = CacheInterceptor(CacheService(client=None), prefix="guests:history")

    assert interceptor.cache_key(make_request("/api/v1/guests/1/history")) != interceptor.cache_key(
        make_request("/api/v1/guests/2/history")
    )


@pytest.mark.asyncio
async def test_second_get_is_served_from_cache(cache, fake_redis):
    interceptor = CacheInterceptor(cache, prefix="guests:history", ttl=300)
    handler = CountingHandler({"data": [], "meta": {"total": 0}})
    request = make_request("/api/v1/guests/history", "page=1")

    first = await interceptor.intercept(request, handler)
    second = await interceptor.intercept(request, handler)

    assert first == second == {"data": [], "meta": {"total": 0}}
    assert handler.calls == 1
    assert list(fake_redis.ttls.values()) == [300]


@pytest.mark.asyncio
async def test_non_get_requests_bypass_cache(cache, fake_redis):
    interceptor = CacheInterceptor(cache, prefix="guests:history")
    handler = CountingHandler({"ok": True})
    request = make_request("/api/v1/guests/history", method="POST")

    await interceptor.intercept(request, handler)
    await interceptor.intercept(request, handler)

    assert handler.calls == 2
    assert fake_redis.store == {}


@pytest.mark.asyncio
async def test_empty_responses_are_not_cached(cache, fake_redis):
    interceptor = CacheInterceptor(cache, prefix="guests:history")
    handler = CountingHandler(None)

    await interceptor.intercept(make_request("/api/v1/guests/history"), handler)

    assert fake_redis.store == {}


@pytest.mark.asyncio
async def test_unavailable_cache_still_calls_handler():
    interceptor = CacheInterceptor(CacheService(client=UnavailableRedis()), prefix="guests:history")
    handler = CountingHandler({"data": []})
    request = make_request("/api/v1/guests/history")

    assert await interceptor.intercept(request, handler) == {"data": []}
    assert await interceptor.intercept(request, handler) == {"data": []}
    assert handler.calls == 2
