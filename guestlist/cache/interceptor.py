import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request

from guestlist.cache.service import CacheService

logger = logging.getLogger(__name__)


class CacheInterceptor:
    """Read-through cache around a read endpoint.

    The key is built from the request path and its sorted query parameters.
    Mutating requests bypass the cache entirely.
    """

    def __init__(self, cache: CacheService, prefix: str, ttl: int | None = None) -> None:
        self._cache = cache
        self._prefix = prefix
        self._ttl = ttl

    def cache_key(self, request: Request) -> str:
        query = sorted(request.query_params.multi_items())
        return f"{self._prefix}:{request.url.path}:{json.dumps(query, separators=(',', ':'))}"

    async def intercept(self, request: Request, handler: Callable[[], Awaitable[Any]]) -> Any:
        if request.method != "GET":
            return await handler()

        key = self.cache_key(request)
        cached = await self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache HIT: {key}")
            return cached

        logger.debug(f"Cache MISS: {key}")
        response = await handler()
        if response:
            await self._cache.set(key, response, ttl=self._ttl)
        return response
