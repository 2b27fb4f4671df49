"""Redis-backed cache with JSON values.

Cache failures never propagate: reads degrade to a miss and writes to a no-op,
so an unavailable Redis only costs performance.
"""

import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from guestlist.config.settings import Settings, settings

logger = logging.getLogger(__name__)

SCAN_BATCH_SIZE = 500

CACHE_ERRORS = (RedisError, OSError, TypeError, ValueError)


def create_redis_client(config: Settings = settings) -> redis.Redis:
    """Build a Redis client with bounded connection-level retries."""
    return redis.Redis(
        host=config.redis_host,
        port=config.redis_port,
        password=config.redis_password or None,
        db=config.redis_db,
        decode_responses=True,
        retry=Retry(ExponentialBackoff(cap=2.0, base=0.05), config.redis_max_retries),
        retry_on_error=[RedisConnectionError, RedisTimeoutError],
    )


class CacheService:
    def __init__(
        self,
        client: redis.Redis | None = None,
        default_ttl: int | None = None,
        config: Settings = settings,
    ) -> None:
        self._client = client
        self._config = config
        self._connected = False
        self.default_ttl = default_ttl or config.cache_ttl

    async def connect(self) -> bool:
        """Create the client if needed and check that Redis answers."""
        if self._client is None:
            self._client = create_redis_client(self._config)
        connected = await self.ping()
        if connected:
            logger.info(
                f"Redis connected at {self._config.redis_host}:{self._config.redis_port}"
            )
        else:
            logger.warning("Redis unavailable, caching disabled until it recovers")
        return connected

    async def close(self) -> None:
        if self._client is None:
            return
        try:
            await self._client.aclose()
        except CACHE_ERRORS as e:
            logger.warning(f"Redis close failed: {e}")
        finally:
            self._client = None
            self._connected = False

    async def ping(self) -> bool:
        if self._client is None:
            self._connected = False
            return False
        try:
            self._connected = bool(await self._client.ping())
        except CACHE_ERRORS as e:
            logger.warning(f"Redis ping failed: {e}")
            self._connected = False
        return self._connected

    def is_connected(self) -> bool:
        return self._client is not None and self._connected

    def _failed(self, operation: str, target: str, error: Exception) -> None:
        if isinstance(error, RedisConnectionError):
            self._connected = False
        logger.warning(f"Cache {operation} error for {target}: {error}")

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` on a miss or any failure."""
        if self._client is None:
            return None
        try:
            raw = await self._client.get(key)
            self._connected = True
            if raw is None:
                return None
            return json.loads(raw)
        except CACHE_ERRORS as e:
            self._failed("GET", key, e)
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        if self._client is None:
            return
        try:
            serialized = json.dumps(value, default=str)
            await self._client.setex(key, ttl or self.default_ttl, serialized)
            self._connected = True
        except CACHE_ERRORS as e:
            self._failed("SET", key, e)

    async def delete(self, key: str) -> None:
        if self._client is None:
            return
        try:
            await self._client.delete(key)
        except CACHE_ERRORS as e:
            self._failed("DEL", key, e)

    async def invalidate_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern. Returns the number removed."""
        if self._client is None:
            return 0
        removed = 0
        try:
            batch: list[str] = []
            async for key in self._client.scan_iter(match=pattern, count=SCAN_BATCH_SIZE):
                batch.append(key)
                if len(batch) >= SCAN_BATCH_SIZE:
                    removed += await self._client.delete(*batch)
                    batch = []
            if batch:
                removed += await self._client.delete(*batch)
        except CACHE_ERRORS as e:
            self._failed("invalidation", f"pattern {pattern}", e)
            return removed
        if removed:
            logger.info(f"Invalidated {removed} cache keys matching: {pattern}")
        return removed

    async def clear(self) -> None:
        if self._client is None:
            return
        try:
            await self._client.flushdb()
            logger.info("All cache cleared")
        except CACHE_ERRORS as e:
            self._failed("CLEAR", "database", e)

    async def get_stats(self) -> dict[str, Any] | None:
        if self._client is None:
            return None
        try:
            stats = await self._client.info("stats")
            keyspace = await self._client.info("keyspace")
        except CACHE_ERRORS as e:
            self._failed("STATS", "server", e)
            return None
        return {
            "connected": self.is_connected(),
            "stats": stats,
            "keyspace": keyspace,
        }


cache_service = CacheService()


def get_cache_service() -> CacheService:
    return cache_service
