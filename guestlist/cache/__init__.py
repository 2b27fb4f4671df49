from guestlist.cache.config import CacheKeys, CacheTTL
from guestlist.cache.interceptor import CacheInterceptor
from guestlist.cache.service import CacheService, cache_service, get_cache_service

__all__ = [
    "CacheInterceptor",
    "CacheKeys",
    "CacheService",
    "CacheTTL",
    "cache_service",
    "get_cache_service",
]
