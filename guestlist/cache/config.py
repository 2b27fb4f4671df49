"""Cache key namespaces and TTLs for guest resources."""

import json
from typing import Any

from guestlist.config.settings import settings

NAMESPACE = "guests"


class CacheKeys:
    GUESTS_LIST = f"{NAMESPACE}:list"
    GUEST_DETAIL = f"{NAMESPACE}:detail"
    STATS = f"{NAMESPACE}:stats"
    HISTORY = f"{NAMESPACE}:history"

    # Invalidation patterns
    ALL = f"{NAMESPACE}:*"
    ALL_LISTS = f"{GUESTS_LIST}:*"
    ALL_HISTORY = f"{HISTORY}:*"

    @staticmethod
    def serialize(params: dict[str, Any]) -> str:
        """Deterministic encoding of query parameters; ``None`` values are dropped."""
        normalized = {key: value for key, value in params.items() if value is not None}
        return json.dumps(normalized, sort_keys=True, separators=(",", ":"), default=str)

    @classmethod
    def guests_list(cls, params: dict[str, Any]) -> str:
        return f"{cls.GUESTS_LIST}:{cls.serialize(params)}"

    @classmethod
    def guest_detail(cls, guest_id: int) -> str:
        return f"{cls.GUEST_DETAIL}:{guest_id}"


class CacheTTL:
    GUESTS_LIST = settings.cache_ttl_guests_list
    GUEST_DETAIL = settings.cache_ttl_guest_detail
    STATS = settings.cache_ttl_stats
    HISTORY = settings.cache_ttl_history
