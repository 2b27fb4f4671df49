"""Guest aggregate service - create, read, update, delete and bulk operations.

Write path: validate, duplicate-check, persist, record history, invalidate
cache. Read path: cache lookup, store query on miss, cache populate.
"""

import logging
import math
from dataclasses import asdict, replace
from typing import Any

from pydantic import TypeAdapter, ValidationError

from guestlist.cache.config import CacheKeys, CacheTTL
from guestlist.cache.service import CacheService, get_cache_service
from guestlist.guests.dtos import (
    GUEST_MUTABLE_FIELDS,
    GUEST_STRING_FIELDS,
    BulkResultDTO,
    DeleteResultDTO,
    DuplicateGuestError,
    GuestCreateDTO,
    GuestDetailDTO,
    GuestDTO,
    GuestFilterDTO,
    GuestNotFoundError,
    GuestPageDTO,
    GuestPredicate,
    GuestStatsDTO,
    GuestStatus,
    GuestValidationError,
    HistoryFilterDTO,
    HistoryPageDTO,
    PageMetaDTO,
    PageRequestDTO,
)
from guestlist.guests.history import HistoryRecorder, diff_changes
from guestlist.guests.repository.queries import resolve_sort_field, resolve_sort_order
from guestlist.guests.repository.store import GuestStore, SqlGuestStore

logger = logging.getLogger(__name__)

RECENT_HISTORY_LIMIT = 10
DEFAULT_HISTORY_LIMIT = 50

_guest_page_adapter = TypeAdapter(GuestPageDTO)
_guest_detail_adapter = TypeAdapter(GuestDetailDTO)
_stats_adapter = TypeAdapter(GuestStatsDTO)


def _clean(value: str | None) -> str | None:
    """Trim a string field; blank strings become ``None``."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _require_first_name(value: str | None) -> str:
    first_name = (value or "").strip()
    if not first_name:
        raise GuestValidationError("First name is required")
    return first_name


def _parse_status(value: Any) -> GuestStatus:
    try:
        return GuestStatus(value)
    except ValueError:
        raise GuestValidationError(f"Invalid status: {value!r}") from None


def _parse_flag(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise GuestValidationError(f"{name} must be a boolean, got {value!r}")
    return value


def _parse_positive_int(name: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise GuestValidationError(f"{name} must be a positive integer") from None
    if number < 1:
        raise GuestValidationError(f"{name} must be a positive integer")
    return number


def _validate_page(page: Any, limit: Any) -> PageRequestDTO:
    return PageRequestDTO(
        page=_parse_positive_int("page", page),
        limit=_parse_positive_int("limit", limit),
    )


def _page_meta(total: int, page: PageRequestDTO) -> PageMetaDTO:
    return PageMetaDTO(
        total=total,
        page=page.page,
        limit=page.limit,
        total_pages=math.ceil(total / page.limit),
    )


class GuestAggregateService:
    def __init__(
        self,
        store: GuestStore,
        cache: CacheService,
        history: HistoryRecorder | None = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._history = history or HistoryRecorder(store)

    # Cache helpers

    async def _cached(self, key: str, adapter: TypeAdapter) -> Any | None:
        payload = await self._cache.get(key)
        if payload is None:
            return None
        try:
            return adapter.validate_python(payload)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            return None

    async def _populate(self, key: str, adapter: TypeAdapter, value: Any, ttl: int) -> None:
        await self._cache.set(key, adapter.dump_python(value, mode="json"), ttl=ttl)

    async def _invalidate(self, *patterns: str) -> None:
        for pattern in patterns:
            await self._cache.invalidate_pattern(pattern)

    async def _invalidate_guest(self, guest_id: int) -> None:
        await self._invalidate(
            CacheKeys.ALL_LISTS,
            CacheKeys.guest_detail(guest_id),
            CacheKeys.STATS,
            CacheKeys.ALL_HISTORY,
        )

    # Writes

    async def create(self, data: GuestCreateDTO) -> GuestDTO:
        values = {key: _clean(getattr(data, key)) for key in GUEST_STRING_FIELDS}
        values["first_name"] = _require_first_name(data.first_name)
        cleaned = GuestCreateDTO(
            **values,
            status=_parse_status(data.status or GuestStatus.PENDING),
            is_pastor=False if data.is_pastor is None else _parse_flag("is_pastor", data.is_pastor),
        )

        existing = await self._store.find_live_by_name_pair(cleaned.first_name, cleaned.last_name)
        if existing:
            raise DuplicateGuestError(cleaned.first_name, cleaned.last_name)

        guest = await self._store.insert(cleaned)
        logger.info(f"Created guest {guest.id}")

        await self._history.record_create(guest.id)
        await self._invalidate(CacheKeys.ALL_LISTS, CacheKeys.STATS, CacheKeys.ALL_HISTORY)
        return guest

    def _clean_patch(self, patch: dict[str, Any]) -> dict[str, Any]:
        unknown = set(patch) - set(GUEST_MUTABLE_FIELDS)
        if unknown:
            raise GuestValidationError(f"Unknown guest fields: {', '.join(sorted(unknown))}")

        cleaned: dict[str, Any] = {}
        for key, value in patch.items():
            if key == "first_name":
                cleaned[key] = _require_first_name(value)
            elif key in GUEST_STRING_FIELDS:
                cleaned[key] = _clean(value)
            elif key == "status":
                cleaned[key] = _parse_status(value)
            elif key == "is_pastor":
                cleaned[key] = _parse_flag("is_pastor", value)
        return cleaned

    async def update(self, guest_id: int, patch: dict[str, Any]) -> GuestDTO:
        cleaned = self._clean_patch(patch)

        current = await self._store.find_live_by_id(guest_id)
        if not current:
            raise GuestNotFoundError(guest_id)

        changes = diff_changes(current, cleaned)
        updated = await self._store.update(guest_id, cleaned)
        if changes:
            logger.info(f"Updated guest {guest_id}: {', '.join(c.field for c in changes)}")

        await self._history.record_update(guest_id, changes)
        await self._invalidate_guest(guest_id)
        return updated

    async def remove(self, guest_id: int) -> DeleteResultDTO:
        current = await self._store.find_live_by_id(guest_id)
        if not current:
            raise GuestNotFoundError(guest_id)

        deleted = await self._store.soft_delete(guest_id)
        logger.info(f"Deleted guest {guest_id}")

        await self._history.record_delete(guest_id)
        await self._invalidate_guest(guest_id)
        return DeleteResultDTO(message="Guest deleted successfully", id=deleted.id)

    async def bulk_update_status(self, ids: list[int], status: GuestStatus) -> BulkResultDTO:
        status = _parse_status(status)
        count = await self._store.bulk_update_status(ids, status)
        logger.info(f"Bulk status {status.value}: {count} of {len(ids)} guests updated")

        await self._history.record_bulk_status(ids, status)
        await self._invalidate(CacheKeys.ALL)
        return BulkResultDTO(message=f"{count} guests updated successfully", count=count)

    async def bulk_update_pastor(self, ids: list[int], is_pastor: bool) -> BulkResultDTO:
        is_pastor = _parse_flag("is_pastor", is_pastor)
        count = await self._store.bulk_update_pastor(ids, is_pastor)
        logger.info(f"Bulk pastor={is_pastor}: {count} of {len(ids)} guests updated")

        await self._history.record_bulk_pastor(ids, is_pastor)
        await self._invalidate(CacheKeys.ALL)
        return BulkResultDTO(message=f"{count} guests updated successfully", count=count)

    async def bulk_delete(self, ids: list[int]) -> BulkResultDTO:
        count = await self._store.bulk_soft_delete(ids)
        logger.info(f"Bulk delete: {count} of {len(ids)} guests deleted")

        await self._history.record_bulk_delete(ids)
        await self._invalidate(CacheKeys.ALL)
        return BulkResultDTO(message=f"{count} guests deleted successfully", count=count)

    # Reads

    async def find_all(self, filters: GuestFilterDTO | None = None) -> GuestPageDTO:
        filters = filters or GuestFilterDTO()
        page = _validate_page(filters.page, filters.limit)
        filters = replace(
            filters,
            status=None if filters.status is None else _parse_status(filters.status),
            is_pastor=None if filters.is_pastor is None else _parse_flag("is_pastor", filters.is_pastor),
            page=page.page,
            limit=page.limit,
            sort_by=resolve_sort_field(filters.sort_by),
            sort_order=resolve_sort_order(filters.sort_order).value,
        )

        key = CacheKeys.guests_list(asdict(filters))
        cached = await self._cached(key, _guest_page_adapter)
        if cached is not None:
            return cached

        guests, total = await self._store.find_many(filters, page)
        result = GuestPageDTO(data=guests, meta=_page_meta(total, page))
        await self._populate(key, _guest_page_adapter, result, CacheTTL.GUESTS_LIST)
        return result

    async def find_one(self, guest_id: int) -> GuestDetailDTO:
        key = CacheKeys.guest_detail(guest_id)
        cached = await self._cached(key, _guest_detail_adapter)
        if cached is not None:
            return cached

        guest = await self._store.find_live_by_id(guest_id)
        if not guest:
            raise GuestNotFoundError(guest_id)

        history, _ = await self._store.find_history(
            HistoryFilterDTO(guest_id=guest_id),
            PageRequestDTO(page=1, limit=RECENT_HISTORY_LIMIT),
        )
        result = GuestDetailDTO(guest=guest, history=history)
        await self._populate(key, _guest_detail_adapter, result, CacheTTL.GUEST_DETAIL)
        return result

    async def get_stats(self) -> GuestStatsDTO:
        cached = await self._cached(CacheKeys.STATS, _stats_adapter)
        if cached is not None:
            return cached

        count = self._store.count_by_predicate
        stats = GuestStatsDTO(
            total=await count(GuestPredicate()),
            confirmed=await count(GuestPredicate(status=GuestStatus.CONFIRMED)),
            pending=await count(GuestPredicate(status=GuestStatus.PENDING)),
            declined=await count(GuestPredicate(status=GuestStatus.DECLINED)),
            pastors=await count(GuestPredicate(is_pastor=True)),
        )
        await self._populate(CacheKeys.STATS, _stats_adapter, stats, CacheTTL.STATS)
        return stats

    async def get_history(self, page: int = 1, limit: int = DEFAULT_HISTORY_LIMIT) -> HistoryPageDTO:
        page_request = _validate_page(page, limit)
        entries, total = await self._store.find_history(HistoryFilterDTO(), page_request)
        return HistoryPageDTO(data=entries, meta=_page_meta(total, page_request))

    async def get_guest_history(
        self, guest_id: int, page: int = 1, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> HistoryPageDTO:
        page_request = _validate_page(page, limit)
        # History outlives soft deletes, so only a guest that never existed is missing.
        if not await self._store.find_including_deleted(guest_id):
            raise GuestNotFoundError(guest_id)

        entries, total = await self._store.find_history(
            HistoryFilterDTO(guest_id=guest_id), page_request
        )
        return HistoryPageDTO(data=entries, meta=_page_meta(total, page_request))


def get_guest_service() -> GuestAggregateService:
    """Dependency to get the guest service instance."""
    store = SqlGuestStore()
    return GuestAggregateService(store=store, cache=get_cache_service())
