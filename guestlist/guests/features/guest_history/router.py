from fastapi import APIRouter, Depends, Query, Request

from guestlist.cache.config import CacheKeys, CacheTTL
from guestlist.cache.interceptor import CacheInterceptor
from guestlist.cache.service import CacheService, get_cache_service
from guestlist.guests.schemas import HistoryListResponse
from guestlist.guests.service import (
    DEFAULT_HISTORY_LIMIT,
    GuestAggregateService,
    get_guest_service,
)
from guestlist.guests.urls import GUEST_HISTORY_URL, GUESTS_HISTORY_URL

router = APIRouter()


def get_history_interceptor(cache: CacheService = Depends(get_cache_service)) -> CacheInterceptor:
    """Dependency to get the read-through cache for history endpoints."""
    return CacheInterceptor(cache, prefix=CacheKeys.HISTORY, ttl=CacheTTL.HISTORY)


@router.get(GUESTS_HISTORY_URL, response_model=HistoryListResponse)
async def get_history(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1),
    service: GuestAggregateService = Depends(get_guest_service),
    interceptor: CacheInterceptor = Depends(get_history_interceptor),
):
    """
    Complete audit history, newest first.
    """

    async def handler():
        history = await service.get_history(page=page, limit=limit)
        return HistoryListResponse.model_validate(history).model_dump(mode="json")

    return await interceptor.intercept(request, handler)


@router.get(GUEST_HISTORY_URL, response_model=HistoryListResponse)
async def get_guest_history(
    request: Request,
    guest_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1),
    service: GuestAggregateService = Depends(get_guest_service),
    interceptor: CacheInterceptor = Depends(get_history_interceptor),
):
    """
    Audit history for one guest, including guests that have been deleted.
    """

    async def handler():
        history = await service.get_guest_history(guest_id, page=page, limit=limit)
        return HistoryListResponse.model_validate(history).model_dump(mode="json")

    return await interceptor.intercept(request, handler)
