from fastapi import APIRouter, Depends, Query

from guestlist.guests.dtos import GuestFilterDTO, GuestStatus
from guestlist.guests.schemas import (
    GuestDetailResponse,
    GuestListResponse,
    GuestResponse,
    GuestStatsResponse,
    HistoryEntryResponse,
)
from guestlist.guests.service import GuestAggregateService, get_guest_service
from guestlist.guests.urls import GUEST_STATS_URL, GUEST_URL, GUESTS_URL

router = APIRouter()


@router.get(GUESTS_URL, response_model=GuestListResponse)
async def list_guests(
    search: str | None = Query(None, description="Free-text search across name, church, location and phone"),
    first_name: str | None = Query(None),
    last_name: str | None = Query(None),
    phone: str | None = Query(None),
    address: str | None = Query(None),
    status: GuestStatus | None = Query(None, description="Filter by RSVP status"),
    is_pastor: bool | None = Query(None),
    church: str | None = Query(None),
    city: str | None = Query(None),
    state: str | None = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    service: GuestAggregateService = Depends(get_guest_service),
) -> GuestListResponse:
    """
    List live guests with filters, sorting and pagination.
    Field-specific filters (first_name, last_name, phone, address) take
    precedence over the free-text search.
    """
    result = await service.find_all(
        GuestFilterDTO(
            search=search,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            address=address,
            status=status,
            is_pastor=is_pastor,
            church=church,
            city=city,
            state=state,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
    )
    return GuestListResponse.model_validate(result)


@router.get(GUEST_STATS_URL, response_model=GuestStatsResponse)
async def get_stats(
    service: GuestAggregateService = Depends(get_guest_service),
) -> GuestStatsResponse:
    """
    Counts of live guests by status, plus pastors.
    """
    return GuestStatsResponse.model_validate(await service.get_stats())


@router.get(GUEST_URL, response_model=GuestDetailResponse)
async def get_guest(
    guest_id: int,
    service: GuestAggregateService = Depends(get_guest_service),
) -> GuestDetailResponse:
    """
    Get a live guest with its 10 most recent history entries.
    """
    detail = await service.find_one(guest_id)
    return GuestDetailResponse(
        **GuestResponse.model_validate(detail.guest).model_dump(),
        history=[HistoryEntryResponse.model_validate(entry) for entry in detail.history],
    )
