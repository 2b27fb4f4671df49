from fastapi import APIRouter, Depends
from pydantic import BaseModel

from guestlist.guests.dtos import GuestStatus
from guestlist.guests.schemas import BulkOperationResponse
from guestlist.guests.service import GuestAggregateService, get_guest_service
from guestlist.guests.urls import BULK_DELETE_URL, BULK_PASTOR_URL, BULK_STATUS_URL

router = APIRouter()


class BulkDeleteRequest(BaseModel):
    ids: list[int]


class BulkStatusRequest(BulkDeleteRequest):
    status: GuestStatus


class BulkPastorRequest(BulkDeleteRequest):
    is_pastor: bool


@router.post(BULK_STATUS_URL, response_model=BulkOperationResponse)
async def bulk_update_status(
    request: BulkStatusRequest,
    service: GuestAggregateService = Depends(get_guest_service),
) -> BulkOperationResponse:
    """
    Set the status of several guests at once.
    The count only includes live guests that were actually updated.
    """
    result = await service.bulk_update_status(request.ids, request.status)
    return BulkOperationResponse.model_validate(result)


@router.post(BULK_PASTOR_URL, response_model=BulkOperationResponse)
async def bulk_update_pastor(
    request: BulkPastorRequest,
    service: GuestAggregateService = Depends(get_guest_service),
) -> BulkOperationResponse:
    result = await service.bulk_update_pastor(request.ids, request.is_pastor)
    return BulkOperationResponse.model_validate(result)


@router.post(BULK_DELETE_URL, response_model=BulkOperationResponse)
async def bulk_delete(
    request: BulkDeleteRequest,
    service: GuestAggregateService = Depends(get_guest_service),
) -> BulkOperationResponse:
    result = await service.bulk_delete(request.ids)
    return BulkOperationResponse.model_validate(result)
