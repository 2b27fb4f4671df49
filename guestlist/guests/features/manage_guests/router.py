from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from guestlist.guests.dtos import GuestCreateDTO, GuestStatus
from guestlist.guests.schemas import DeleteGuestResponse, GuestResponse
from guestlist.guests.service import GuestAggregateService, get_guest_service
from guestlist.guests.urls import GUEST_URL, GUESTS_URL

router = APIRouter()


class GuestCreateRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    address: str | None = Field(default=None, max_length=255)
    state: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=100)
    church: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=20)
    notes: str | None = None
    status: GuestStatus = GuestStatus.PENDING
    is_pastor: bool = False


class GuestUpdateRequest(BaseModel):
    """Partial update; only the fields sent are applied."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    address: str | None = Field(default=None, max_length=255)
    state: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=100)
    church: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=20)
    notes: str | None = None
    status: GuestStatus | None = None
    is_pastor: bool | None = None


@router.post(GUESTS_URL, response_model=GuestResponse, status_code=status.HTTP_201_CREATED)
async def create_guest(
    guest_data: GuestCreateRequest,
    service: GuestAggregateService = Depends(get_guest_service),
) -> GuestResponse:
    """
    Create a new guest.
    Fails with 409 when a live guest with the same name already exists.
    """
    guest = await service.create(GuestCreateDTO(**guest_data.model_dump()))
    return GuestResponse.model_validate(guest)


@router.patch(GUEST_URL, response_model=GuestResponse)
async def update_guest(
    guest_id: int,
    guest_data: GuestUpdateRequest,
    service: GuestAggregateService = Depends(get_guest_service),
) -> GuestResponse:
    """
    Update a guest. Every changed field is recorded in the guest's history.
    """
    guest = await service.update(guest_id, guest_data.model_dump(exclude_unset=True))
    return GuestResponse.model_validate(guest)


@router.delete(GUEST_URL, response_model=DeleteGuestResponse)
async def delete_guest(
    guest_id: int,
    service: GuestAggregateService = Depends(get_guest_service),
) -> DeleteGuestResponse:
    """
    Soft delete a guest. The guest's history remains readable.
    """
    result = await service.remove(guest_id)
    return DeleteGuestResponse.model_validate(result)
