"""Response models shared by the guest feature routers."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from guestlist.guests.dtos import GuestStatus, HistoryAction


class GuestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str | None = None
    address: str | None = None
    state: str | None = None
    city: str | None = None
    church: str | None = None
    phone: str | None = None
    notes: str | None = None
    status: GuestStatus
    is_pastor: bool
    created_at: datetime
    updated_at: datetime


class GuestSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str | None = None


class HistoryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    guest_id: int
    action: HistoryAction
    field: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    created_at: datetime
    guest: GuestSummaryResponse | None = None


class PageMetaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    page: int
    limit: int
    total_pages: int


class GuestListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    data: list[GuestResponse]
    meta: PageMetaResponse


class GuestDetailResponse(GuestResponse):
    history: list[HistoryEntryResponse] = []


class HistoryListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    data: list[HistoryEntryResponse]
    meta: PageMetaResponse


class GuestStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    confirmed: int
    pending: int
    declined: int
    pastors: int


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    message: str


class DeleteGuestResponse(MessageResponse):
    id: int


class BulkOperationResponse(MessageResponse):
    count: int
