from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class GuestError(Exception):
    """Base class for errors that cross the guest service boundary."""


class GuestNotFoundError(GuestError):
    """Raised when no live guest exists for the requested id."""

    def __init__(self, guest_id: int) -> None:
        self.guest_id = guest_id
        super().__init__(f"Guest with ID {guest_id} not found")


class DuplicateGuestError(GuestError):
    """Raised when a live guest with the same name pair already exists."""

    def __init__(self, first_name: str, last_name: str | None) -> None:
        self.first_name = first_name
        self.last_name = last_name
        super().__init__("A guest with this name already exists")


class GuestValidationError(GuestError):
    """Raised for malformed input before the store is touched."""


class GuestStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"


class HistoryAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    STATUS_CHANGE = "STATUS_CHANGE"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# Fields a caller may set on create or patch on update.
GUEST_STRING_FIELDS = (
    "first_name",
    "last_name",
    "address",
    "state",
    "city",
    "church",
    "phone",
    "notes",
)
GUEST_MUTABLE_FIELDS = GUEST_STRING_FIELDS + ("status", "is_pastor")


@dataclass(frozen=True)
class GuestDTO:
    """A guest row as seen outside the repository."""

    id: int
    first_name: str
    status: GuestStatus
    is_pastor: bool
    created_at: datetime
    updated_at: datetime
    last_name: str | None = None
    address: str | None = None
    state: str | None = None
    city: str | None = None
    church: str | None = None
    phone: str | None = None
    notes: str | None = None
    deleted_at: datetime | None = None


@dataclass(frozen=True)
class GuestCreateDTO:
    first_name: str
    last_name: str | None = None
    address: str | None = None
    state: str | None = None
    city: str | None = None
    church: str | None = None
    phone: str | None = None
    notes: str | None = None
    status: GuestStatus = GuestStatus.PENDING
    is_pastor: bool = False


@dataclass(frozen=True)
class GuestSummaryDTO:
    id: int
    first_name: str
    last_name: str | None = None


@dataclass(frozen=True)
class HistoryEntryDTO:
    id: int
    guest_id: int
    action: HistoryAction
    created_at: datetime
    field: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    guest: GuestSummaryDTO | None = None


@dataclass(frozen=True)
class NewHistoryEntryDTO:
    """A history entry that has not been written yet."""

    guest_id: int
    action: HistoryAction
    field: str | None = None
    old_value: str | None = None
    new_value: str | None = None


@dataclass(frozen=True)
class GuestDetailDTO:
    guest: GuestDTO
    history: list[HistoryEntryDTO] = field(default_factory=list)


@dataclass(frozen=True)
class GuestFilterDTO:
    """Filter, sort and pagination input for listing guests."""

    search: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    address: str | None = None
    status: GuestStatus | None = None
    is_pastor: bool | None = None
    church: str | None = None
    city: str | None = None
    state: str | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"
    page: int = 1
    limit: int = 20

    @property
    def has_field_search(self) -> bool:
        """Field-specific search takes precedence over free-text search."""
        return any((self.first_name, self.last_name, self.phone, self.address))


@dataclass(frozen=True)
class GuestPredicate:
    """Live-scoped predicate used for statistics counts."""

    status: GuestStatus | None = None
    is_pastor: bool | None = None


@dataclass(frozen=True)
class HistoryFilterDTO:
    guest_id: int | None = None


@dataclass(frozen=True)
class PageRequestDTO:
    page: int = 1
    limit: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class PageMetaDTO:
    total: int
    page: int
    limit: int
    total_pages: int


@dataclass(frozen=True)
class GuestPageDTO:
    data: list[GuestDTO]
    meta: PageMetaDTO


@dataclass(frozen=True)
class HistoryPageDTO:
    data: list[HistoryEntryDTO]
    meta: PageMetaDTO


@dataclass(frozen=True)
class GuestStatsDTO:
    total: int
    confirmed: int
    pending: int
    declined: int
    pastors: int


@dataclass(frozen=True)
class BulkResultDTO:
    message: str
    count: int


@dataclass(frozen=True)
class DeleteResultDTO:
    message: str
    id: int
