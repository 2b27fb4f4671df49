import sqlalchemy as sa
from sqlalchemy import Boolean, Enum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from guestlist.config.table_names import TableNames
from guestlist.guests.dtos import GuestStatus, HistoryAction
from guestlist.models.base import Base, CreatedAt, SoftDelete, TimeStamp


class Guest(Base, TimeStamp, SoftDelete):
    __tablename__ = TableNames.GUESTS.value

    first_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    church: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[GuestStatus] = mapped_column(
        Enum(GuestStatus, name="guest_status_enum"),
        default=GuestStatus.PENDING,
        nullable=False,
        index=True,
    )
    is_pastor: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Guest {self.id} {self.first_name} {self.last_name or ''} - {self.status.value}>"


# At most one live guest per normalized name pair.
Index(
    "uq_guests_live_name_pair",
    sa.func.lower(sa.func.trim(Guest.first_name)),
    sa.func.lower(sa.func.trim(sa.func.coalesce(Guest.last_name, ""))),
    unique=True,
    postgresql_where=Guest.deleted_at.is_(None),
    sqlite_where=Guest.deleted_at.is_(None),
)


class GuestHistory(Base, CreatedAt):
    __tablename__ = TableNames.GUEST_HISTORY.value

    # Weak reference: history is written for requested ids even when the
    # guest row is missing, and it outlives soft deletes.
    guest_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    action: Mapped[HistoryAction] = mapped_column(
        Enum(HistoryAction, name="history_action_enum"),
        nullable=False,
    )
    field: Mapped[str | None] = mapped_column(String(50), nullable=True)
    old_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<GuestHistory {self.action.value} {self.field or ''} for guest {self.guest_id}>"
