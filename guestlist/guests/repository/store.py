"""Guest store - persistence for guests and their history. Returns DTOs, never ORM models."""

import abc
import contextlib
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from guestlist.config.database import async_session_manager
from guestlist.guests.dtos import (
    GUEST_MUTABLE_FIELDS,
    DuplicateGuestError,
    GuestCreateDTO,
    GuestDTO,
    GuestFilterDTO,
    GuestNotFoundError,
    GuestPredicate,
    GuestStatus,
    GuestSummaryDTO,
    HistoryEntryDTO,
    HistoryFilterDTO,
    NewHistoryEntryDTO,
    PageRequestDTO,
)
from guestlist.guests.repository.orm_models import Guest, GuestHistory
from guestlist.guests.repository.queries import (
    apply_sort,
    build_guest_filters,
    build_predicate_filters,
    live,
    name_pair_clause,
)


def to_guest_dto(guest: Guest) -> GuestDTO:
    return GuestDTO(
        id=guest.id,
        first_name=guest.first_name,
        last_name=guest.last_name,
        address=guest.address,
        state=guest.state,
        city=guest.city,
        church=guest.church,
        phone=guest.phone,
        notes=guest.notes,
        status=GuestStatus(guest.status),
        is_pastor=bool(guest.is_pastor),
        created_at=guest.created_at,
        updated_at=guest.updated_at,
        deleted_at=guest.deleted_at,
    )


def to_history_dto(
    entry: GuestHistory,
    first_name: str | None = None,
    last_name: str | None = None,
) -> HistoryEntryDTO:
    guest = None
    if first_name is not None:
        guest = GuestSummaryDTO(id=entry.guest_id, first_name=first_name, last_name=last_name)
    return HistoryEntryDTO(
        id=entry.id,
        guest_id=entry.guest_id,
        action=entry.action,
        field=entry.field,
        old_value=entry.old_value,
        new_value=entry.new_value,
        created_at=entry.created_at,
        guest=guest,
    )


class GuestStore(abc.ABC):
    """Durable storage for the guest aggregate and its history."""

    @abc.abstractmethod
    async def find_live_by_name_pair(self, first_name: str, last_name: str | None) -> GuestDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def insert(self, data: GuestCreateDTO) -> GuestDTO:
        raise NotImplementedError

    @abc.abstractmethod
    async def find_live_by_id(self, guest_id: int) -> GuestDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def find_including_deleted(self, guest_id: int) -> GuestDTO | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def find_many(
        self, filters: GuestFilterDTO, page: PageRequestDTO
    ) -> tuple[list[GuestDTO], int]:
        raise NotImplementedError

    @abc.abstractmethod
    async def update(self, guest_id: int, patch: dict[str, Any]) -> GuestDTO:
        raise NotImplementedError

    @abc.abstractmethod
    async def soft_delete(self, guest_id: int) -> GuestDTO:
        raise NotImplementedError

    @abc.abstractmethod
    async def bulk_update_status(self, ids: list[int], status: GuestStatus) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    async def bulk_update_pastor(self, ids: list[int], is_pastor: bool) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    async def bulk_soft_delete(self, ids: list[int]) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    async def count_by_predicate(self, predicate: GuestPredicate) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    async def append_history(self, entry: NewHistoryEntryDTO) -> HistoryEntryDTO:
        raise NotImplementedError

    @abc.abstractmethod
    async def find_history(
        self, filters: HistoryFilterDTO, page: PageRequestDTO
    ) -> tuple[list[HistoryEntryDTO], int]:
        raise NotImplementedError


class SqlGuestStore(GuestStore):
    """SQL implementation of the guest store.

    Every operation runs in its own session, committed on success. Bulk
    operations are single UPDATE statements scoped to live rows.
    """

    def __init__(
        self,
        session_overwrite: AsyncSession | None = None,
        session_maker: async_sessionmaker | None = None,
    ) -> None:
        self._session_overwrite = session_overwrite
        self._session_maker = session_maker

    @contextlib.asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with async_session_manager(
            session_overwrite=self._session_overwrite,
            session_maker=self._session_maker,
        ) as session:
            yield session

    async def _get_live(self, session: AsyncSession, guest_id: int) -> Guest | None:
        result = await session.execute(select(Guest).where(Guest.id == guest_id, live()))
        return result.scalar_one_or_none()

    async def find_live_by_name_pair(self, first_name: str, last_name: str | None) -> GuestDTO | None:
        async with self._session() as session:
            result = await session.execute(
                select(Guest).where(name_pair_clause(first_name, last_name), live()).limit(1)
            )
            guest = result.scalar_one_or_none()
            return to_guest_dto(guest) if guest else None

    async def insert(self, data: GuestCreateDTO) -> GuestDTO:
        guest = Guest(
            first_name=data.first_name,
            last_name=data.last_name,
            address=data.address,
            state=data.state,
            city=data.city,
            church=data.church,
            phone=data.phone,
            notes=data.notes,
            status=data.status,
            is_pastor=data.is_pastor,
        )
        try:
            async with self._session() as session:
                session.add(guest)
                await session.flush()
                await session.refresh(guest)
                dto = to_guest_dto(guest)
        except IntegrityError as e:
            raise DuplicateGuestError(data.first_name, data.last_name) from e
        return dto

    async def find_live_by_id(self, guest_id: int) -> GuestDTO | None:
        async with self._session() as session:
            guest = await self._get_live(session, guest_id)
            return to_guest_dto(guest) if guest else None

    async def find_including_deleted(self, guest_id: int) -> GuestDTO | None:
        async with self._session() as session:
            guest = await session.get(Guest, guest_id)
            return to_guest_dto(guest) if guest else None

    async def find_many(
        self, filters: GuestFilterDTO, page: PageRequestDTO
    ) -> tuple[list[GuestDTO], int]:
        clauses = build_guest_filters(filters)
        async with self._session() as session:
            total = await session.scalar(select(func.count(Guest.id)).where(*clauses))

            stmt = apply_sort(select(Guest).where(*clauses), filters.sort_by, filters.sort_order)
            result = await session.execute(stmt.offset(page.offset).limit(page.limit))
            guests = [to_guest_dto(guest) for guest in result.scalars().all()]
            return guests, total or 0

    async def update(self, guest_id: int, patch: dict[str, Any]) -> GuestDTO:
        unknown = set(patch) - set(GUEST_MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        try:
            async with self._session() as session:
                guest = await self._get_live(session, guest_id)
                if not guest:
                    raise GuestNotFoundError(guest_id)
                for key, value in patch.items():
                    setattr(guest, key, value)
                guest.updated_at = datetime.now(UTC)
                await session.flush()
                await session.refresh(guest)
                dto = to_guest_dto(guest)
        except IntegrityError as e:
            raise DuplicateGuestError(
                patch.get("first_name", ""), patch.get("last_name")
            ) from e
        return dto

    async def soft_delete(self, guest_id: int) -> GuestDTO:
        async with self._session() as session:
            guest = await self._get_live(session, guest_id)
            if not guest:
                raise GuestNotFoundError(guest_id)
            now = datetime.now(UTC)
            guest.deleted_at = now
            guest.updated_at = now
            await session.flush()
            await session.refresh(guest)
            return to_guest_dto(guest)

    async def _bulk_update(self, ids: list[int], **values: Any) -> int:
        if not ids:
            return 0
        stmt = (
            update(Guest)
            .where(Guest.id.in_(ids), live())
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return result.rowcount

    async def bulk_update_status(self, ids: list[int], status: GuestStatus) -> int:
        return await self._bulk_update(ids, status=status, updated_at=datetime.now(UTC))

    async def bulk_update_pastor(self, ids: list[int], is_pastor: bool) -> int:
        return await self._bulk_update(ids, is_pastor=is_pastor, updated_at=datetime.now(UTC))

    async def bulk_soft_delete(self, ids: list[int]) -> int:
        now = datetime.now(UTC)
        return await self._bulk_update(ids, deleted_at=now, updated_at=now)

    async def count_by_predicate(self, predicate: GuestPredicate) -> int:
        async with self._session() as session:
            total = await session.scalar(
                select(func.count(Guest.id)).where(build_predicate_filters(predicate))
            )
            return total or 0

    async def append_history(self, entry: NewHistoryEntryDTO) -> HistoryEntryDTO:
        history = GuestHistory(
            guest_id=entry.guest_id,
            action=entry.action,
            field=entry.field,
            old_value=entry.old_value,
            new_value=entry.new_value,
        )
        async with self._session() as session:
            session.add(history)
            await session.flush()
            await session.refresh(history)
            return to_history_dto(history)

    async def find_history(
        self, filters: HistoryFilterDTO, page: PageRequestDTO
    ) -> tuple[list[HistoryEntryDTO], int]:
        clauses = []
        if filters.guest_id is not None:
            clauses.append(GuestHistory.guest_id == filters.guest_id)

        async with self._session() as session:
            total = await session.scalar(select(func.count(GuestHistory.id)).where(*clauses))

            stmt = (
                select(GuestHistory, Guest.first_name, Guest.last_name)
                .outerjoin(Guest, Guest.id == GuestHistory.guest_id)
                .where(*clauses)
                .order_by(GuestHistory.created_at.desc(), GuestHistory.id.desc())
                .offset(page.offset)
                .limit(page.limit)
            )
            result = await session.execute(stmt)
            entries = [
                to_history_dto(entry, first_name, last_name)
                for entry, first_name, last_name in result.all()
            ]
            return entries, total or 0
