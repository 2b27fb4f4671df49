"""Audit trail recording for guest mutations.

History is best-effort: a failed append is logged and never undoes or fails
the mutation it describes.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from guestlist.guests.dtos import (
    GuestDTO,
    GuestStatus,
    HistoryAction,
    HistoryEntryDTO,
    NewHistoryEntryDTO,
)
from guestlist.guests.repository.store import GuestStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldChange:
    field: str
    old_value: str | None
    new_value: str | None


def stringify(value: Any) -> str | None:
    """Snapshot a field value the way it is stored in history."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def diff_changes(before: GuestDTO, patch: dict[str, Any]) -> list[FieldChange]:
    """Compare each patched field against the current snapshot, skipping no-ops."""
    changes = []
    for key, new in patch.items():
        old_value = stringify(getattr(before, key))
        new_value = stringify(new)
        if old_value != new_value:
            changes.append(FieldChange(field=key, old_value=old_value, new_value=new_value))
    return changes


class HistoryRecorder:
    def __init__(self, store: GuestStore) -> None:
        self._store = store

    async def _append(self, entry: NewHistoryEntryDTO) -> HistoryEntryDTO | None:
        try:
            return await self._store.append_history(entry)
        except Exception:
            logger.exception(
                f"Failed to record {entry.action.value} history for guest {entry.guest_id}"
            )
            return None

    async def _append_many(self, entries: list[NewHistoryEntryDTO]) -> list[HistoryEntryDTO]:
        # Sequential and independent: one failure does not stop the rest.
        written = []
        for entry in entries:
            result = await self._append(entry)
            if result is not None:
                written.append(result)
        return written

    async def record_create(self, guest_id: int) -> HistoryEntryDTO | None:
        return await self._append(NewHistoryEntryDTO(guest_id=guest_id, action=HistoryAction.CREATE))

    async def record_update(self, guest_id: int, changes: list[FieldChange]) -> list[HistoryEntryDTO]:
        return await self._append_many(
            [
                NewHistoryEntryDTO(
                    guest_id=guest_id,
                    action=HistoryAction.UPDATE,
                    field=change.field,
                    old_value=change.old_value,
                    new_value=change.new_value,
                )
                for change in changes
            ]
        )

    async def record_delete(self, guest_id: int) -> HistoryEntryDTO | None:
        return await self._append(NewHistoryEntryDTO(guest_id=guest_id, action=HistoryAction.DELETE))

    async def record_bulk_status(self, ids: list[int], status: GuestStatus) -> list[HistoryEntryDTO]:
        # Bulk statements do not capture each row's prior value.
        return await self._append_many(
            [
                NewHistoryEntryDTO(
                    guest_id=guest_id,
                    action=HistoryAction.STATUS_CHANGE,
                    field="status",
                    new_value=stringify(status),
                )
                for guest_id in ids
            ]
        )

    async def record_bulk_pastor(self, ids: list[int], is_pastor: bool) -> list[HistoryEntryDTO]:
        return await self._append_many(
            [
                NewHistoryEntryDTO(
                    guest_id=guest_id,
                    action=HistoryAction.UPDATE,
                    field="is_pastor",
                    new_value=stringify(is_pastor),
                )
                for guest_id in ids
            ]
        )

    async def record_bulk_delete(self, ids: list[int]) -> list[HistoryEntryDTO]:
        return await self._append_many(
            [NewHistoryEntryDTO(guest_id=guest_id, action=HistoryAction.DELETE) for guest_id in ids]
        )
