"""Filter and sort construction for guest list queries.

User-supplied sort keys never reach SQL directly: they are resolved against an
allow-list of mapped columns and fall back to ``created_at``.
"""

from sqlalchemy import ColumnElement, Select, and_, func, or_

from guestlist.guests.dtos import GuestFilterDTO, GuestPredicate, SortOrder
from guestlist.guests.repository.orm_models import Guest

DEFAULT_SORT_FIELD = "created_at"

SORTABLE_COLUMNS = {
    "id": Guest.id,
    "first_name": Guest.first_name,
    "last_name": Guest.last_name,
    "church": Guest.church,
    "city": Guest.city,
    "state": Guest.state,
    "status": Guest.status,
    "is_pastor": Guest.is_pastor,
    "created_at": Guest.created_at,
    "updated_at": Guest.updated_at,
}

# camelCase spellings sent by the web client.
SORT_ALIASES = {
    "firstName": "first_name",
    "lastName": "last_name",
    "isPastor": "is_pastor",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

SEARCHABLE_COLUMNS = (
    Guest.first_name,
    Guest.last_name,
    Guest.church,
    Guest.city,
    Guest.state,
    Guest.phone,
    Guest.address,
)


def resolve_sort_field(sort_by: str | None) -> str:
    """Map a requested sort key to an allow-listed field name."""
    if not sort_by:
        return DEFAULT_SORT_FIELD
    sort_by = SORT_ALIASES.get(sort_by, sort_by)
    if sort_by not in SORTABLE_COLUMNS:
        return DEFAULT_SORT_FIELD
    return sort_by


def resolve_sort_order(sort_order: str | None) -> SortOrder:
    try:
        return SortOrder((sort_order or "").lower())
    except ValueError:
        return SortOrder.DESC


def _contains(column, value: str) -> ColumnElement[bool]:
    return column.icontains(value, autoescape=True)


def live() -> ColumnElement[bool]:
    return Guest.deleted_at.is_(None)


def build_guest_filters(filters: GuestFilterDTO) -> list[ColumnElement[bool]]:
    """Build the WHERE clauses for a guest list query.

    Free-text ``search`` is OR-matched across all searchable columns, but only
    when none of the field-specific filters (first_name, last_name, phone,
    address) is given. Field-specific filters are AND-matched.
    """
    clauses: list[ColumnElement[bool]] = [live()]

    if filters.status is not None:
        clauses.append(Guest.status == filters.status)
    if filters.is_pastor is not None:
        clauses.append(Guest.is_pastor.is_(filters.is_pastor))
    if filters.church:
        clauses.append(_contains(Guest.church, filters.church))
    if filters.city:
        clauses.append(_contains(Guest.city, filters.city))
    if filters.state:
        clauses.append(_contains(Guest.state, filters.state))

    if filters.first_name:
        clauses.append(_contains(Guest.first_name, filters.first_name))
    if filters.last_name:
        clauses.append(_contains(Guest.last_name, filters.last_name))
    if filters.phone:
        clauses.append(_contains(Guest.phone, filters.phone))
    if filters.address:
        clauses.append(_contains(Guest.address, filters.address))

    if filters.search and not filters.has_field_search:
        clauses.append(or_(*(_contains(column, filters.search) for column in SEARCHABLE_COLUMNS)))

    return clauses


def build_predicate_filters(predicate: GuestPredicate) -> ColumnElement[bool]:
    clauses = [live()]
    if predicate.status is not None:
        clauses.append(Guest.status == predicate.status)
    if predicate.is_pastor is not None:
        clauses.append(Guest.is_pastor.is_(predicate.is_pastor))
    return and_(*clauses)


def apply_sort(stmt: Select, sort_by: str | None, sort_order: str | None) -> Select:
    """Order by the resolved column, with ``id`` as a stable tiebreaker."""
    field = resolve_sort_field(sort_by)
    column = SORTABLE_COLUMNS[field]
    if resolve_sort_order(sort_order) is SortOrder.ASC:
        return stmt.order_by(column.asc(), Guest.id.asc())
    return stmt.order_by(column.desc(), Guest.id.desc())


def normalized_name(value: str | None) -> str:
    return (value or "").strip().lower()


def name_pair_clause(first_name: str, last_name: str | None) -> ColumnElement[bool]:
    return and_(
        func.lower(func.trim(Guest.first_name)) == normalized_name(first_name),
        func.lower(func.trim(func.coalesce(Guest.last_name, ""))) == normalized_name(last_name),
    )
