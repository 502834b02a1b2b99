"""Single-column ordering of the visible rows."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple

from loadgrid.domain.models import SortDirection, StaffRecord
from loadgrid.engine.columns import GridColumn

TEXT_COLUMNS: Dict[str, Callable[[StaffRecord], str]] = {
    "name": lambda row: row.name,
    "division": lambda row: row.division,
    "role": lambda row: row.role or "",
}

NUMERIC_COLUMNS: Dict[str, Callable[[StaffRecord], float]] = {
    "capacity": lambda row: row.capacity,
    "consumed": lambda row: row.consumed_load,
    "remaining": lambda row: row.remaining_capacity,
    "preps": lambda row: row.preps,
    "students": lambda row: row.student_total,
    "excluded": lambda row: row.excluded_count,
}


def next_sort(
    current_column: Optional[str], current_direction: SortDirection, clicked_column: str
) -> Tuple[Optional[str], SortDirection]:
    """Header click cycle: none -> asc -> desc -> none; a new column starts at asc."""
    if clicked_column != current_column or current_direction is SortDirection.NONE:
        return clicked_column, SortDirection.ASC
    if current_direction is SortDirection.ASC:
        return clicked_column, SortDirection.DESC
    return None, SortDirection.NONE


def _cell_load(column: GridColumn) -> Callable[[StaffRecord], float]:
    def key(row: StaffRecord) -> float:
        return sum(
            a.load for a in row.assignments if a.group == column.group_id and a.course_name == column.label
        )

    return key


def sort_key_for(column: str, catalog: Iterable[GridColumn] = ()) -> Optional[Callable[[StaffRecord], object]]:
    if column in TEXT_COLUMNS:
        return TEXT_COLUMNS[column]
    if column in NUMERIC_COLUMNS:
        return NUMERIC_COLUMNS[column]
    for grid_column in catalog:
        if grid_column.key == column:
            return _cell_load(grid_column)
    return None


def sort_rows(
    rows: Sequence[StaffRecord],
    column: Optional[str],
    direction: SortDirection,
    catalog: Iterable[GridColumn] = (),
) -> Tuple[StaffRecord, ...]:
    """Stable sort by one column. Ties keep their incoming relative order in both directions."""
    if column is None or direction is SortDirection.NONE:
        return tuple(rows)
    key = sort_key_for(column, catalog)
    if key is None:
        return tuple(rows)
    return tuple(sorted(rows, key=key, reverse=direction is SortDirection.DESC))


def sortable_columns(catalog: Iterable[GridColumn] = ()) -> Tuple[str, ...]:
    return tuple(TEXT_COLUMNS) + tuple(NUMERIC_COLUMNS) + tuple(column.key for column in catalog)
