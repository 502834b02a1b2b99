"""Collapse-state filters shared by the window, aggregation and sort stages."""

from __future__ import annotations

from typing import AbstractSet, Dict, Iterable, List, Sequence, Tuple

from loadgrid.config import DIVISIONS
from loadgrid.domain.models import GroupDefinition, StaffRecord


def visible_rows(rows: Sequence[StaffRecord], collapsed_divisions: AbstractSet[str]) -> Tuple[StaffRecord, ...]:
    """Rows whose division is not collapsed, in their original order."""
    return tuple(row for row in rows if row.division not in collapsed_divisions)


def ordered_groups(groups: Iterable[GroupDefinition]) -> List[GroupDefinition]:
    # sorted() is stable, so groups sharing an order keep their catalog position.
    return sorted(groups, key=lambda group: group.order)


def visible_columns(
    groups: Iterable[GroupDefinition], collapsed_groups: AbstractSet[str]
) -> Tuple[Tuple[GroupDefinition, str], ...]:
    """Flatten (group, column id) pairs of every expanded group, by display order then column order."""
    return tuple(
        (group, column_id)
        for group in ordered_groups(groups)
        if group.id not in collapsed_groups
        for column_id in group.columns
    )


def division_counts(rows: Iterable[StaffRecord]) -> Dict[str, int]:
    counts = {division: 0 for division in DIVISIONS}
    for row in rows:
        counts[row.division] = counts.get(row.division, 0) + 1
    return counts
