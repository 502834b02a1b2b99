"""Multi-level totals over the visible grid.

Totals are rebuilt from scratch on every call. There is no delta bookkeeping, so
the figures are always exactly those of the rows and columns passed in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Sequence

from loadgrid.config import DIVISIONS
from loadgrid.domain.models import StaffRecord
from loadgrid.engine.columns import GridColumn, index_catalog


@dataclass
class ColumnTotals:
    load_sum: int = 0
    student_sum: int = 0
    section_count_from_catalog: int = 0
    remaining_from_capacity: int = 0
    periods_per_student: float = 0.0
    staffed_count: int = 0  # Cells reporting at least one student


@dataclass
class DivisionTotals:
    row_count: int = 0
    load_sum: int = 0
    student_sum: int = 0


@dataclass
class GlobalTotals:
    row_count: int = 0
    capacity_sum: int = 0
    consumed_sum: int = 0
    remaining_sum: int = 0
    student_sum: int = 0
    preps_sum: int = 0
    excluded_sum: int = 0


@dataclass
class Totals:
    columns: Dict[str, ColumnTotals] = field(default_factory=dict)
    divisions: Dict[str, DivisionTotals] = field(default_factory=dict)
    grand: GlobalTotals = field(default_factory=GlobalTotals)

    def column(self, key: str) -> ColumnTotals:
        return self.columns.get(key, ColumnTotals())


def aggregate(visible_rows: Sequence[StaffRecord], columns: Iterable[GridColumn]) -> Totals:
    """Single pass over the visible rows, bucketing each resolvable cell.

    Column and division buckets only see assignments rendered in a visible column.
    Capacity, consumed and remaining figures are per-row and ignore column visibility.
    """
    catalog = list(columns)
    index = index_catalog(catalog)
    totals = Totals(
        columns={column.key: ColumnTotals() for column in catalog},
        divisions={division: DivisionTotals() for division in DIVISIONS},
    )
    grand = totals.grand

    for row in visible_rows:
        division = totals.divisions.setdefault(row.division, DivisionTotals())
        division.row_count += 1

        grand.row_count += 1
        grand.capacity_sum += row.capacity
        grand.consumed_sum += row.consumed_load
        grand.remaining_sum += row.remaining_capacity
        grand.preps_sum += row.preps
        grand.excluded_sum += row.excluded_count

        for assignment in row.assignments:
            column = index.get((assignment.group, assignment.course_name))
            if column is None:
                continue
            students = assignment.student_count or 0
            bucket = totals.columns[column.key]
            bucket.load_sum += assignment.load
            bucket.student_sum += students
            if students > 0:
                bucket.staffed_count += 1

            division.load_sum += assignment.load
            division.student_sum += students
            grand.student_sum += students

    for column in catalog:
        bucket = totals.columns[column.key]
        stat = column.stat
        if stat is not None:
            bucket.section_count_from_catalog = stat.total_sections
            if stat.periods_per_cycle > 0:
                bucket.remaining_from_capacity = stat.periods_per_cycle - bucket.load_sum
        if bucket.student_sum > 0:
            bucket.periods_per_student = bucket.load_sum / bucket.student_sum

    return totals


def grid_load_total(totals: Totals) -> int:
    return sum(bucket.load_sum for bucket in totals.columns.values())


def over_threshold(row: StaffRecord, threshold: int) -> bool:
    """Alert flag for rows carrying more excluded-from-load slots than the threshold."""
    return row.excluded_count > threshold
