"""Cross-check assigned loads against the catalog's per-column reference figures."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from loadgrid.config import MAX_STUDENTS_PER_SECTION, MIN_STUDENTS_PER_SECTION
from loadgrid.domain.models import GroupDefinition, StaffRecord
from loadgrid.engine.columns import column_id_for


@dataclass(frozen=True)
class IntegrityIssue:
    column_id: str
    expected_load: int
    actual_load: int
    reasons: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class IntegrityReport:
    checked: int
    issues: List[IntegrityIssue]

    @property
    def passed(self) -> int:
        return self.checked - len(self.issues)

    @property
    def ok(self) -> bool:
        return not self.issues


def verify_integrity(rows: Iterable[StaffRecord], groups: Sequence[GroupDefinition]) -> IntegrityReport:
    """Every catalog column should carry exactly sections x periods of assigned load."""
    actual: Dict[str, int] = defaultdict(int)
    for row in rows:
        for assignment in row.assignments:
            actual[column_id_for(assignment.group, assignment.course_name)] += assignment.load

    checked = 0
    issues: List[IntegrityIssue] = []
    for group in groups:
        for stat in group.column_stats:
            checked += 1
            expected = stat.total_sections * stat.periods_per_cycle
            found = actual.get(stat.column_id, 0)
            reasons = []
            if found != expected:
                reasons.append(f"Load mismatch: expected {expected}, got {found}")
            if stat.remaining_period != 0:
                reasons.append(f"remainingPeriod should be 0, got {stat.remaining_period}")
            if not MIN_STUDENTS_PER_SECTION <= stat.students_per_section <= MAX_STUDENTS_PER_SECTION:
                reasons.append(
                    f"studentsPerSection should be {MIN_STUDENTS_PER_SECTION}-{MAX_STUDENTS_PER_SECTION}, "
                    f"got {stat.students_per_section}"
                )
            if reasons:
                issues.append(IntegrityIssue(stat.column_id, expected, found, reasons))

    return IntegrityReport(checked=checked, issues=issues)
