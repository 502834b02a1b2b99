"""Dataclasses and type definitions shared across the grid modules.

Every record is frozen. Edits produce new instances so callers can diff or undo
by holding on to the previous snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from loadgrid.config import DEFAULT_ALERT_THRESHOLD, DIVISIONS


class SortDirection(str, Enum):
    NONE = "none"
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class AssignmentRecord:
    course_id: str
    course_name: str  # Denormalized display name, e.g. "CCW(E)6"
    group: str  # Owning group id, e.g. "CCW6"
    load: int
    excluded_from_load: bool = False  # Occupies a cell without counting toward capacity
    student_count: Optional[int] = None

    @property
    def counted_load(self) -> int:
        return 0 if self.excluded_from_load else self.load

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssignmentRecord":
        students = data.get("students")
        return cls(
            course_id=str(data["courseId"]),
            course_name=str(data["courseName"]),
            group=str(data["courseGroup"]),
            load=int(data.get("load", 0)),
            excluded_from_load=bool(data.get("isCPT", False)),
            student_count=int(students) if students is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "courseId": self.course_id,
            "courseName": self.course_name,
            "courseGroup": self.group,
            "load": self.load,
            "isCPT": self.excluded_from_load,
        }
        if self.student_count is not None:
            payload["students"] = self.student_count
        return payload


@dataclass(frozen=True)
class StaffRecord:
    id: str
    name: str
    division: str
    capacity: int
    assignments: Tuple[AssignmentRecord, ...] = ()
    role: Optional[str] = None

    def __post_init__(self):
        if self.division not in DIVISIONS:
            raise ValueError(f"Staff '{self.id}' has unknown division '{self.division}'")
        if self.capacity < 0:
            raise ValueError(f"Staff '{self.id}' has negative capacity {self.capacity}")
        if not isinstance(self.assignments, tuple):
            object.__setattr__(self, "assignments", tuple(self.assignments))

    @property
    def consumed_load(self) -> int:
        return sum(a.load for a in self.assignments if not a.excluded_from_load)

    @property
    def remaining_capacity(self) -> int:
        # Not clamped: an over-assigned row reports a negative figure.
        return self.capacity - self.consumed_load

    @property
    def preps(self) -> int:
        return len(self.assignments)

    @property
    def excluded_count(self) -> int:
        return sum(1 for a in self.assignments if a.excluded_from_load)

    @property
    def student_total(self) -> int:
        return sum(a.student_count or 0 for a in self.assignments)

    def find_assignment(self, course_id: str) -> Optional[AssignmentRecord]:
        for assignment in self.assignments:
            if assignment.course_id == course_id:
                return assignment
        return None

    def with_assignments(self, assignments: Iterable[AssignmentRecord]) -> "StaffRecord":
        return replace(self, assignments=tuple(assignments))

    def with_capacity(self, capacity: int) -> "StaffRecord":
        return replace(self, capacity=int(capacity))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StaffRecord":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            division=str(data["division"]),
            capacity=int(data.get("maxLoad", 0)),
            assignments=tuple(AssignmentRecord.from_dict(a) for a in data.get("assignments") or []),
            role=data.get("otherRole") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        # Derived figures are written alongside for readers that do not recompute them.
        return {
            "id": self.id,
            "name": self.name,
            "division": self.division,
            "otherRole": self.role,
            "maxLoad": self.capacity,
            "preps": self.preps,
            "students": self.student_total,
            "assignments": [a.to_dict() for a in self.assignments],
        }


@dataclass(frozen=True)
class ColumnStat:
    """Externally supplied reference figures for one catalog column. Display only."""

    column_id: str
    total_sections: int = 0
    periods_per_cycle: int = 0
    remaining_period: int = 0
    students_per_section: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ColumnStat":
        return cls(
            column_id=str(data["columnId"]),
            total_sections=int(data.get("totalSections") or 0),
            periods_per_cycle=int(data.get("periodsPerCycle") or 0),
            remaining_period=int(data.get("remainingPeriod") or 0),
            students_per_section=int(data.get("studentsPerSection") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columnId": self.column_id,
            "totalSections": self.total_sections,
            "periodsPerCycle": self.periods_per_cycle,
            "remainingPeriod": self.remaining_period,
            "studentsPerSection": self.students_per_section,
        }


@dataclass(frozen=True)
class GroupDefinition:
    id: str
    label: str
    color: str = "#E0E0E0"
    order: int = 0
    columns: Tuple[str, ...] = ()
    column_stats: Tuple[ColumnStat, ...] = ()
    protected: bool = False

    def stat_for(self, column_id: str) -> Optional[ColumnStat]:
        for stat in self.column_stats:
            if stat.column_id == column_id:
                return stat
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GroupDefinition":
        # Older documents list columns under "courses".
        columns = data.get("columns") or data.get("courses") or []
        return cls(
            id=str(data["id"]),
            label=str(data.get("label") or data.get("name") or data["id"]),
            color=str(data.get("color") or "#E0E0E0"),
            order=int(data.get("order", 0)),
            columns=tuple(str(c) for c in columns),
            column_stats=tuple(ColumnStat.from_dict(m) for m in data.get("columnMetadata") or []),
            protected=bool(data.get("isSystem", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "color": self.color,
            "order": self.order,
            "columns": list(self.columns),
            "columnMetadata": [s.to_dict() for s in self.column_stats],
            "isSystem": self.protected,
        }


@dataclass(frozen=True)
class DivisionConfig:
    division: str
    label: str
    color: str = "#FFFFFF"
    order: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DivisionConfig":
        return cls(
            division=str(data["division"]),
            label=str(data.get("label") or data["division"]),
            color=str(data.get("color") or "#FFFFFF"),
            order=int(data.get("order", 0)),
        )


def _toggled(values: FrozenSet[str], value: str) -> FrozenSet[str]:
    return values - {value} if value in values else values | {value}


@dataclass(frozen=True)
class ViewState:
    """Ephemeral presentation state threaded through every pipeline run."""

    collapsed_groups: FrozenSet[str] = field(default_factory=frozenset)
    collapsed_divisions: FrozenSet[str] = field(default_factory=frozenset)
    sort_column: Optional[str] = None
    sort_direction: SortDirection = SortDirection.NONE
    alert_threshold: int = DEFAULT_ALERT_THRESHOLD

    def toggle_group(self, group_id: str) -> "ViewState":
        return replace(self, collapsed_groups=_toggled(self.collapsed_groups, group_id))

    def toggle_division(self, division: str) -> "ViewState":
        return replace(self, collapsed_divisions=_toggled(self.collapsed_divisions, division))

    def with_sort(self, column: Optional[str], direction: SortDirection) -> "ViewState":
        if column is None or direction is SortDirection.NONE:
            return replace(self, sort_column=None, sort_direction=SortDirection.NONE)
        return replace(self, sort_column=column, sort_direction=direction)

    def with_threshold(self, threshold: int) -> "ViewState":
        return replace(self, alert_threshold=int(threshold))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collapsedCourseGroups": sorted(self.collapsed_groups),
            "collapsedDivisions": sorted(self.collapsed_divisions),
            "sortBy": self.sort_column,
            "sortDirection": self.sort_direction.value,
            "prepsThreshold": self.alert_threshold,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ViewState":
        if not data:
            return cls()
        try:
            direction = SortDirection(data.get("sortDirection") or SortDirection.NONE.value)
        except ValueError:
            direction = SortDirection.NONE
        sort_column = data.get("sortBy")
        if sort_column and direction is SortDirection.NONE:
            # Documents written before directions were stored only carried the column.
            direction = SortDirection.ASC
        threshold = data.get("prepsThreshold")
        return cls(
            collapsed_groups=frozenset(data.get("collapsedCourseGroups") or ()),
            collapsed_divisions=frozenset(data.get("collapsedDivisions") or ()),
            sort_column=sort_column or None,
            sort_direction=direction if sort_column else SortDirection.NONE,
            alert_threshold=int(threshold) if threshold is not None else DEFAULT_ALERT_THRESHOLD,
        )
