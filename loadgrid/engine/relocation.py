"""Validation and application of single-assignment moves between grid cells.

A move is described by its source cell (staff id + course id) and its destination
cell (staff id + group id + column id). The validator walks

    IDLE -> ARMED(source) -> ACCEPTED | REJECTED -> IDLE

and never raises for a refused move: the refusal travels back as an
``InvalidRelocation`` inside the result. Accepted moves carry every updated staff
record at once so the caller can write them together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence, Tuple

from loadgrid.config import ENGINE_OPTIONS
from loadgrid.domain.errors import InvalidRelocation
from loadgrid.domain.models import AssignmentRecord, GroupDefinition, StaffRecord
from loadgrid.engine.columns import parse_column_label

logger = logging.getLogger(__name__)


class RelocationState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class RelocationRequest:
    source_staff_id: str
    course_id: str
    destination_staff_id: str
    destination_group: str
    destination_column: str


@dataclass(frozen=True)
class RelocationResult:
    accepted: bool
    updated: Tuple[StaffRecord, ...] = ()
    error: Optional[InvalidRelocation] = None

    @property
    def reason(self) -> Optional[str]:
        return self.error.reason if self.error else None


def _reject(reason: str) -> RelocationResult:
    return RelocationResult(accepted=False, error=InvalidRelocation(reason))


def _without_first(assignments: Sequence[AssignmentRecord], course_id: str) -> Tuple[AssignmentRecord, ...]:
    remaining = list(assignments)
    for idx, assignment in enumerate(remaining):
        if assignment.course_id == course_id:
            del remaining[idx]
            break
    return tuple(remaining)


def _renamed_in_place(
    assignments: Sequence[AssignmentRecord], course_id: str, course_name: str
) -> Tuple[AssignmentRecord, ...]:
    renamed = []
    done = False
    for assignment in assignments:
        if not done and assignment.course_id == course_id:
            assignment = replace(assignment, course_name=course_name)
            done = True
        renamed.append(assignment)
    return tuple(renamed)


class RelocationValidator:
    def __init__(self, enforce_capacity_on_relocation: bool = ENGINE_OPTIONS.enforce_capacity_on_relocation):
        self.enforce_capacity_on_relocation = enforce_capacity_on_relocation
        self.state = RelocationState.IDLE
        self._source: Optional[Tuple[str, str]] = None

    def arm(self, source_staff_id: str, course_id: str) -> None:
        self._source = (source_staff_id, course_id)
        self.state = RelocationState.ARMED

    def reset(self) -> None:
        self._source = None
        self.state = RelocationState.IDLE

    def evaluate(
        self,
        rows: Sequence[StaffRecord],
        groups: Iterable[GroupDefinition],
        destination_staff_id: str,
        destination_group: str,
        destination_column: str,
    ) -> RelocationResult:
        if self.state is not RelocationState.ARMED or self._source is None:
            raise RuntimeError("evaluate() requires an armed source cell; call arm() first")

        source_staff_id, course_id = self._source
        result = self._decide(
            {row.id: row for row in rows},
            {group.id: group for group in groups},
            RelocationRequest(source_staff_id, course_id, destination_staff_id, destination_group, destination_column),
        )
        self.state = RelocationState.ACCEPTED if result.accepted else RelocationState.REJECTED
        if not result.accepted:
            logger.debug("Relocation of %s from %s rejected: %s", course_id, source_staff_id, result.reason)
        return result

    def validate(
        self, rows: Sequence[StaffRecord], groups: Iterable[GroupDefinition], request: RelocationRequest
    ) -> RelocationResult:
        """One-shot arm/evaluate/reset for callers that do not track a drag in progress."""
        self.arm(request.source_staff_id, request.course_id)
        try:
            return self.evaluate(
                rows, groups, request.destination_staff_id, request.destination_group, request.destination_column
            )
        finally:
            self.reset()

    def _decide(
        self, by_id: Dict[str, StaffRecord], groups: Dict[str, GroupDefinition], request: RelocationRequest
    ) -> RelocationResult:
        source = by_id.get(request.source_staff_id)
        if source is None:
            return _reject(f"Unknown source staff '{request.source_staff_id}'")
        destination = by_id.get(request.destination_staff_id)
        if destination is None:
            return _reject(f"Unknown destination staff '{request.destination_staff_id}'")
        assignment = source.find_assignment(request.course_id)
        if assignment is None:
            return _reject(f"{source.name} holds no assignment '{request.course_id}'")
        group = groups.get(request.destination_group)
        if group is None:
            return _reject(f"Unknown group '{request.destination_group}'")
        if request.destination_column not in group.columns:
            return _reject(f"Unknown column '{request.destination_column}' in group {group.id}")

        destination_name = parse_column_label(request.destination_column, request.destination_group)
        same_staff = source.id == destination.id

        if (
            same_staff
            and request.destination_group == assignment.group
            and destination_name == assignment.course_name
        ):
            return _reject("Source and destination are the same cell")
        if request.destination_group != assignment.group:
            return _reject(
                f"Cannot move '{assignment.course_name}' from group {assignment.group} "
                f"to group {request.destination_group}"
            )
        if self.enforce_capacity_on_relocation and not same_staff:
            if assignment.counted_load > destination.remaining_capacity:
                return _reject(
                    f"{destination.name} has {destination.remaining_capacity} periods available, "
                    f"but this course requires {assignment.counted_load} periods"
                )

        if same_staff:
            moved = source.with_assignments(
                _renamed_in_place(source.assignments, assignment.course_id, destination_name)
            )
            return RelocationResult(accepted=True, updated=(moved,))

        moved_assignment = replace(assignment, course_name=destination_name, group=request.destination_group)
        updated_source = source.with_assignments(_without_first(source.assignments, assignment.course_id))
        updated_destination = destination.with_assignments(destination.assignments + (moved_assignment,))
        return RelocationResult(accepted=True, updated=(updated_source, updated_destination))


def apply_relocation(rows: Sequence[StaffRecord], result: RelocationResult) -> Tuple[StaffRecord, ...]:
    """Replace every updated record in one step; a rejected result leaves the rows as they were."""
    if not result.accepted:
        return tuple(rows)
    replacements = {record.id: record for record in result.updated}
    return tuple(replacements.get(row.id, row) for row in rows)
