"""Exception types raised or reported by the grid engine and its collaborators."""

from __future__ import annotations


class GridError(Exception):
    """Base class for every grid-specific failure."""


class InvalidRelocation(GridError):
    """A move request the validator refused. Returned inside a rejected result, not raised."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class MalformedColumnId(GridError):
    def __init__(self, column_id: str, group_id: str):
        super().__init__(f"Cannot derive a display label from column '{column_id}' in group '{group_id}'")
        self.column_id = column_id
        self.group_id = group_id


class MissingCatalogReference(GridError):
    """An assignment points at a column the current catalog snapshot does not contain."""

    def __init__(self, staff_id: str, course_id: str, group: str, course_name: str):
        super().__init__(
            f"Staff '{staff_id}' holds '{course_id}' ({group}/{course_name}) which is absent from the catalog"
        )
        self.staff_id = staff_id
        self.course_id = course_id
        self.group = group
        self.course_name = course_name


class RecordNotFound(GridError):
    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} '{record_id}' not found")
        self.kind = kind
        self.record_id = record_id


class DataFileError(GridError):
    """Raised when a backing data file exists but cannot be decoded."""
