"""Tunable defaults for the assignment grid. Change values here rather than inside the engine modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

# ---------------------------------------------------------------------------
# Divisions + catalog conventions
# ---------------------------------------------------------------------------
DIVISIONS = ["MS", "HS"]

DIVISION_LABELS: Dict[str, str] = {
    "MS": "Middle School",
    "HS": "High School",
}

OTHER_GROUP_ID = "OTHER_SUBJECTS"  # Catch-all group; protected from deletion
OTHER_LABEL_SUFFIX = " (OS)"
COLUMN_ID_SEPARATOR = "_"
COLUMN_KEY_PREFIX = "course"

# ---------------------------------------------------------------------------
# Row window defaults
# ---------------------------------------------------------------------------
DEFAULT_ITEM_SIZE = 48  # Estimated row height in pixels
DEFAULT_OVERSCAN = 10  # Rows materialized beyond each edge of the viewport
DEFAULT_VIEWPORT_SIZE = 720

# ---------------------------------------------------------------------------
# Staff + view defaults
# ---------------------------------------------------------------------------
MAX_CAPACITY = 40  # Upper bound accepted for an inline capacity edit
DEFAULT_ALERT_THRESHOLD = 3  # Excluded-from-load slots tolerated before a row is flagged
PREFERENCE_KEY = "scheduler-ui-state"

# ---------------------------------------------------------------------------
# Integrity check bounds
# ---------------------------------------------------------------------------
MIN_STUDENTS_PER_SECTION = 15
MAX_STUDENTS_PER_SECTION = 30


@dataclass(frozen=True)
class EngineOptions:
    """Policy switches and sizing defaults consumed by the grid pipeline."""

    # Over-capacity moves are allowed by default; the row's remaining capacity goes
    # negative and the presentation layer highlights it.
    enforce_capacity_on_relocation: bool = False
    estimated_item_size: int = DEFAULT_ITEM_SIZE
    overscan: int = DEFAULT_OVERSCAN


ENGINE_OPTIONS = EngineOptions()
