"""CSV import of staff rows (no assignments) for seeding a grid document."""

from __future__ import annotations

import math
import uuid
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from loadgrid.config import DIVISIONS, MAX_CAPACITY
from loadgrid.domain.models import StaffRecord


def _normalize_columns(df: pd.DataFrame) -> Dict[str, str]:
    """Create mapping from lowercase column names to original names."""
    normalized: Dict[str, str] = {}
    for column in df.columns:
        key = column.strip().lower()
        if key in normalized:
            raise ValueError(f"Duplicate column detected when normalizing headers: '{column}'")
        normalized[key] = column.strip()
    return normalized


def _coerce_int(value, column_name: str, record_name: str) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number) or not number.is_integer():
        raise ValueError(
            f"Invalid whole-number value '{value}' for column '{column_name}' on record '{record_name}'"
        )
    return int(number)


def _optional_text(value) -> Optional[str]:
    if pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def load_staff_csv(path: Path) -> List[StaffRecord]:
    """Read ``name``, ``division``, ``capacity`` (or ``max_load``) and optional ``role`` / ``id`` columns."""
    if not path.exists():
        raise FileNotFoundError(f"Staff CSV not found: {path}")

    df = pd.read_csv(path, dtype=str)
    df.columns = [col.strip() for col in df.columns]
    column_map = _normalize_columns(df)

    def require_column(*names: str) -> str:
        for name in names:
            if name in column_map:
                return column_map[name]
        raise ValueError(f"Required column '{names[0]}' not found in {path}")

    name_col = require_column("name")
    division_col = require_column("division")
    capacity_col = require_column("capacity", "max_load")
    role_col = column_map.get("role")
    id_col = column_map.get("id")

    staff: List[StaffRecord] = []
    seen_names = set()
    for _, row in df.iterrows():
        name = _optional_text(row[name_col])
        if not name:
            raise ValueError("Encountered staff row with empty name.")
        if name in seen_names:
            raise ValueError(f"Duplicate staff name detected: '{name}'")
        seen_names.add(name)

        division = (_optional_text(row[division_col]) or "").upper()
        if division not in DIVISIONS:
            raise ValueError(f"Staff '{name}' has division '{division}'; expected one of {', '.join(DIVISIONS)}")

        capacity = _coerce_int(row[capacity_col], capacity_col, name)
        if not 0 <= capacity <= MAX_CAPACITY:
            raise ValueError(f"Staff '{name}' capacity {capacity} outside 0-{MAX_CAPACITY}")

        staff_id = _optional_text(row[id_col]) if id_col else None
        staff.append(
            StaffRecord(
                id=staff_id or str(uuid.uuid4()),
                name=name,
                division=division,
                capacity=capacity,
                role=_optional_text(row[role_col]) if role_col else None,
            )
        )

    return staff
