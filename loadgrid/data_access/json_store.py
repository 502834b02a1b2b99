"""JSON document store standing in for the storage collaborator.

Document layout::

    {
      "teachers": [...],
      "catalog": {"courseGroups": [...], "courses": [...]},
      "divisions": [...]
    }

Writes go through a temp file and an atomic replace. Concurrent writers are not
coordinated; the last write wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from loadgrid.config import DIVISION_LABELS, DIVISIONS, MAX_CAPACITY
from loadgrid.domain.errors import DataFileError, RecordNotFound
from loadgrid.domain.models import AssignmentRecord, DivisionConfig, GroupDefinition, StaffRecord

logger = logging.getLogger(__name__)


def read_json(path: Path, default):
    if not path.exists():
        return default
    raw = path.read_text(encoding="utf-8").strip()
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DataFileError(f"Cannot decode {path}: {exc}") from exc


def write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(path)


class JsonGridStore:
    def __init__(self, path: Path):
        self.path = Path(path)

    # ---------- document ----------
    def _load(self) -> Dict[str, Any]:
        document = read_json(self.path, default={})
        if not isinstance(document, dict):
            raise DataFileError(f"{self.path} must contain a JSON object")
        document.setdefault("teachers", [])
        document.setdefault("catalog", {})
        document["catalog"].setdefault("courseGroups", [])
        document["catalog"].setdefault("courses", [])
        document.setdefault("divisions", [])
        return document

    def _save(self, document: Dict[str, Any]) -> None:
        write_json(self.path, document)

    @staticmethod
    def _locate(document: Dict[str, Any], staff_id: str) -> int:
        for idx, teacher in enumerate(document["teachers"]):
            if str(teacher.get("id")) == staff_id:
                return idx
        raise RecordNotFound("Staff", staff_id)

    @staticmethod
    def _merge(raw: Dict[str, Any], record: StaffRecord) -> Dict[str, Any]:
        # Keys the engine does not model (metadata, timestamps) survive the rewrite.
        merged = dict(raw)
        merged.update(record.to_dict())
        return merged

    # ---------- staff ----------
    def list_staff(self) -> Tuple[StaffRecord, ...]:
        return tuple(StaffRecord.from_dict(t) for t in self._load()["teachers"])

    def get_staff(self, staff_id: str) -> StaffRecord:
        document = self._load()
        return StaffRecord.from_dict(document["teachers"][self._locate(document, staff_id)])

    def replace_assignments(self, staff_id: str, assignments: Iterable[AssignmentRecord]) -> StaffRecord:
        document = self._load()
        idx = self._locate(document, staff_id)
        record = StaffRecord.from_dict(document["teachers"][idx]).with_assignments(assignments)
        document["teachers"][idx] = self._merge(document["teachers"][idx], record)
        self._save(document)
        return record

    def replace_many(self, records: Iterable[StaffRecord]) -> Tuple[StaffRecord, ...]:
        """Write several records in a single document save, or none if any id is unknown."""
        document = self._load()
        records = tuple(records)
        positions = [self._locate(document, record.id) for record in records]
        for idx, record in zip(positions, records):
            document["teachers"][idx] = self._merge(document["teachers"][idx], record)
        self._save(document)
        return records

    def set_capacity(self, staff_id: str, capacity: int) -> StaffRecord:
        if not 0 <= capacity <= MAX_CAPACITY:
            raise ValueError(f"Capacity must be between 0 and {MAX_CAPACITY}, got {capacity}")
        document = self._load()
        idx = self._locate(document, staff_id)
        record = StaffRecord.from_dict(document["teachers"][idx]).with_capacity(capacity)
        document["teachers"][idx] = self._merge(document["teachers"][idx], record)
        self._save(document)
        return record

    def add_staff(self, records: Iterable[StaffRecord]) -> int:
        document = self._load()
        existing = {str(t.get("id")) for t in document["teachers"]}
        added = 0
        for record in records:
            if record.id in existing:
                logger.warning("Skipping staff '%s': id %s already present", record.name, record.id)
                continue
            document["teachers"].append(record.to_dict())
            existing.add(record.id)
            added += 1
        self._save(document)
        return added

    # ---------- catalog ----------
    def list_groups(self) -> Tuple[GroupDefinition, ...]:
        return tuple(GroupDefinition.from_dict(g) for g in self._load()["catalog"]["courseGroups"])

    def list_divisions(self) -> Tuple[DivisionConfig, ...]:
        raw: List[Dict[str, Any]] = self._load()["divisions"]
        if not raw:
            return tuple(
                DivisionConfig(division=d, label=DIVISION_LABELS[d], order=i + 1) for i, d in enumerate(DIVISIONS)
            )
        return tuple(sorted((DivisionConfig.from_dict(d) for d in raw), key=lambda d: d.order))
