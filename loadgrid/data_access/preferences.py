"""Named-value preference store used to carry ViewState across sessions."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loadgrid.config import PREFERENCE_KEY
from loadgrid.data_access.json_store import read_json, write_json
from loadgrid.domain.errors import DataFileError
from loadgrid.domain.models import ViewState

logger = logging.getLogger(__name__)


class PreferenceStore:
    def __init__(self, path: Path):
        self.path = Path(path)

    def _values(self) -> dict:
        values = read_json(self.path, default={})
        if not isinstance(values, dict):
            raise DataFileError(f"{self.path} must contain a JSON object")
        return values

    def get(self, key: str, default: Any = None) -> Any:
        return self._values().get(key, default)

    def set(self, key: str, value: Any) -> None:
        values = self._values()
        values[key] = value
        write_json(self.path, values)


def load_view_state(store: PreferenceStore) -> ViewState:
    try:
        return ViewState.from_dict(store.get(PREFERENCE_KEY))
    except (TypeError, ValueError) as exc:
        # A stale or hand-edited preference document must not block the grid.
        logger.warning("Ignoring unreadable view state: %s", exc)
        return ViewState()


def save_view_state(store: PreferenceStore, state: ViewState) -> None:
    payload = state.to_dict()
    payload["lastAccessed"] = datetime.now(timezone.utc).isoformat()
    store.set(PREFERENCE_KEY, payload)
