"""Recomputation pipeline and the host-side session that drives it.

``run_pipeline`` is a pure function of (rows, groups, view state, viewport) and
rebuilds every figure on each call. ``GridSession`` is the serialized update
queue a presentation layer talks to: every edit is applied to the backing store
before the next snapshot is computed, so update N always sees the state left by
update N-1.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Protocol, Sequence, Tuple

from loadgrid.config import DEFAULT_VIEWPORT_SIZE, ENGINE_OPTIONS, EngineOptions
from loadgrid.data_access.preferences import PreferenceStore, load_view_state, save_view_state
from loadgrid.domain.errors import MissingCatalogReference
from loadgrid.domain.models import AssignmentRecord, GroupDefinition, StaffRecord, ViewState
from loadgrid.engine.aggregation import Totals, aggregate, over_threshold
from loadgrid.engine.columns import GridColumn, build_catalog, index_catalog
from loadgrid.engine.relocation import RelocationRequest, RelocationResult, RelocationValidator
from loadgrid.engine.sorting import next_sort, sort_rows
from loadgrid.engine.visibility import visible_rows
from loadgrid.engine.window import WindowRange, compute_window

logger = logging.getLogger(__name__)


class GridStore(Protocol):
    def list_staff(self) -> Sequence[StaffRecord]: ...

    def list_groups(self) -> Sequence[GroupDefinition]: ...

    def replace_assignments(self, staff_id: str, assignments: Iterable[AssignmentRecord]) -> StaffRecord: ...

    def replace_many(self, records: Iterable[StaffRecord]) -> Sequence[StaffRecord]: ...

    def set_capacity(self, staff_id: str, capacity: int) -> StaffRecord: ...


@dataclass(frozen=True)
class Viewport:
    scroll_offset: float = 0
    viewport_size: float = DEFAULT_VIEWPORT_SIZE
    estimated_item_size: float = ENGINE_OPTIONS.estimated_item_size
    overscan: int = ENGINE_OPTIONS.overscan


@dataclass(frozen=True)
class GridSnapshot:
    visible_rows: Tuple[StaffRecord, ...]
    visible_columns: Tuple[GridColumn, ...]
    sorted_rows: Tuple[StaffRecord, ...]
    window: WindowRange
    totals: Totals
    findings: Tuple[MissingCatalogReference, ...] = ()
    flagged: Tuple[str, ...] = ()  # Staff ids over the alert threshold

    @property
    def sorted_order(self) -> Tuple[str, ...]:
        return tuple(row.id for row in self.sorted_rows)

    @property
    def windowed_indices(self) -> Tuple[int, ...]:
        return tuple(self.window.indices())

    def windowed_rows(self) -> Tuple[StaffRecord, ...]:
        return self.sorted_rows[self.window.start_index:self.window.end_index]


def find_missing_references(
    rows: Iterable[StaffRecord], groups: Sequence[GroupDefinition]
) -> Tuple[MissingCatalogReference, ...]:
    """Assignments that match no catalog column in any group, collapsed or not."""
    index = index_catalog(build_catalog(groups, frozenset()))
    return tuple(
        MissingCatalogReference(row.id, a.course_id, a.group, a.course_name)
        for row in rows
        for a in row.assignments
        if (a.group, a.course_name) not in index
    )


def run_pipeline(
    rows: Sequence[StaffRecord],
    groups: Sequence[GroupDefinition],
    view_state: ViewState,
    viewport: Viewport = Viewport(),
) -> GridSnapshot:
    shown = visible_rows(rows, view_state.collapsed_divisions)
    catalog = build_catalog(groups, view_state.collapsed_groups)
    totals = aggregate(shown, catalog)
    ordered = sort_rows(shown, view_state.sort_column, view_state.sort_direction, catalog)
    window = compute_window(
        len(ordered), viewport.scroll_offset, viewport.viewport_size, viewport.estimated_item_size, viewport.overscan
    )

    findings = find_missing_references(shown, groups)
    for finding in findings:
        logger.warning("Data quality: %s", finding)

    return GridSnapshot(
        visible_rows=shown,
        visible_columns=catalog,
        sorted_rows=ordered,
        window=window,
        totals=totals,
        findings=findings,
        flagged=tuple(row.id for row in shown if over_threshold(row, view_state.alert_threshold)),
    )


class GridSession:
    """Applies one update at a time against a store and recomputes the snapshot after each."""

    def __init__(
        self,
        store: GridStore,
        preferences: Optional[PreferenceStore] = None,
        options: EngineOptions = ENGINE_OPTIONS,
        viewport: Optional[Viewport] = None,
    ):
        self.store = store
        self.preferences = preferences
        self.validator = RelocationValidator(options.enforce_capacity_on_relocation)
        self.viewport = viewport or Viewport(
            estimated_item_size=options.estimated_item_size, overscan=options.overscan
        )
        self.view_state = load_view_state(preferences) if preferences is not None else ViewState()
        self.snapshot = self.refresh()

    def refresh(self) -> GridSnapshot:
        self.rows = tuple(self.store.list_staff())
        self.groups = tuple(self.store.list_groups())
        self.snapshot = run_pipeline(self.rows, self.groups, self.view_state, self.viewport)
        return self.snapshot

    def _update_view(self, view_state: ViewState) -> GridSnapshot:
        self.view_state = view_state
        if self.preferences is not None:
            save_view_state(self.preferences, view_state)
        self.snapshot = run_pipeline(self.rows, self.groups, self.view_state, self.viewport)
        return self.snapshot

    # ---------- data edits ----------
    def relocate(self, request: RelocationRequest) -> RelocationResult:
        result = self.validator.validate(self.rows, self.groups, request)
        if result.accepted:
            # Both records land in the store before the next aggregation reads it.
            self.store.replace_many(result.updated)
            self.refresh()
        return result

    def set_capacity(self, staff_id: str, capacity: int) -> GridSnapshot:
        self.store.set_capacity(staff_id, capacity)
        return self.refresh()

    def replace_assignments(self, staff_id: str, assignments: Iterable[AssignmentRecord]) -> GridSnapshot:
        self.store.replace_assignments(staff_id, assignments)
        return self.refresh()

    # ---------- view edits ----------
    def toggle_group(self, group_id: str) -> GridSnapshot:
        return self._update_view(self.view_state.toggle_group(group_id))

    def toggle_division(self, division: str) -> GridSnapshot:
        return self._update_view(self.view_state.toggle_division(division))

    def click_sort(self, column: str) -> GridSnapshot:
        sort_column, direction = next_sort(self.view_state.sort_column, self.view_state.sort_direction, column)
        return self._update_view(self.view_state.with_sort(sort_column, direction))

    def set_threshold(self, threshold: int) -> GridSnapshot:
        return self._update_view(self.view_state.with_threshold(threshold))

    def reset_view(self) -> GridSnapshot:
        return self._update_view(ViewState())

    def scroll(self, scroll_offset: float, viewport_size: Optional[float] = None) -> GridSnapshot:
        changes = {"scroll_offset": scroll_offset}
        if viewport_size is not None:
            changes["viewport_size"] = viewport_size
        self.viewport = replace(self.viewport, **changes)
        # Only the window depends on scroll geometry; rows, columns and totals carry over.
        window = compute_window(
            len(self.snapshot.sorted_rows),
            self.viewport.scroll_offset,
            self.viewport.viewport_size,
            self.viewport.estimated_item_size,
            self.viewport.overscan,
        )
        self.snapshot = replace(self.snapshot, window=window)
        return self.snapshot
