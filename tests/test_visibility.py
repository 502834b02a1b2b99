import pytest

from conftest import random_rows

from loadgrid.domain.models import GroupDefinition, ViewState
from loadgrid.engine.visibility import division_counts, visible_columns, visible_rows


def test_collapsed_division_rows_are_hidden(staff):
    shown = visible_rows(staff, {"HS"})
    assert [row.id for row in shown] == ["t1", "t2"]


def test_no_collapse_keeps_order(staff):
    assert visible_rows(staff, frozenset()) == tuple(staff)


@pytest.mark.parametrize("seed", range(5))
@pytest.mark.parametrize("division", ["MS", "HS"])
def test_division_toggle_round_trip(seed, division):
    rows = random_rows(seed)
    state = ViewState()
    before = visible_rows(rows, state.collapsed_divisions)
    collapsed = state.toggle_division(division)
    assert all(row.division != division for row in visible_rows(rows, collapsed.collapsed_divisions))
    restored = collapsed.toggle_division(division)
    assert visible_rows(rows, restored.collapsed_divisions) == before


def test_visible_columns_follow_group_then_column_order(groups):
    pairs = visible_columns(groups, {"OTHER_SUBJECTS"})
    assert [(g.id, c) for g, c in pairs] == [
        ("CCW6", "CCW6_CCW6"),
        ("CCW6", "CCW6_CCW_E_6"),
        ("CCW7", "CCW7_CCW7"),
    ]


def test_groups_sharing_an_order_keep_catalog_position():
    first = GroupDefinition(id="B", label="B", order=1, columns=("B_1",))
    second = GroupDefinition(id="A", label="A", order=1, columns=("A_1",))
    assert [c for _, c in visible_columns([first, second], frozenset())] == ["B_1", "A_1"]


def test_division_counts(staff):
    assert division_counts(staff) == {"MS": 2, "HS": 2}
    assert division_counts([]) == {"MS": 0, "HS": 0}
