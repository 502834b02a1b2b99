import pytest

from loadgrid.engine.columns import (
    build_catalog,
    column_id_for,
    column_key,
    display_label,
    find_column,
    parse_column_label,
    resolve_column,
)


@pytest.mark.parametrize(
    "column_id, group_id, expected",
    [
        ("CCW6_CCW_E_6", "CCW6", "CCW(E)6"),
        ("OTHER_SUBJECTS_TOK", "OTHER_SUBJECTS", "TOK"),
        ("CCW6_CCW6", "CCW6", "CCW6"),
        ("OTHER_SUBJECTS_Community_Service", "OTHER_SUBJECTS", "Community Service"),
        ("CCW6_CCW_E2_6", "CCW6", "CCW(E2)6"),
        ("CCW6_CCW_6", "CCW6", "CCW6"),
        ("CCW9_World_Civilization9", "CCW9", "World Civilization9"),
    ],
)
def test_prefixed_labels(column_id, group_id, expected):
    assert parse_column_label(column_id, group_id) == expected


@pytest.mark.parametrize(
    "column_id, group_id, expected",
    [
        ("TOK", "OTHER_SUBJECTS", "TOK"),
        ("LEGACY_CCW6", "CCW6", "CCW6"),
        ("LEGACY_X_E_6", "CCW6", "X(E)6"),
        ("LEGACY_X_6", "CCW6", "X6"),
    ],
)
def test_unprefixed_labels_use_token_heuristic(column_id, group_id, expected):
    assert parse_column_label(column_id, group_id) == expected


@pytest.mark.parametrize("column_id", ["", "CCW6__6", "CCW6_", "LEGACY__E"])
def test_malformed_ids_fall_back_to_raw_id(column_id):
    assert parse_column_label(column_id, "CCW6") == column_id


def test_column_id_for_inverts_generated_ids():
    for group_id, name in [("CCW6", "CCW(E)6"), ("OTHER_SUBJECTS", "Community Service"), ("CCW7", "CCW7")]:
        assert parse_column_label(column_id_for(group_id, name), group_id) == name


def test_display_label_marks_catch_all_group():
    assert display_label("TOK", "OTHER_SUBJECTS") == "TOK (OS)"
    assert display_label("CCW6", "CCW6") == "CCW6"


def test_build_catalog_orders_by_group_order(groups):
    catalog = build_catalog(groups, frozenset())
    assert [c.column_id for c in catalog] == [
        "CCW6_CCW6",
        "CCW6_CCW_E_6",
        "CCW7_CCW7",
        "OTHER_SUBJECTS_TOK",
        "OTHER_SUBJECTS_Community_Service",
    ]
    assert catalog[0].key == column_key("CCW6", "CCW6_CCW6") == "course-CCW6-CCW6_CCW6"
    assert catalog[1].label == "CCW(E)6"
    assert catalog[3].display_label == "TOK (OS)"
    assert catalog[2].stat.periods_per_cycle == 9
    assert catalog[3].stat is None


def test_build_catalog_skips_collapsed_groups(groups):
    catalog = build_catalog(groups, frozenset({"CCW6"}))
    assert {c.group_id for c in catalog} == {"CCW7", "OTHER_SUBJECTS"}


def test_keys_are_stable_across_calls(groups):
    first = [c.key for c in build_catalog(groups, frozenset())]
    second = [c.key for c in build_catalog(tuple(reversed(groups)), frozenset())]
    assert first == second


def test_resolve_and_find_column(groups):
    catalog = build_catalog(groups, frozenset({"CCW7"}))
    assert resolve_column(catalog, "CCW6", "CCW(E)6").column_id == "CCW6_CCW_E_6"
    assert resolve_column(catalog, "CCW7", "CCW7") is None
    assert find_column(groups, "CCW7", "CCW7_CCW7").label == "CCW7"
    assert find_column(groups, "CCW7", "missing") is None
