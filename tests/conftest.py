"""Shared fixtures: a small catalog and four staff rows spread over both divisions."""

import json
import random

import pytest

from loadgrid.domain.models import AssignmentRecord, ColumnStat, GroupDefinition, StaffRecord


def make_assignment(course_id, course_name, group, load, students=None, excluded=False):
    return AssignmentRecord(
        course_id=course_id,
        course_name=course_name,
        group=group,
        load=load,
        excluded_from_load=excluded,
        student_count=students,
    )


def make_staff(staff_id, name, division="MS", capacity=18, assignments=(), role=None):
    return StaffRecord(
        id=staff_id,
        name=name,
        division=division,
        capacity=capacity,
        assignments=tuple(assignments),
        role=role,
    )


def random_rows(seed, count=40):
    """Deterministic pseudo-random rows over the sample catalog's CCW6/CCW7 columns."""
    rng = random.Random(seed)
    slots = [("CCW6", "CCW6"), ("CCW6", "CCW(E)6"), ("CCW7", "CCW7")]
    rows = []
    for idx in range(count):
        assignments = []
        for slot_idx, (group, name) in enumerate(slots):
            if rng.random() < 0.5:
                assignments.append(
                    make_assignment(
                        f"{group}_{idx}_{slot_idx}",
                        name,
                        group,
                        rng.choice([0, 2, 6, 9]),
                        students=rng.choice([None, 0, 15, 22]),
                        excluded=rng.random() < 0.1,
                    )
                )
        rows.append(
            make_staff(
                f"s{idx}",
                rng.choice(["Ng", "Alvarez", "Brook", "ng", "Zhou"]),
                division=rng.choice(["MS", "HS"]),
                capacity=rng.randint(0, 24),
                assignments=assignments,
            )
        )
    return rows


@pytest.fixture
def groups():
    return (
        GroupDefinition(
            id="CCW7",
            label="CCW 7",
            color="#A5D8C7",
            order=2,
            columns=("CCW7_CCW7",),
            column_stats=(ColumnStat("CCW7_CCW7", total_sections=1, periods_per_cycle=9, students_per_section=25),),
        ),
        GroupDefinition(
            id="CCW6",
            label="CCW 6",
            color="#FDB777",
            order=1,
            columns=("CCW6_CCW6", "CCW6_CCW_E_6"),
            column_stats=(
                ColumnStat("CCW6_CCW6", total_sections=2, periods_per_cycle=6, students_per_section=20),
                ColumnStat("CCW6_CCW_E_6", total_sections=1, periods_per_cycle=6, students_per_section=18),
            ),
        ),
        GroupDefinition(
            id="OTHER_SUBJECTS",
            label="Other Subjects",
            color="#E8E8E8",
            order=9999,
            columns=("OTHER_SUBJECTS_TOK", "OTHER_SUBJECTS_Community_Service"),
            protected=True,
        ),
    )


@pytest.fixture
def staff():
    return (
        make_staff(
            "t1",
            "Alice",
            "MS",
            18,
            [
                make_assignment("CCW6_A", "CCW6", "CCW6", 6, students=22),
                make_assignment("CCW7_A", "CCW7", "CCW7", 9, students=25),
            ],
        ),
        make_staff(
            "t2",
            "Bob",
            "MS",
            12,
            [
                make_assignment("CCW6_E", "CCW(E)6", "CCW6", 6, students=18),
                make_assignment("OS_TOK", "TOK", "OTHER_SUBJECTS", 2, excluded=True),
            ],
        ),
        make_staff("t3", "Chen", "HS", 20, [make_assignment("CCW6_C", "CCW6", "CCW6", 6, students=20)], role="GLL"),
        make_staff("t4", "Dana", "HS", 10),
    )


@pytest.fixture
def document(groups, staff):
    return {
        "teachers": [row.to_dict() for row in staff],
        "catalog": {"courseGroups": [group.to_dict() for group in groups], "courses": []},
        "divisions": [
            {"division": "MS", "label": "Middle School", "color": "#E8F5E9", "order": 1},
            {"division": "HS", "label": "High School", "color": "#FFF9C4", "order": 2},
        ],
    }


@pytest.fixture
def data_file(tmp_path, document):
    path = tmp_path / "db.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


@pytest.fixture
def prefs_file(tmp_path):
    return tmp_path / "prefs.json"
