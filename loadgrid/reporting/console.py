"""Plain-text rendering of a grid snapshot for the command line."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

from loadgrid.domain.models import DivisionConfig, StaffRecord
from loadgrid.engine.aggregation import ColumnTotals
from loadgrid.engine.columns import GridColumn
from loadgrid.engine.pipeline import GridSnapshot
from loadgrid.reporting.integrity import IntegrityReport

STATIC_HEADERS = ["Staff", "Div", "Other Role", "Max", "Avail", "Preps", "Students"]
STATIC_WIDTHS = [22, 5, 16, 5, 6, 6, 9]
CELL_WIDTH = 12
RULE_WIDTH = 120

SUMMARY_METRICS: List[tuple] = [
    ("Total Students", lambda column, totals: totals.student_sum),
    ("Total Section", lambda column, totals: totals.section_count_from_catalog),
    ("Total Period", lambda column, totals: totals.load_sum),
    ("Remaining Period", lambda column, totals: totals.remaining_from_capacity),
    ("Periods Per Cycle", lambda column, totals: column.stat.periods_per_cycle if column.stat else 0),
    ("Students Per Section", lambda column, totals: column.stat.students_per_section if column.stat else 0),
]


def _cell(value, width: int = CELL_WIDTH) -> str:
    text = "" if value is None else str(value)
    return f"{text[:width - 1]:<{width}}"


def _label_row(label: str, columns: Sequence[GridColumn], value: Callable[[GridColumn], object]) -> str:
    lead = f"{label:<{sum(STATIC_WIDTHS)}}"
    return lead + "".join(_cell(value(column)) for column in columns)


def _cell_text(row: StaffRecord, column: GridColumn) -> str:
    loads = [
        f"{a.load}*" if a.excluded_from_load else str(a.load)
        for a in row.assignments
        if a.group == column.group_id and a.course_name == column.label
    ]
    return "+".join(loads)


def format_row(row: StaffRecord, columns: Sequence[GridColumn], flagged: bool = False) -> str:
    values = [row.name, row.division, row.role or "-", row.capacity, row.remaining_capacity, row.preps, row.student_total]
    static = "".join(_cell(v, w) for v, w in zip(values, STATIC_WIDTHS))
    cells = "".join(_cell(_cell_text(row, column)) for column in columns)
    marker = "!" if flagged else ""
    return f"{static}{cells}{row.excluded_count}{marker}"


def print_grid(
    snapshot: GridSnapshot,
    total_rows: Optional[int] = None,
    divisions: Sequence[DivisionConfig] = (),
    show_summary: bool = True,
) -> None:
    columns = snapshot.visible_columns
    totals = snapshot.totals
    grand = totals.grand

    def column_totals(column: GridColumn) -> ColumnTotals:
        return totals.column(column.key)

    print("\n" + "=" * RULE_WIDTH)
    print("ASSIGNMENT GRID")
    print("=" * RULE_WIDTH)
    print(_label_row("", columns, lambda c: c.display_label) + "CPTs")

    if show_summary:
        for label, metric in SUMMARY_METRICS:
            print(_label_row(label, columns, lambda c, metric=metric: metric(c, column_totals(c))))

    lead_values = ["TOTALS", "", "", grand.capacity_sum, grand.remaining_sum, grand.preps_sum, grand.student_sum]
    lead = "".join(_cell(v, w) for v, w in zip(lead_values, STATIC_WIDTHS))
    print(lead + "".join(_cell(column_totals(c).load_sum) for c in columns) + str(grand.excluded_sum))

    print("─" * RULE_WIDTH)
    print("".join(_cell(h, w) for h, w in zip(STATIC_HEADERS, STATIC_WIDTHS)))
    print("─" * RULE_WIDTH)

    flagged = set(snapshot.flagged)
    window = snapshot.window
    if window.start_index > 0:
        print(f"   ... {window.start_index} rows above")
    for row in snapshot.windowed_rows():
        print(format_row(row, columns, row.id in flagged))
    hidden_below = len(snapshot.sorted_rows) - window.end_index
    if hidden_below > 0:
        print(f"   ... {hidden_below} rows below")

    print("─" * RULE_WIDTH)
    by_division: Dict[str, str] = {d.division: d.label for d in divisions}
    for tag, division_totals in totals.divisions.items():
        print(
            f"{by_division.get(tag, tag):<20}{division_totals.row_count:>5} staff"
            f"{division_totals.load_sum:>8} periods{division_totals.student_sum:>8} students"
        )
    shown = len(snapshot.visible_rows)
    print(f"\nShowing {shown} of {total_rows if total_rows is not None else shown} staff")
    print("=" * RULE_WIDTH + "\n")


def print_integrity(report: IntegrityReport) -> None:
    print("\nSummary:")
    print(f"   Passed: {report.passed}")
    print(f"   Failed: {len(report.issues)}")
    if report.checked:
        print(f"   Success Rate: {report.passed / report.checked * 100:.2f}%")
    for issue in report.issues:
        print(f"\n   {issue.column_id}:")
        for reason in issue.reasons:
            print(f"     - {reason}")
