"""Excel export helpers for grid snapshots."""

from __future__ import annotations

import importlib.util
from pathlib import Path
from typing import Dict, List, Sequence

import pandas as pd

from loadgrid.domain.models import DivisionConfig
from loadgrid.engine.pipeline import GridSnapshot

EXCEL_ENGINES = ("xlsxwriter", "openpyxl")


def grid_frame(snapshot: GridSnapshot) -> pd.DataFrame:
    """One row per visible staff member in display order, one column per visible course slot."""
    columns = snapshot.visible_columns
    flagged = set(snapshot.flagged)
    records: List[Dict[str, object]] = []
    for row in snapshot.sorted_rows:
        record: Dict[str, object] = {
            "Staff": row.name,
            "Division": row.division,
            "Other Role": row.role or "",
            "Max Load": row.capacity,
            "Available": row.remaining_capacity,
            "Preps": row.preps,
            "Students": row.student_total,
        }
        for column in columns:
            loads = [
                a.load for a in row.assignments if a.group == column.group_id and a.course_name == column.label
            ]
            record[column.display_label] = sum(loads) if loads else None
        record["Number of CPTs"] = row.excluded_count
        record["Over Threshold"] = "✓" if row.id in flagged else ""
        records.append(record)
    return pd.DataFrame.from_records(records)


def column_summary_frame(snapshot: GridSnapshot) -> pd.DataFrame:
    rows = []
    for column in snapshot.visible_columns:
        totals = snapshot.totals.column(column.key)
        stat = column.stat
        rows.append(
            [
                column.group_id,
                column.column_id,
                column.display_label,
                totals.student_sum,
                totals.section_count_from_catalog,
                totals.load_sum,
                totals.remaining_from_capacity,
                stat.periods_per_cycle if stat else "",
                stat.students_per_section if stat else "",
                round(totals.periods_per_student, 3),
                totals.staffed_count,
            ]
        )
    return pd.DataFrame(
        rows,
        columns=[
            "Group",
            "Column",
            "Course",
            "Total Students",
            "Total Section",
            "Total Period",
            "Remaining Period",
            "Periods Per Cycle",
            "Students Per Section",
            "Periods Per Student",
            "Staffed Cells",
        ],
    )


def division_summary_frame(snapshot: GridSnapshot, divisions: Sequence[DivisionConfig] = ()) -> pd.DataFrame:
    labels = {d.division: d.label for d in divisions}
    rows = [
        [labels.get(tag, tag), totals.row_count, totals.load_sum, totals.student_sum]
        for tag, totals in snapshot.totals.divisions.items()
    ]
    grand = snapshot.totals.grand
    rows.append(["TOTAL", grand.row_count, sum(r[2] for r in rows), grand.student_sum])
    return pd.DataFrame(rows, columns=["Division", "Staff", "Total Period", "Total Students"])


def export_grid_to_excel(
    snapshot: GridSnapshot,
    output_path: Path,
    divisions: Sequence[DivisionConfig] = (),
) -> None:
    """Export the grid, per-column summary and per-division summary to an Excel workbook."""
    engine = None
    for candidate in EXCEL_ENGINES:
        if importlib.util.find_spec(candidate):
            engine = candidate
            break
    if engine is None:
        raise RuntimeError(f"No Excel writer available; install one of: {', '.join(EXCEL_ENGINES)}")

    sheets = [
        ("Grid", grid_frame(snapshot)),
        ("Column Summary", column_summary_frame(snapshot)),
        ("Division Summary", division_summary_frame(snapshot, divisions)),
    ]
    with pd.ExcelWriter(output_path, engine=engine) as writer:
        for sheet_name, dataframe in sheets:
            dataframe.to_excel(writer, sheet_name=sheet_name, index=False)
            _autosize_columns(writer, sheet_name, dataframe)


def _autosize_columns(writer: pd.ExcelWriter, sheet_name: str, dataframe: pd.DataFrame):
    """Automatic column width helper for Excel export."""
    worksheet = writer.sheets[sheet_name]
    engine = getattr(writer, "engine", "").lower()
    for idx, column in enumerate(dataframe.columns):
        # Empty cells hold None/NaN; str() them one by one so every value has a length.
        longest = max([len(str(column))] + [len(str(cell)) for cell in dataframe[column]])
        width = min(longest + 2, 60)
        if engine == "xlsxwriter":
            worksheet.set_column(idx, idx, width)
        elif engine == "openpyxl":
            from openpyxl.utils import get_column_letter

            worksheet.column_dimensions[get_column_letter(idx + 1)].width = width
