"""Command-line interface for the assignment grid."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from loadgrid.config import DEFAULT_VIEWPORT_SIZE, DIVISIONS, ENGINE_OPTIONS
from loadgrid.data_access.json_store import JsonGridStore
from loadgrid.data_access.preferences import PreferenceStore
from loadgrid.data_access.staff_loader import load_staff_csv
from loadgrid.engine.pipeline import GridSession, Viewport
from loadgrid.engine.relocation import RelocationRequest
from loadgrid.reporting.console import print_grid, print_integrity
from loadgrid.reporting.export import export_grid_to_excel
from loadgrid.reporting.integrity import verify_integrity


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspect and edit the staff/course load grid stored in a JSON document."
    )
    parser.add_argument("data", type=Path, help="JSON document holding teachers, catalog and divisions.")
    parser.add_argument(
        "--prefs",
        type=Path,
        default=Path("loadgrid-prefs.json"),
        help="JSON file holding the persisted view state (default: loadgrid-prefs.json).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log engine details to stderr.")
    commands = parser.add_subparsers(dest="command", required=True)

    show = commands.add_parser("show", help="Print the visible grid with summary and totals rows.")
    show.add_argument("--scroll", type=float, default=0, help="Scroll offset in pixels.")
    show.add_argument("--viewport", type=float, default=DEFAULT_VIEWPORT_SIZE, help="Viewport height in pixels.")
    show.add_argument("--no-summary", action="store_true", help="Hide the per-column summary rows.")

    export = commands.add_parser("export", help="Write the visible grid to an Excel workbook.")
    export.add_argument(
        "--output",
        type=Path,
        default=Path("grid.xlsx"),
        help="Destination path for the exported workbook (default: grid.xlsx).",
    )

    move = commands.add_parser("move", help="Relocate one assignment to another cell in the same group.")
    move.add_argument("source_staff")
    move.add_argument("course_id")
    move.add_argument("destination_staff")
    move.add_argument("destination_group")
    move.add_argument("destination_column")
    move.add_argument(
        "--enforce-capacity",
        action="store_true",
        help="Refuse moves that would push the destination past its capacity.",
    )

    capacity = commands.add_parser("capacity", help="Set a staff member's capacity.")
    capacity.add_argument("staff_id")
    capacity.add_argument("value", type=int)

    toggle_group = commands.add_parser("toggle-group", help="Collapse or expand a course group.")
    toggle_group.add_argument("group_id")

    toggle_division = commands.add_parser("toggle-division", help="Collapse or expand a division.")
    toggle_division.add_argument("division", choices=DIVISIONS)

    sort = commands.add_parser("sort", help="Click a column header: none -> asc -> desc -> none.")
    sort.add_argument("column", help="Static column name (name, capacity, remaining, ...) or a course column key.")

    threshold = commands.add_parser("threshold", help="Set the excluded-slot alert threshold.")
    threshold.add_argument("value", type=int)

    commands.add_parser("reset-view", help="Restore the default view state.")
    commands.add_parser("verify", help="Check assigned loads against catalog section figures.")

    import_staff = commands.add_parser("import-staff", help="Append staff rows from a CSV file.")
    import_staff.add_argument("csv", type=Path)

    return parser


def _run(args: argparse.Namespace) -> int:
    store = JsonGridStore(args.data)

    if args.command == "import-staff":
        added = store.add_staff(load_staff_csv(args.csv))
        print(f"Imported {added} staff into {args.data}")
        return 0

    options = ENGINE_OPTIONS
    if getattr(args, "enforce_capacity", False):
        options = replace(options, enforce_capacity_on_relocation=True)
    viewport = Viewport(
        scroll_offset=getattr(args, "scroll", 0),
        viewport_size=getattr(args, "viewport", DEFAULT_VIEWPORT_SIZE),
        estimated_item_size=options.estimated_item_size,
        overscan=options.overscan,
    )
    session = GridSession(store, PreferenceStore(args.prefs), options=options, viewport=viewport)

    if args.command == "move":
        result = session.relocate(
            RelocationRequest(
                source_staff_id=args.source_staff,
                course_id=args.course_id,
                destination_staff_id=args.destination_staff,
                destination_group=args.destination_group,
                destination_column=args.destination_column,
            )
        )
        if not result.accepted:
            print(f"Invalid move: {result.reason}", file=sys.stderr)
            return 2
        for record in result.updated:
            print(f"{record.name}: load {record.consumed_load}/{record.capacity} ({record.remaining_capacity} available)")
        return 0

    if args.command == "capacity":
        session.set_capacity(args.staff_id, args.value)
        print(f"Max load for {args.staff_id} set to {args.value}")
        return 0

    if args.command == "toggle-group":
        session.toggle_group(args.group_id)
        state = "collapsed" if args.group_id in session.view_state.collapsed_groups else "expanded"
        print(f"Group {args.group_id} {state}")
        return 0

    if args.command == "toggle-division":
        session.toggle_division(args.division)
        state = "collapsed" if args.division in session.view_state.collapsed_divisions else "expanded"
        print(f"Division {args.division} {state}")
        return 0

    if args.command == "sort":
        session.click_sort(args.column)
        view = session.view_state
        print(f"Sort: {view.sort_column or '-'} ({view.sort_direction.value})")
        return 0

    if args.command == "threshold":
        session.set_threshold(args.value)
        print(f"CPT threshold set to {args.value}")
        return 0

    if args.command == "reset-view":
        session.reset_view()
        print("View state reset")
        return 0

    if args.command == "verify":
        report = verify_integrity(session.rows, session.groups)
        print_integrity(report)
        return 0 if report.ok else 1

    divisions = store.list_divisions()
    if args.command == "export":
        export_grid_to_excel(session.snapshot, args.output, divisions)
        print(f"Grid exported to {args.output}")
        return 0

    for finding in session.snapshot.findings:
        print(f"WARNING: {finding}", file=sys.stderr)
    print_grid(session.snapshot, total_rows=len(session.rows), divisions=divisions, show_summary=not args.no_summary)
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        code = _run(args)
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    if code:
        sys.exit(code)
