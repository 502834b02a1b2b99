"""
Teacher load grid: windowed view, relocation and aggregate totals over a
staff x course-slot grid.

Key features:
- Collapsible divisions (rows) and course groups (columns)
- Moves are confined to a course group; over-capacity moves are allowed by default
- Per-course, per-division and grand totals recomputed on every change
- Single-column sorting with a none -> ascending -> descending cycle
"""

from loadgrid.cli import main

if __name__ == "__main__":
    main()
