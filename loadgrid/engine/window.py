"""Row windowing: which rows to materialize for a scroll position, plus filler extents."""

from __future__ import annotations

import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from itertools import accumulate
from typing import Sequence

from loadgrid.config import DEFAULT_ITEM_SIZE, DEFAULT_OVERSCAN


@dataclass(frozen=True)
class WindowRange:
    start_index: int
    end_index: int  # Exclusive
    leading_spacer: float
    trailing_spacer: float

    def indices(self) -> range:
        return range(self.start_index, self.end_index)

    def __len__(self) -> int:
        return self.end_index - self.start_index


EMPTY_WINDOW = WindowRange(0, 0, 0, 0)


def _widen(first: int, last: int, row_count: int, overscan: int):
    overscan = max(0, overscan)
    start = max(0, first - overscan)
    end = min(row_count, last + overscan)
    start = min(start, row_count)
    return start, max(start, end)


def compute_window(
    row_count: int,
    scroll_offset: float,
    viewport_size: float,
    estimated_item_size: float = DEFAULT_ITEM_SIZE,
    overscan: int = DEFAULT_OVERSCAN,
) -> WindowRange:
    """Contiguous index range covering the viewport plus ``overscan`` rows on each side.

    Depends only on the row count and the scroll geometry, never on row content.
    """
    if estimated_item_size <= 0:
        raise ValueError(f"Item size must be positive, got {estimated_item_size}")
    if row_count <= 0:
        return EMPTY_WINDOW

    offset = max(0.0, float(scroll_offset))
    viewport = max(0.0, float(viewport_size))

    first = int(offset // estimated_item_size)
    last = int(math.ceil((offset + viewport) / estimated_item_size))
    start, end = _widen(first, last, row_count, overscan)

    return WindowRange(
        start_index=start,
        end_index=end,
        leading_spacer=start * estimated_item_size,
        trailing_spacer=(row_count - end) * estimated_item_size,
    )


def compute_measured_window(
    sizes: Sequence[float],
    scroll_offset: float,
    viewport_size: float,
    overscan: int = DEFAULT_OVERSCAN,
) -> WindowRange:
    """Same contract as compute_window, driven by measured per-row sizes."""
    row_count = len(sizes)
    if row_count == 0:
        return EMPTY_WINDOW
    if any(size < 0 for size in sizes):
        raise ValueError("Measured row sizes must be non-negative")

    ends = list(accumulate(sizes))
    offset = max(0.0, float(scroll_offset))
    viewport = max(0.0, float(viewport_size))

    # First row whose bottom edge lies below the offset; last row starting above the viewport's end.
    first = bisect_right(ends, offset)
    last = bisect_left(ends, offset + viewport) + 1 if viewport > 0 else first
    start, end = _widen(first, min(last, row_count), row_count, overscan)

    total = ends[-1]
    leading = ends[start - 1] if start > 0 else 0
    inside = (ends[end - 1] if end > 0 else 0) - leading
    return WindowRange(
        start_index=start,
        end_index=end,
        leading_spacer=leading,
        trailing_spacer=total - leading - inside,
    )
