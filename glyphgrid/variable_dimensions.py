# glyphgrid/variable_dimensions.py
from __future__ import annotations

"""
Non-uniform cell layout for the Palette style.

Widths (and heights) are drawn independently from the configured range until
the running offset reaches the canvas extent. The last column/row may overhang
the canvas. A range with min == max yields a uniform grid through the same code.
"""

from bisect import bisect_right
from typing import List, Optional, Sequence

import numpy as np

from .core_types import CellSizeRange, VariableCellDimensions


def compute_offsets(sizes: Sequence[int]) -> List[int]:
    """Exclusive prefix sums: offsets[i] = sum(sizes[:i])."""
    offsets: List[int] = []
    running = 0
    for size in sizes:
        offsets.append(running)
        running += int(size)
    return offsets


def _draw_sizes(
    extent: float, lo: int, hi: int, rng: np.random.Generator
) -> List[int]:
    sizes: List[int] = []
    running = 0
    while True:
        size = int(rng.integers(lo, hi, endpoint=True))
        sizes.append(size)
        running += size
        if running >= extent:
            return sizes


def generate_variable_dimensions(
    canvas_width: float,
    canvas_height: float,
    cell_range: CellSizeRange,
    rng: Optional[np.random.Generator] = None,
) -> VariableCellDimensions:
    """
    Random column widths and row heights covering the canvas.

    Always yields at least one column and one row, even for a zero-size canvas.
    """
    rng = rng if rng is not None else np.random.default_rng()
    r = cell_range.normalized()
    widths = _draw_sizes(max(0.0, canvas_width), r.min_width, r.max_width, rng)
    heights = _draw_sizes(max(0.0, canvas_height), r.min_height, r.max_height, rng)
    return VariableCellDimensions(
        column_widths=widths,
        row_heights=heights,
        column_offsets=compute_offsets(widths),
        row_offsets=compute_offsets(heights),
    )


def _find_index(
    value: float, offsets: Sequence[int], extent: Optional[float]
) -> Optional[int]:
    if not offsets or value < 0 or value < offsets[0]:
        return None
    if extent is not None and value >= extent:
        return None
    # greatest i with offsets[i] <= value
    return bisect_right(offsets, value) - 1


def find_column_at_x(
    x: float, column_offsets: Sequence[int], extent: Optional[float] = None
) -> Optional[int]:
    """Column index containing x, or None when x is off the layout."""
    return _find_index(x, column_offsets, extent)


def find_row_at_y(
    y: float, row_offsets: Sequence[int], extent: Optional[float] = None
) -> Optional[int]:
    """Row index containing y, or None when y is off the layout."""
    return _find_index(y, row_offsets, extent)


def describe_range(cell_range: CellSizeRange) -> str:
    """UI label only: 'uniform' when both axes are fixed, else 'random'."""
    return "uniform" if cell_range.normalized().is_uniform else "random"


__all__ = [
    "compute_offsets",
    "generate_variable_dimensions",
    "find_column_at_x",
    "find_row_at_y",
    "describe_range",
]
