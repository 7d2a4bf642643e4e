# glyphgrid/grid_resize.py
from __future__ import annotations

"""
Centre-anchored grid resize for viewport changes.

Old content is shifted by the integer centring offset and reused in place;
new periphery cells are blank. When an overlay is passed it is moved by the
same pixel shift so later resampling lines up with the new grid.
"""

from typing import Optional, Tuple

from .core_types import Cell, CellSize, EditOverlay, Grid
from .edit_overlay import resize_overlay


def centering_offsets(
    old_cols: int, old_rows: int, new_cols: int, new_rows: int
) -> Tuple[int, int]:
    """Floor-divided centring shift of old content inside the new grid."""
    # odd differences round toward -inf both ways, so 4 -> 5 -> 4 moves
    # content by one cell instead of restoring it
    return (new_cols - old_cols) // 2, (new_rows - old_rows) // 2


def resize_grid_periphery(
    old_grid: Grid,
    old_cols: int,
    old_rows: int,
    new_cols: int,
    new_rows: int,
    *,
    blank_level: int = 0,
    overlay: Optional[EditOverlay] = None,
    cell_size: Optional[CellSize] = None,
    canvas_size: Optional[Tuple[float, float]] = None,
) -> Grid:
    """
    Remap old_grid onto new_cols x new_rows keeping its centre fixed.

    Cells that map inside the old bounds are the same Cell objects with their
    col/row updated. Everything else is a fresh blank cell at blank_level.
    Shrinking truncates silently.

    canvas_size is the new overlay extent; defaults to the grid pixel size.
    """
    col_offset, row_offset = centering_offsets(old_cols, old_rows, new_cols, new_rows)
    new_grid: Grid = []
    for row in range(max(0, new_rows)):
        old_row = row - row_offset
        for col in range(max(0, new_cols)):
            old_col = col - col_offset
            if 0 <= old_col < old_cols and 0 <= old_row < old_rows:
                old_index = old_row * old_cols + old_col
                if old_index < len(old_grid):
                    cell = old_grid[old_index]
                    cell.col = col
                    cell.row = row
                    new_grid.append(cell)
                    continue
            new_grid.append(
                Cell(col=col, row=row, base_level=blank_level, current_level=blank_level)
            )

    if overlay is not None and cell_size is not None:
        if canvas_size is None:
            canvas_size = (new_cols * cell_size.width, new_rows * cell_size.height)
        resize_overlay(
            overlay,
            canvas_size[0],
            canvas_size[1],
            offset_x=col_offset * cell_size.width,
            offset_y=row_offset * cell_size.height,
        )
    return new_grid


__all__ = ["centering_offsets", "resize_grid_periphery"]
