# glyphgrid/edit_overlay.py
from __future__ import annotations

"""
Resolution-independent store of user strokes.

Each edit is keyed by the centre of the edited cell expressed as a fraction of
the canvas size, rounded to KEY_PRECISION decimals. Keys do not move when the
cell size changes, so a regenerated grid can look its edits up again at any
resolution. Keys are re-expressed only when the canvas itself is resized.

Ordering: overlay.edits iterates in recording order. Re-recording an existing
key moves it to the end, so when several keys land in one target cell the most
recently recorded one wins (last write in iteration order). Edits are never
stacked or blended.

Exports:
  create_edit_overlay(width, height) -> EditOverlay
  record_edit(overlay, col, row, cell_size, edit, origin=None)
  sample_edit(overlay, col, row, cell_size) -> Edit | None
  batch_sample_edits(overlay, cell_size, cols, rows) -> {(col,row): Edit}
  batch_sample_edits_variable(overlay, dims) -> {(col,row): Edit}
  apply_edit_to_level(base_level, edit, max_level, blank_level=None) -> int
  apply_edits_to_grid(grid, edit_map, max_level, blank_level=None) -> int
  clear_overlay(overlay)
  resize_overlay(overlay, new_width, new_height, offset_x=None, offset_y=None)
"""

import math
from typing import Dict, Iterator, Optional, Tuple

from .constants import KEY_PRECISION
from .core_types import (
    CellKey,
    CellSize,
    Edit,
    EditKey,
    EditOverlay,
    Grid,
    VariableCellDimensions,
    clamp_level,
)
from .variable_dimensions import find_column_at_x, find_row_at_y


def create_edit_overlay(width: float, height: float) -> EditOverlay:
    """Empty overlay for a canvas of the given pixel size."""
    return EditOverlay(width=float(width), height=float(height))


def _safe_extent(value: float) -> float:
    return value if value > 0 else 1.0


def _normalize(overlay: EditOverlay, px: float, py: float) -> EditKey:
    return (
        round(px / _safe_extent(overlay.width), KEY_PRECISION),
        round(py / _safe_extent(overlay.height), KEY_PRECISION),
    )


def _to_pixels(overlay: EditOverlay, key: EditKey) -> Tuple[float, float]:
    return key[0] * _safe_extent(overlay.width), key[1] * _safe_extent(overlay.height)


def edit_key_for_cell(
    overlay: EditOverlay,
    col: int,
    row: int,
    cell_size: CellSize,
    origin: Optional[Tuple[float, float]] = None,
) -> EditKey:
    """Normalized key of a cell's centre; origin overrides col*w, row*h."""
    if origin is None:
        x0 = col * cell_size.width
        y0 = row * cell_size.height
    else:
        x0, y0 = origin
    return _normalize(overlay, x0 + cell_size.width / 2.0, y0 + cell_size.height / 2.0)


def record_edit(
    overlay: EditOverlay,
    col: int,
    row: int,
    cell_size: CellSize,
    edit: Edit,
    origin: Optional[Tuple[float, float]] = None,
) -> EditKey:
    """
    Store an edit for the cell at (col, row) under the cell size active now.

    For variable layouts pass the cell's pixel origin and its own size.
    Returns the key the edit was stored under.
    """
    key = edit_key_for_cell(overlay, col, row, cell_size, origin)
    overlay.edits.pop(key, None)
    overlay.edits[key] = edit
    return key


def iter_edit_positions(overlay: EditOverlay) -> Iterator[Tuple[float, float, Edit]]:
    """(px, py, edit) in recording order, in current canvas pixels."""
    for key, edit in overlay.edits.items():
        px, py = _to_pixels(overlay, key)
        yield px, py, edit


def sample_edit(
    overlay: EditOverlay, col: int, row: int, cell_size: CellSize
) -> Optional[Edit]:
    """
    Edit covering the target cell at the current cell size, or None.

    Scans every edit; use batch_sample_edits for whole grids.
    """
    x0 = col * cell_size.width
    y0 = row * cell_size.height
    x1 = x0 + cell_size.width
    y1 = y0 + cell_size.height
    found: Optional[Edit] = None
    for px, py, edit in iter_edit_positions(overlay):
        if x0 <= px < x1 and y0 <= py < y1:
            found = edit
    return found


def batch_sample_edits(
    overlay: EditOverlay, cell_size: CellSize, cols: int, rows: int
) -> Dict[CellKey, Edit]:
    """
    Map every edit onto the uniform grid in one pass over the edits.

    Same result as calling sample_edit for each of the cols * rows cells.
    """
    out: Dict[CellKey, Edit] = {}
    if cell_size.width <= 0 or cell_size.height <= 0:
        return out
    for px, py, edit in iter_edit_positions(overlay):
        col = math.floor(px / cell_size.width)
        row = math.floor(py / cell_size.height)
        if 0 <= col < cols and 0 <= row < rows:
            out[(col, row)] = edit
    return out


def batch_sample_edits_variable(
    overlay: EditOverlay, dims: VariableCellDimensions
) -> Dict[CellKey, Edit]:
    """batch_sample_edits for a variable layout."""
    out: Dict[CellKey, Edit] = {}
    for px, py, edit in iter_edit_positions(overlay):
        col = find_column_at_x(px, dims.column_offsets, extent=dims.total_width)
        row = find_row_at_y(py, dims.row_offsets, extent=dims.total_height)
        if col is not None and row is not None:
            out[(col, row)] = edit
    return out


def apply_edit_to_level(
    base_level: int, edit: Edit, max_level: int, blank_level: Optional[int] = None
) -> int:
    """
    Level shown for a cell whose base level is base_level after this edit.

    brush                 : stored level
    eraser                : blank_level when given, else stored level
    increment / decrement : base_level + delta
    Always clamped to [0, max_level].
    """
    if edit.mode == "eraser" and blank_level is not None:
        level = blank_level
    elif edit.mode in ("brush", "eraser"):
        level = edit.level if edit.level is not None else base_level
    elif edit.mode in ("increment", "decrement"):
        delta = edit.delta
        if delta is None:
            delta = 1 if edit.mode == "increment" else -1
        level = base_level + delta
    else:
        level = base_level
    return clamp_level(level, max_level)


def apply_edits_to_grid(
    grid: Grid,
    edit_map: Dict[CellKey, Edit],
    max_level: int,
    blank_level: Optional[int] = None,
) -> int:
    """
    Reapply sampled edits onto a freshly quantized grid. Returns cells touched.

    Erased cells take blank_level so they follow the current invert state.
    """
    if not edit_map:
        return 0
    touched = 0
    for cell in grid:
        edit = edit_map.get((cell.col, cell.row))
        if edit is None:
            continue
        cell.current_level = apply_edit_to_level(
            cell.base_level, edit, max_level, blank_level
        )
        if edit.is_transparent is not None:
            cell.is_transparent = edit.is_transparent
        if edit.rgb is not None:
            cell.r, cell.g, cell.b = edit.rgb
        touched += 1
    return touched


def clear_overlay(overlay: EditOverlay) -> None:
    overlay.edits.clear()


def resize_overlay(
    overlay: EditOverlay,
    new_width: float,
    new_height: float,
    offset_x: Optional[float] = None,
    offset_y: Optional[float] = None,
) -> None:
    """
    Re-express keys for a resized canvas so edits keep their visual place.

    Each edit moves by (offset_x, offset_y) pixels; the default is half the
    size difference, i.e. content stays centred. Edits that land on the same
    key after rounding collapse, keeping the later one.
    """
    new_width = float(new_width)
    new_height = float(new_height)
    if offset_x is None:
        offset_x = (new_width - overlay.width) / 2.0
    if offset_y is None:
        offset_y = (new_height - overlay.height) / 2.0

    moved = [(px + offset_x, py + offset_y, e) for px, py, e in iter_edit_positions(overlay)]
    overlay.width = new_width
    overlay.height = new_height
    overlay.edits.clear()
    for px, py, edit in moved:
        key = _normalize(overlay, px, py)
        overlay.edits.pop(key, None)
        overlay.edits[key] = edit


__all__ = [
    "create_edit_overlay",
    "edit_key_for_cell",
    "record_edit",
    "iter_edit_positions",
    "sample_edit",
    "batch_sample_edits",
    "batch_sample_edits_variable",
    "apply_edit_to_level",
    "apply_edits_to_grid",
    "clear_overlay",
    "resize_overlay",
]
