# glyphgrid/quantize.py
from __future__ import annotations

"""
Bitmap -> cell grid quantizer.

One nearest-pixel sample per cell, taken at the cell centre mapped into source
space through a centred, axis-uniform cover/contain fit. Luminance (Rec.709)
is remapped through the black/white points and floored onto the symbol ramp.

Exports:
  compute_fit(src_w, src_h, canvas_w, canvas_h, fit_mode) -> (scale, dx, dy)
  luminance_to_level(luminance, max_level, black, white, invert)
  blank_level(max_level, invert) -> int
  blank_grid(cols, rows, blank_level=0) -> Grid
  quantize(bitmap, cols, rows, symbols, cell_size, fit_mode, ...) -> Grid
  quantize_variable(bitmap, dims, canvas_w, canvas_h, symbols, ...) -> Grid
"""

from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .constants import ALPHA_TRANSPARENT_BELOW, LEVEL_EPSILON, LUMA_WEIGHTS
from .core_types import (
    Cell,
    CellSize,
    FitMode,
    Grid,
    U8Image,
    VariableCellDimensions,
    assert_u8_image_rgba,
)


def compute_fit(
    src_w: int, src_h: int, canvas_w: float, canvas_h: float, fit_mode: FitMode
) -> Tuple[float, float, float]:
    """
    Source -> canvas placement for a centred uniform scale.

    cover   : image fully covers the canvas (cropped)
    contain : image fully inside the canvas (letterboxed)

    Returns (scale, dx, dy) so that canvas = source * scale + (dx, dy).
    """
    if src_w <= 0 or src_h <= 0 or canvas_w <= 0 or canvas_h <= 0:
        return 1.0, 0.0, 0.0
    sx = canvas_w / float(src_w)
    sy = canvas_h / float(src_h)
    scale = max(sx, sy) if fit_mode == "cover" else min(sx, sy)
    dx = (canvas_w - src_w * scale) / 2.0
    dy = (canvas_h - src_h * scale) / 2.0
    return scale, dx, dy


def luminance_to_level(
    luminance: Union[float, np.ndarray],
    max_level: int,
    black_point: float = 0.0,
    white_point: float = 1.0,
    invert: bool = False,
) -> Union[int, np.ndarray]:
    """
    Map normalized luminance in [0,1] to a ramp level in [0, max_level].

    When white_point <= black_point the ramp collapses to a step at black_point.
    """
    lum = np.asarray(luminance, dtype=np.float64)
    span = float(white_point) - float(black_point)
    if span > 0.0:
        normalized = np.clip((lum - black_point) / span, 0.0, 1.0)
    else:
        normalized = (lum >= black_point).astype(np.float64)
    levels = np.floor(normalized * max_level + LEVEL_EPSILON).astype(np.int64)
    levels = np.clip(levels, 0, max_level)
    if invert:
        levels = max_level - levels
    if levels.ndim == 0:
        return int(levels)
    return levels


def blank_level(max_level: int, invert: bool) -> int:
    """Level of an empty cell: 0, or max_level when the ramp is inverted."""
    return int(max_level) if invert else 0


def blank_grid(cols: int, rows: int, blank_level: int = 0) -> Grid:
    """Dense row-major grid of blank cells."""
    return [
        Cell(col=col, row=row, base_level=blank_level, current_level=blank_level)
        for row in range(max(0, rows))
        for col in range(max(0, cols))
    ]


def _sample_canvas_points(
    bitmap: U8Image,
    xs: np.ndarray,
    ys: np.ndarray,
    canvas_w: float,
    canvas_h: float,
    fit_mode: FitMode,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Nearest-pixel RGBA samples at canvas-space points.

    Returns (rgba uint8 [N,4], inside bool [N]); rows where inside is False
    fell outside the fitted image and are zero.
    """
    src_h, src_w = int(bitmap.shape[0]), int(bitmap.shape[1])
    scale, dx, dy = compute_fit(src_w, src_h, canvas_w, canvas_h, fit_mode)
    sx = np.floor((xs - dx) / scale).astype(np.int64)
    sy = np.floor((ys - dy) / scale).astype(np.int64)
    inside = (sx >= 0) & (sx < src_w) & (sy >= 0) & (sy < src_h)
    rgba = np.zeros((xs.shape[0], 4), dtype=np.uint8)
    if np.any(inside):
        rgba[inside] = bitmap[sy[inside], sx[inside]]
    return rgba, inside


def _cells_from_samples(
    cols: int,
    rows: int,
    rgba: np.ndarray,
    inside: np.ndarray,
    max_level: int,
    black_point: float,
    white_point: float,
    invert: bool,
) -> Grid:
    rgb = rgba[:, :3].astype(np.float64)
    w_r, w_g, w_b = LUMA_WEIGHTS
    luminance = (w_r * rgb[:, 0] + w_g * rgb[:, 1] + w_b * rgb[:, 2]) / 255.0
    levels = np.asarray(
        luminance_to_level(luminance, max_level, black_point, white_point, invert)
    ).reshape(-1)
    empty = blank_level(max_level, invert)
    levels = np.where(inside, levels, empty)
    transparent = inside & (rgba[:, 3] < ALPHA_TRANSPARENT_BELOW)

    grid: Grid = []
    idx = 0
    for row in range(rows):
        for col in range(cols):
            level = int(levels[idx])
            grid.append(
                Cell(
                    col=col,
                    row=row,
                    base_level=level,
                    current_level=level,
                    r=int(rgba[idx, 0]),
                    g=int(rgba[idx, 1]),
                    b=int(rgba[idx, 2]),
                    is_transparent=bool(transparent[idx]),
                )
            )
            idx += 1
    return grid


def quantize(
    bitmap: U8Image,
    cols: int,
    rows: int,
    symbols: Sequence[str],
    cell_size: CellSize,
    fit_mode: FitMode = "contain",
    black_point: float = 0.0,
    white_point: float = 1.0,
    invert: bool = False,
    canvas_size: Optional[Tuple[float, float]] = None,
) -> Grid:
    """
    Quantize an RGBA bitmap into a cols x rows grid of uniform cells.

    Args:
      bitmap      : uint8 [H,W,4]
      symbols     : symbol ramp, max_level = len(symbols) - 1
      cell_size   : pixel size of one cell on the canvas
      canvas_size : (w, h); defaults to (cols * cell_w, rows * cell_h)

    Returns:
      Grid of exactly cols * rows cells, row-major.
    """
    max_level = max(0, len(symbols) - 1)
    if cols <= 0 or rows <= 0:
        return []
    bitmap = assert_u8_image_rgba(bitmap)
    if canvas_size is None:
        canvas_w = float(cols * cell_size.width)
        canvas_h = float(rows * cell_size.height)
    else:
        canvas_w, canvas_h = float(canvas_size[0]), float(canvas_size[1])
    if bitmap.shape[0] == 0 or bitmap.shape[1] == 0:
        return blank_grid(cols, rows, blank_level(max_level, invert))

    centers_x = (np.arange(cols, dtype=np.float64) + 0.5) * cell_size.width
    centers_y = (np.arange(rows, dtype=np.float64) + 0.5) * cell_size.height
    grid_x, grid_y = np.meshgrid(centers_x, centers_y)
    rgba, inside = _sample_canvas_points(
        bitmap, grid_x.reshape(-1), grid_y.reshape(-1), canvas_w, canvas_h, fit_mode
    )
    return _cells_from_samples(
        cols, rows, rgba, inside, max_level, black_point, white_point, invert
    )


def quantize_variable(
    bitmap: U8Image,
    dims: VariableCellDimensions,
    canvas_w: float,
    canvas_h: float,
    symbols: Sequence[str],
    fit_mode: FitMode = "contain",
    black_point: float = 0.0,
    white_point: float = 1.0,
    invert: bool = False,
) -> Grid:
    """Quantize onto a variable layout, sampling each cell's integer centre."""
    max_level = max(0, len(symbols) - 1)
    cols, rows = dims.cols, dims.rows
    if cols == 0 or rows == 0:
        return []
    bitmap = assert_u8_image_rgba(bitmap)
    if bitmap.shape[0] == 0 or bitmap.shape[1] == 0:
        return blank_grid(cols, rows, blank_level(max_level, invert))

    offs_x = np.asarray(dims.column_offsets, dtype=np.float64)
    offs_y = np.asarray(dims.row_offsets, dtype=np.float64)
    centers_x = np.floor(offs_x + np.asarray(dims.column_widths) / 2.0) + 0.5
    centers_y = np.floor(offs_y + np.asarray(dims.row_heights) / 2.0) + 0.5
    grid_x, grid_y = np.meshgrid(centers_x, centers_y)
    rgba, inside = _sample_canvas_points(
        bitmap, grid_x.reshape(-1), grid_y.reshape(-1), canvas_w, canvas_h, fit_mode
    )
    return _cells_from_samples(
        cols, rows, rgba, inside, max_level, black_point, white_point, invert
    )


__all__ = [
    "compute_fit",
    "luminance_to_level",
    "blank_level",
    "blank_grid",
    "quantize",
    "quantize_variable",
]
