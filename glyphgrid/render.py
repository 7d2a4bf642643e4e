# glyphgrid/render.py
from __future__ import annotations

"""
Cell -> draw instruction mapping.

render_cell is pure: it reads one cell plus the settings and returns a DrawOp
describing what to paint in the cell rectangle. Rasterising the ops is the
caller's job (see export.render_grid_image).

Kinds:
  text        : glyph at (x, y), top-left anchored
  circle      : filled dot centred in the cell
  rect        : solid block covering the cell
  transparent : do not draw; caller shows the background layer here
  empty       : nothing to draw (e.g. zero-radius dot)
"""

from dataclasses import dataclass
from typing import Iterator, List, Literal, Optional, Sequence, Tuple

from .config import RenderSettings
from .constants import DOT_RADIUS_FRACTION
from .core_types import (
    Cell,
    CellSize,
    Colors,
    Grid,
    RGBTuple,
    VariableCellDimensions,
    clamp_level,
    hex_to_rgb,
)

DrawKind = Literal["text", "circle", "rect", "transparent", "empty"]


@dataclass(frozen=True)
class DrawOp:
    kind: DrawKind
    x: float
    y: float
    width: float
    height: float
    fill: Optional[RGBTuple] = None
    text: str = ""
    radius: float = 0.0
    # cell backdrop for reverse-video glyphs
    background: Optional[RGBTuple] = None

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)


def _level_fraction(level: int, max_level: int) -> float:
    if max_level <= 0:
        return 0.0
    return clamp_level(level, max_level) / float(max_level)


def _tint(cell: Cell, settings: RenderSettings, colors: Colors) -> RGBTuple:
    if settings.color_mode == "monochrome":
        return hex_to_rgb(colors.fg)
    return cell.rgb


def dot_radius(level: int, max_level: int, width: float, height: float) -> float:
    """Monotonic in level; capped at DOT_RADIUS_FRACTION of half the short side."""
    return _level_fraction(level, max_level) * min(width, height) / 2.0 * DOT_RADIUS_FRACTION


def render_cell(
    cell: Cell,
    settings: RenderSettings,
    x: float,
    y: float,
    symbols: Sequence[str],
    colors: Colors,
    cell_size_override: Optional[CellSize] = None,
) -> DrawOp:
    size = cell_size_override if cell_size_override is not None else settings.cell_size
    w, h = float(size.width), float(size.height)

    if cell.is_transparent:
        return DrawOp("transparent", x, y, w, h)

    max_level = max(0, len(symbols) - 1)
    level = clamp_level(cell.current_level, max_level)

    if settings.style == "Dot":
        radius = dot_radius(level, max_level, w, h)
        if radius <= 0.0:
            return DrawOp("empty", x, y, w, h)
        return DrawOp("circle", x, y, w, h, fill=_tint(cell, settings, colors), radius=radius)

    if settings.style == "Palette":
        if settings.color_mode == "monochrome":
            value = _level_fraction(level, max_level)
            if settings.invert:
                value = 1.0 - value
            grey = int(round(value * 255))
            fill = (grey, grey, grey)
        else:
            fill = cell.rgb
        return DrawOp("rect", x, y, w, h, fill=fill)

    glyph = symbols[level] if symbols else ""
    if settings.color_mode == "monochrome" and settings.invert:
        return DrawOp(
            "text",
            x,
            y,
            w,
            h,
            fill=hex_to_rgb(colors.bg),
            text=glyph,
            background=hex_to_rgb(colors.fg),
        )
    return DrawOp("text", x, y, w, h, fill=_tint(cell, settings, colors), text=glyph)


def iter_cell_placements(
    grid: Grid,
    settings: RenderSettings,
    dims: Optional[VariableCellDimensions] = None,
) -> Iterator[Tuple[Cell, float, float, Optional[CellSize]]]:
    """(cell, x, y, override) for every cell, variable offsets in Palette style."""
    variable = settings.style == "Palette" and dims is not None
    for cell in grid:
        if variable:
            x, y, w, h = dims.cell_rect(cell.col, cell.row)  # type: ignore[union-attr]
            yield cell, x, y, CellSize(w, h)
        else:
            yield (
                cell,
                cell.col * settings.cell_size.width,
                cell.row * settings.cell_size.height,
                None,
            )


def render_grid(
    grid: Grid,
    settings: RenderSettings,
    symbols: Sequence[str],
    colors: Colors,
    dims: Optional[VariableCellDimensions] = None,
) -> List[DrawOp]:
    """Draw ops for the whole grid in grid order."""
    return [
        render_cell(cell, settings, x, y, symbols, colors, override)
        for cell, x, y, override in iter_cell_placements(grid, settings, dims)
    ]


__all__ = ["DrawOp", "dot_radius", "render_cell", "iter_cell_placements", "render_grid"]
