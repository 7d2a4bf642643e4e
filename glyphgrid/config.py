# glyphgrid/config.py
from __future__ import annotations

"""
Render settings: the configuration surface read by the grid pipeline.

Exports:
- RenderSettings (dataclass) with validated() clamping
- calculate_cell_size(size, style) -> CellSize
- parse_size("WxH") / parse_range("minW,maxW,minH,maxH")
- settings_from_args(namespace) -> RenderSettings
"""

import argparse
import math
from dataclasses import dataclass, field, replace
from typing import Tuple

from .constants import (
    BLACK_POINT_RANGE,
    DEFAULT_BG_BLUR,
    DEFAULT_BG_SCALE,
    DEFAULT_BLACK_POINT,
    DEFAULT_CELL_HEIGHT,
    DEFAULT_CELL_SIZE_RANGE,
    DEFAULT_CELL_WIDTH,
    DEFAULT_WHITE_POINT,
    WHITE_POINT_RANGE,
)
from .core_types import (
    COLOR_MODES,
    FIT_MODES,
    RENDER_STYLES,
    CellSize,
    CellSizeRange,
    ColorMode,
    FitMode,
    RenderStyle,
    clamp_value,
    hex_to_rgb,
    rgb_to_hex,
)


@dataclass
class RenderSettings:
    cell_size: CellSize = field(
        default_factory=lambda: CellSize(DEFAULT_CELL_WIDTH, DEFAULT_CELL_HEIGHT)
    )
    fit_mode: FitMode = "contain"
    black_point: float = DEFAULT_BLACK_POINT
    white_point: float = DEFAULT_WHITE_POINT
    invert: bool = False
    color_mode: ColorMode = "monochrome"
    style: RenderStyle = "Ascii"
    cell_size_range: CellSizeRange = field(
        default_factory=lambda: CellSizeRange(*DEFAULT_CELL_SIZE_RANGE)
    )
    bg_blur: float = DEFAULT_BG_BLUR
    bg_scale: float = DEFAULT_BG_SCALE
    bg_offset: Tuple[float, float] = (0.0, 0.0)

    def validated(self) -> "RenderSettings":
        """Copy with every field forced into its legal range."""
        fit_mode = self.fit_mode if self.fit_mode in FIT_MODES else "contain"
        color_mode = (
            self.color_mode if self.color_mode in COLOR_MODES else "monochrome"
        )
        style = self.style if self.style in RENDER_STYLES else "Ascii"
        return replace(
            self,
            cell_size=CellSize(
                max(1, int(self.cell_size.width)), max(1, int(self.cell_size.height))
            ),
            fit_mode=fit_mode,
            black_point=float(clamp_value(float(self.black_point), *BLACK_POINT_RANGE)),
            white_point=float(clamp_value(float(self.white_point), *WHITE_POINT_RANGE)),
            color_mode=color_mode,
            style=style,
            cell_size_range=self.cell_size_range.normalized(),
            bg_blur=max(0.0, float(self.bg_blur)),
            bg_scale=max(0.01, float(self.bg_scale)),
        )

    def grid_dimensions(self, canvas_w: float, canvas_h: float) -> Tuple[int, int]:
        """(cols, rows) covering the canvas with uniform cells; partial cells count."""
        if canvas_w <= 0 or canvas_h <= 0:
            return 0, 0
        cols = math.ceil(canvas_w / self.cell_size.width)
        rows = math.ceil(canvas_h / self.cell_size.height)
        return cols, rows


def calculate_cell_size(size: int, style: RenderStyle, height: int = 0) -> CellSize:
    """Ascii cells are twice as tall as wide; other styles are square unless given."""
    size = max(1, int(size))
    if style == "Ascii":
        return CellSize(size, size * 2)
    return CellSize(size, int(height) if height > 0 else size)


def parse_size(text: str) -> Tuple[int, int]:
    """'WxH' -> (W, H)."""
    try:
        w_str, h_str = text.lower().split("x", 1)
        w, h = int(w_str), int(h_str)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WxH, got {text!r}") from None
    if w <= 0 or h <= 0:
        raise argparse.ArgumentTypeError(f"size must be positive, got {text!r}")
    return w, h


def parse_range(text: str) -> CellSizeRange:
    """'minW,maxW,minH,maxH' or 'min,max' (both axes) -> CellSizeRange."""
    try:
        parts = [int(p.strip()) for p in text.split(",") if p.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"non-integer range {text!r}") from None
    if len(parts) == 2:
        parts = parts * 2
    if len(parts) != 4:
        raise argparse.ArgumentTypeError(
            f"expected minW,maxW,minH,maxH or min,max, got {text!r}"
        )
    return CellSizeRange(*parts).normalized()


def parse_hex_color(text: str) -> str:
    """'#rgb' or '#rrggbb' -> normalized '#rrggbb'."""
    try:
        return rgb_to_hex(hex_to_rgb(text))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected a colour like #rrggbb, got {text!r}"
        ) from None


def settings_from_args(args: argparse.Namespace) -> RenderSettings:
    """Build validated settings from the CLI namespace."""
    if args.cell is not None:
        cell_size = CellSize(*args.cell)
    else:
        cell_size = calculate_cell_size(args.size, args.style)
    settings = RenderSettings(
        cell_size=cell_size,
        fit_mode=args.fit,
        black_point=args.black,
        white_point=args.white,
        invert=args.invert,
        color_mode=args.color_mode,
        style=args.style,
        cell_size_range=args.range,
        bg_blur=args.bg_blur,
    )
    return settings.validated()


__all__ = [
    "RenderSettings",
    "calculate_cell_size",
    "parse_size",
    "parse_range",
    "parse_hex_color",
    "settings_from_args",
]
