# glyphgrid/core_types.py
from __future__ import annotations

"""
Core type aliases, grid value objects, and lightweight helpers.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from .constants import CELL_RANGE_BOUNDS, DEFAULT_BG, DEFAULT_FG

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA

FitMode = Literal["cover", "contain"]
ColorMode = Literal["monochrome", "original", "mixed"]
RenderStyle = Literal["Ascii", "Dot", "Palette"]
DrawingMode = Literal["brush", "increment", "decrement", "eraser"]

CellKey = Tuple[int, int]  # (col, row)
EditKey = Tuple[float, float]  # (fx, fy) fraction of canvas size

FIT_MODES: Tuple[str, ...] = ("cover", "contain")
COLOR_MODES: Tuple[str, ...] = ("monochrome", "original", "mixed")
RENDER_STYLES: Tuple[str, ...] = ("Ascii", "Dot", "Palette")
DRAWING_MODES: Tuple[str, ...] = ("brush", "increment", "decrement", "eraser")

# Value objects


@dataclass
class Cell:
    """One grid unit. Mutated in place while drawing."""

    col: int
    row: int
    base_level: int
    current_level: int
    r: int = 0
    g: int = 0
    b: int = 0
    is_transparent: bool = False

    @property
    def rgb(self) -> RGBTuple:
        return (self.r, self.g, self.b)


Grid = List[Cell]


@dataclass(frozen=True)
class CellSize:
    width: int
    height: int


@dataclass(frozen=True)
class CellSizeRange:
    """Random sizing envelope for the variable layout."""

    min_width: int
    max_width: int
    min_height: int
    max_height: int

    def normalized(self) -> "CellSizeRange":
        """Integers within CELL_RANGE_BOUNDS with min <= max on both axes."""
        lo, hi = CELL_RANGE_BOUNDS

        def fix(v: int) -> int:
            return int(clamp_value(int(v), lo, hi))

        w0, w1 = sorted((fix(self.min_width), fix(self.max_width)))
        h0, h1 = sorted((fix(self.min_height), fix(self.max_height)))
        return CellSizeRange(w0, w1, h0, h1)

    @property
    def is_uniform(self) -> bool:
        return self.min_width == self.max_width and self.min_height == self.max_height


@dataclass
class VariableCellDimensions:
    """Per-column widths and per-row heights with exclusive prefix offsets."""

    column_widths: List[int]
    row_heights: List[int]
    column_offsets: List[int]
    row_offsets: List[int]

    @property
    def cols(self) -> int:
        return len(self.column_widths)

    @property
    def rows(self) -> int:
        return len(self.row_heights)

    @property
    def total_width(self) -> int:
        if not self.column_widths:
            return 0
        return self.column_offsets[-1] + self.column_widths[-1]

    @property
    def total_height(self) -> int:
        if not self.row_heights:
            return 0
        return self.row_offsets[-1] + self.row_heights[-1]

    def cell_rect(self, col: int, row: int) -> Tuple[int, int, int, int]:
        """(x, y, w, h) of a cell."""
        return (
            self.column_offsets[col],
            self.row_offsets[row],
            self.column_widths[col],
            self.row_heights[row],
        )

    def cell_at(self, x: float, y: float) -> Optional[CellKey]:
        # local import: variable_dimensions imports this module
        from .variable_dimensions import find_column_at_x, find_row_at_y

        col = find_column_at_x(x, self.column_offsets, extent=self.total_width)
        row = find_row_at_y(y, self.row_offsets, extent=self.total_height)
        if col is None or row is None:
            return None
        return (col, row)


@dataclass
class Edit:
    """
    One recorded stroke.

    brush     : level set directly (rgb optional)
    increment : signed delta (+1)
    decrement : signed delta (-1)
    eraser    : level is the blank level, transparency forced
    """

    mode: DrawingMode
    level: Optional[int] = None
    delta: Optional[int] = None
    is_transparent: Optional[bool] = None
    rgb: Optional[RGBTuple] = None


@dataclass
class Colors:
    bg: HexStr = DEFAULT_BG
    fg: HexStr = DEFAULT_FG


@dataclass
class EditOverlay:
    """Sparse store of edits keyed by normalized canvas position."""

    width: float
    height: float
    edits: Dict[EditKey, Edit] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.edits)


# Small helpers


def clamp_value(value: float, lo: float, hi: float) -> float:
    """Clamp value to [lo, hi]."""
    return lo if value < lo else hi if value > hi else value


def clamp_level(level: int, max_level: int) -> int:
    """Clamp an integer level to [0, max_level]."""
    return int(clamp_value(int(level), 0, max(0, int(max_level))))


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        raise ValueError("hex must start with '#'")
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError("hex must be '#rrggbb' or '#rgb'")
    return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))


def assert_u8_image_rgba(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,4) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 4:
        raise TypeError("expected uint8 (H,W,4) image")
    return image  # type: ignore[return-value]


__all__ = [
    "RGBTuple",
    "HexStr",
    "U8Image",
    "FitMode",
    "ColorMode",
    "RenderStyle",
    "DrawingMode",
    "CellKey",
    "EditKey",
    "FIT_MODES",
    "COLOR_MODES",
    "RENDER_STYLES",
    "DRAWING_MODES",
    "Cell",
    "Grid",
    "CellSize",
    "CellSizeRange",
    "VariableCellDimensions",
    "Edit",
    "Colors",
    "EditOverlay",
    "clamp_value",
    "clamp_level",
    "rgb_to_hex",
    "hex_to_rgb",
    "assert_u8_image_rgba",
]
