# glyphgrid/constants.py
"""
Global symbol ramp and tunables used across the project.

- IMAGE_ASCII_CHARS (index 0 = emptiest, last = densest)
- Quantizer constants (luminance weights, alpha threshold)
- Edit overlay key precision
- Layout defaults (cell size, variable range bounds)
- Scheduling delays and render tunables
"""
from __future__ import annotations

from typing import List, Tuple

# =========================
# Symbol ramp
# =========================
IMAGE_ASCII_CHARS: str = " .:-=+*#%@"

# =========================
# Quantizer
# =========================
# ITU-R BT.709
LUMA_WEIGHTS: Tuple[float, float, float] = (0.2126, 0.7152, 0.0722)
# alpha below this marks a cell transparent
ALPHA_TRANSPARENT_BELOW: int = 56
# absorbs float error at exact level boundaries
LEVEL_EPSILON: float = 1e-9

DEFAULT_BLACK_POINT: float = 0.0
DEFAULT_WHITE_POINT: float = 1.0
BLACK_POINT_RANGE: Tuple[float, float] = (0.0, 0.5)
WHITE_POINT_RANGE: Tuple[float, float] = (0.5, 1.0)

# =========================
# Edit overlay
# =========================
# decimals kept in normalized (fx, fy) keys
KEY_PRECISION: int = 6

# =========================
# Layout
# =========================
DEFAULT_CELL_WIDTH: int = 10
DEFAULT_CELL_HEIGHT: int = 20
# variable range inputs are clamped to this
CELL_RANGE_BOUNDS: Tuple[int, int] = (1, 2000)
DEFAULT_CELL_SIZE_RANGE: Tuple[int, int, int, int] = (10, 40, 10, 40)

DEFAULT_CANVAS_SIZE: Tuple[int, int] = (800, 600)

# =========================
# Scheduling
# =========================
DEBOUNCE_SECONDS: float = 0.1

# =========================
# Rendering / export
# =========================
DEFAULT_BG: str = "#111111"
DEFAULT_FG: str = "#ffffff"
# dot radius cap as a fraction of half the short cell side
DOT_RADIUS_FRACTION: float = 0.9
# glyph font size relative to cell height
FONT_SIZE_RATIO: float = 0.85

DEFAULT_BG_BLUR: float = 4.0
DEFAULT_BG_SCALE: float = 1.0

MONO_FONT_CANDIDATES: List[str] = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "/System/Library/Fonts/Menlo.ttc",
    r"C:\Windows\Fonts\consola.ttf",
    r"C:\Windows\Fonts\cour.ttf",
]

# =========================
# Brush palette (hex, name)
# =========================
BRUSH_PALETTE: List[Tuple[str, str]] = [
    ("#ffffff", "White"),
    ("#000000", "Black"),
    ("#ed1c24", "Red"),
    ("#ff7f27", "Orange"),
    ("#f9dd3b", "Yellow"),
    ("#13e67b", "Green"),
    ("#10aea6", "Teal"),
    ("#4093e4", "Blue"),
    ("#6b50f6", "Indigo"),
    ("#e4abff", "Lavender"),
    ("#f38da9", "Pink"),
    ("#95682a", "Brown"),
]
