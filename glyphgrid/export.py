# glyphgrid/export.py
from __future__ import annotations

"""
Grid export: plain text and a composited RGBA raster.

The raster is two layers, matching the editor canvas:
  background : bg colour, plus the fitted, blurred source image in mixed mode
  glyphs     : render_grid draw ops; transparent cells leave the background
               showing through
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .config import RenderSettings
from .constants import FONT_SIZE_RATIO, MONO_FONT_CANDIDATES
from .core_types import Colors, Grid, VariableCellDimensions, clamp_level, hex_to_rgb
from .image_io import SourceImage
from .quantize import compute_fit
from .render import DrawOp, render_grid


def grid_to_text(grid: Grid, symbols: Sequence[str], cols: int, rows: int) -> str:
    """
    One line per row, one ramp character per cell by current level.

    Rows are joined with '\\n'; there is no trailing newline. Missing cells
    print as the ramp's first character.
    """
    if cols <= 0 or rows <= 0 or not symbols:
        return ""
    max_level = len(symbols) - 1
    lines = []
    for row in range(rows):
        chars = []
        for col in range(cols):
            index = row * cols + col
            if index < len(grid):
                chars.append(symbols[clamp_level(grid[index].current_level, max_level)])
            else:
                chars.append(symbols[0])
        lines.append("".join(chars))
    return "\n".join(lines)


@lru_cache(maxsize=32)
def get_font_for_cell_size(cell_height: int) -> ImageFont.ImageFont:
    """Monospace font sized to the cell; Pillow's default font as fallback."""
    size = max(1, int(round(cell_height * FONT_SIZE_RATIO)))
    for path in MONO_FONT_CANDIDATES:
        if Path(path).exists():
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


def render_background(
    canvas_size: Tuple[int, int],
    settings: RenderSettings,
    colors: Colors,
    source: Optional[SourceImage] = None,
) -> Image.Image:
    """Background layer; the blurred source is drawn only in mixed mode."""
    width, height = canvas_size
    layer = Image.new("RGBA", (max(1, width), max(1, height)), hex_to_rgb(colors.bg) + (255,))
    if settings.color_mode != "mixed" or source is None or source.image is None:
        return layer

    base_scale, _dx, _dy = compute_fit(
        source.width, source.height, width, height, settings.fit_mode
    )
    scale = base_scale * settings.bg_scale
    dw = max(1, int(round(source.width * scale)))
    dh = max(1, int(round(source.height * scale)))
    dx = (width - dw) / 2.0 + settings.bg_offset[0]
    dy = (height - dh) / 2.0 + settings.bg_offset[1]

    fitted = source.image.resize((dw, dh), Image.Resampling.LANCZOS)
    picture = Image.new("RGBA", layer.size, (0, 0, 0, 0))
    picture.paste(fitted, (int(round(dx)), int(round(dy))))
    if settings.bg_blur > 0:
        picture = picture.filter(ImageFilter.GaussianBlur(settings.bg_blur))
    return Image.alpha_composite(layer, picture)


def draw_ops(layer: Image.Image, ops: Sequence[DrawOp], cell_height: int) -> None:
    """Rasterise draw ops onto an RGBA layer in place."""
    draw = ImageDraw.Draw(layer)
    font = get_font_for_cell_size(cell_height)
    for op in ops:
        x0, y0 = op.x, op.y
        x1, y1 = op.x + op.width - 1, op.y + op.height - 1
        if op.kind == "rect" and op.fill is not None:
            draw.rectangle([x0, y0, x1, y1], fill=op.fill + (255,))
        elif op.kind == "circle" and op.fill is not None:
            cx, cy = op.center
            r = op.radius
            draw.ellipse([cx - r, cy - r, cx + r, cy + r], fill=op.fill + (255,))
        elif op.kind == "text" and op.fill is not None:
            if op.background is not None:
                draw.rectangle([x0, y0, x1, y1], fill=op.background + (255,))
            if op.text.strip():
                draw.text((x0, y0), op.text, fill=op.fill + (255,), font=font)


def render_grid_image(
    grid: Grid,
    settings: RenderSettings,
    symbols: Sequence[str],
    colors: Colors,
    canvas_size: Tuple[int, int],
    dims: Optional[VariableCellDimensions] = None,
    source: Optional[SourceImage] = None,
) -> Image.Image:
    """Background and glyph layers composited into one RGBA image."""
    background = render_background(canvas_size, settings, colors, source)
    glyphs = Image.new("RGBA", background.size, (0, 0, 0, 0))
    ops = render_grid(grid, settings, symbols, colors, dims)
    draw_ops(glyphs, ops, settings.cell_size.height)
    return Image.alpha_composite(background, glyphs)


__all__ = [
    "grid_to_text",
    "get_font_for_cell_size",
    "render_background",
    "draw_ops",
    "render_grid_image",
]
