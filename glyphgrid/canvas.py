# glyphgrid/canvas.py
from __future__ import annotations

"""
Canvas controller: single owner of the grid and everything derived from it.

Holds the current Grid, the EditOverlay, the SourceImage and the variable
layout, and funnels every mutation through one lock:
  - drawing goes through the frame coalescer (one mutation per frame)
  - regenerating changes (cell size, contrast, range, window size) go through
    debouncers so bursts collapse into one recompute

Regeneration always re-quantizes the base grid and then resamples the overlay
onto it, so strokes survive resolution, contrast and layout changes.
"""

import threading
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from .config import RenderSettings, calculate_cell_size
from .constants import (
    BRUSH_PALETTE,
    DEBOUNCE_SECONDS,
    DEFAULT_BG_BLUR,
    DEFAULT_BG_SCALE,
    DEFAULT_BLACK_POINT,
    DEFAULT_WHITE_POINT,
    IMAGE_ASCII_CHARS,
)
from .core_types import (
    COLOR_MODES,
    DRAWING_MODES,
    Cell,
    CellKey,
    CellSize,
    CellSizeRange,
    ColorMode,
    Colors,
    DrawingMode,
    Edit,
    EditOverlay,
    FitMode,
    Grid,
    RenderStyle,
    VariableCellDimensions,
    hex_to_rgb,
    rgb_to_hex,
)
from .edit_overlay import (
    apply_edits_to_grid,
    batch_sample_edits,
    batch_sample_edits_variable,
    clear_overlay,
    create_edit_overlay,
    record_edit,
    resize_overlay,
)
from .export import grid_to_text, render_grid_image
from .grid_resize import resize_grid_periphery
from .image_io import ImageDecodeError, ImageSource, SourceImage, load_source_image
from .quantize import blank_grid, blank_level, quantize, quantize_variable
from .render import DrawOp, render_grid
from .scheduling import Debouncer, FrameCoalescer
from .utils import debug_log, error, key_value_pairs_to_string
from .variable_dimensions import generate_variable_dimensions


class CanvasController:
    """
    Owns the grid pipeline for one canvas of width x height pixels.

    Public handlers mirror the editor's controls. The request_* variants are
    debounced; call flush_pending() to run any pending regeneration now.
    """

    def __init__(
        self,
        width: int,
        height: int,
        settings: Optional[RenderSettings] = None,
        *,
        symbols: Sequence[str] = IMAGE_ASCII_CHARS,
        colors: Optional[Colors] = None,
        debounce: float = DEBOUNCE_SECONDS,
        rng: Optional[np.random.Generator] = None,
        debug: bool = False,
    ) -> None:
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        self.settings = (settings or RenderSettings()).validated()
        self.symbols: List[str] = list(symbols)
        self.colors = colors or Colors()
        self.debug = debug

        self.grid: Grid = []
        self.overlay: EditOverlay = create_edit_overlay(self.width, self.height)
        self.source: Optional[SourceImage] = None
        self.variable_dims: Optional[VariableCellDimensions] = None
        self.is_resizing = False

        # drawing selection
        self.drawing_mode: Optional[DrawingMode] = None
        self.selected_symbol = 0
        self.selected_color = BRUSH_PALETTE[0][0]

        self._rng = rng if rng is not None else np.random.default_rng()
        self._lock = threading.RLock()
        self._frames = FrameCoalescer()
        self._is_dragging = False
        self._last_drawn: Optional[CellKey] = None

        self._debounced = [
            Debouncer(self._debounced_cell_size, debounce),
            Debouncer(self._debounced_contrast, debounce),
            Debouncer(self._debounced_range, debounce),
            Debouncer(self._debounced_resize, debounce),
        ]
        (
            self._cell_size_debouncer,
            self._contrast_debouncer,
            self._range_debouncer,
            self._resize_debouncer,
        ) = self._debounced
        if self.settings.style == "Palette":
            self._generate_dims()

    # Derived state

    @property
    def max_level(self) -> int:
        return max(0, len(self.symbols) - 1)

    @property
    def blank_level(self) -> int:
        return blank_level(self.max_level, self.settings.invert)

    @property
    def has_source_image(self) -> bool:
        return self.source is not None and not self.source.closed

    @property
    def uses_variable_layout(self) -> bool:
        return self.settings.style == "Palette" and self.variable_dims is not None

    @property
    def dimensions(self) -> Tuple[int, int]:
        """(cols, rows) of the active layout."""
        if self.uses_variable_layout:
            assert self.variable_dims is not None
            return self.variable_dims.cols, self.variable_dims.rows
        return self.settings.grid_dimensions(self.width, self.height)

    # Grid generation

    def _quantize_now(self) -> Grid:
        cols, rows = self.dimensions
        source = self.source if self.has_source_image else None
        if source is None or source.bitmap is None:
            return blank_grid(cols, rows, self.blank_level)
        s = self.settings
        if self.uses_variable_layout:
            assert self.variable_dims is not None
            return quantize_variable(
                source.bitmap,
                self.variable_dims,
                self.width,
                self.height,
                self.symbols,
                s.fit_mode,
                s.black_point,
                s.white_point,
                s.invert,
            )
        return quantize(
            source.bitmap,
            cols,
            rows,
            self.symbols,
            s.cell_size,
            s.fit_mode,
            s.black_point,
            s.white_point,
            s.invert,
            canvas_size=(self.width, self.height),
        )

    def _reapply_overlay(self, grid: Grid) -> int:
        if not self.overlay.edits:
            return 0
        if self.uses_variable_layout:
            assert self.variable_dims is not None
            edit_map = batch_sample_edits_variable(self.overlay, self.variable_dims)
        else:
            cols, rows = self.dimensions
            edit_map = batch_sample_edits(self.overlay, self.settings.cell_size, cols, rows)
        return apply_edits_to_grid(grid, edit_map, self.max_level, self.blank_level)

    def regenerate(self) -> Grid:
        """Re-quantize the base grid and reapply the overlay onto it."""
        with self._lock:
            grid = self._quantize_now()
            touched = self._reapply_overlay(grid)
            self.grid = grid
            if self.debug:
                cols, rows = self.dimensions
                debug_log(
                    key_value_pairs_to_string(
                        [
                            ("Regenerated", f"{cols}x{rows}"),
                            ("Edits", len(self.overlay)),
                            ("Edited cells", touched),
                        ]
                    )
                )
            return grid

    def init_grid(self) -> Grid:
        """Blank grid (or the current source) with a fresh overlay."""
        with self._lock:
            self.overlay = create_edit_overlay(self.width, self.height)
            if self.settings.style == "Palette" and self.variable_dims is None:
                self._generate_dims()
            return self.regenerate()

    # Source image

    def _replace_source(self, source: Optional[SourceImage]) -> None:
        if self.source is not None and self.source is not source:
            self.source.close()
        self.source = source

    def load_image(self, source: ImageSource, fit_mode: FitMode = "contain") -> Grid:
        """
        Decode and adopt a new source image; edits start over.

        On decode failure the previous image is released, the grid falls back
        to blank, and ImageDecodeError propagates to the caller.
        """
        with self._lock:
            try:
                decoded = load_source_image(source)
            except ImageDecodeError as exc:
                error(f"failed to load image: {exc}")
                self._replace_source(None)
                self.overlay = create_edit_overlay(self.width, self.height)
                cols, rows = self.dimensions
                self.grid = blank_grid(cols, rows, self.blank_level)
                raise
            return self.adopt_source(decoded, fit_mode)

    def adopt_source(self, source: SourceImage, fit_mode: FitMode = "contain") -> Grid:
        """Take ownership of an already decoded SourceImage."""
        with self._lock:
            self._replace_source(source)
            self.overlay = create_edit_overlay(self.width, self.height)
            self.settings.fit_mode = fit_mode
            if self.debug:
                debug_log(f"source {source.width}x{source.height} fit={fit_mode}")
            return self.regenerate()

    # Regenerating settings

    def set_cell_size(self, cell_size: CellSize) -> Grid:
        with self._lock:
            self.settings.cell_size = CellSize(
                max(1, int(cell_size.width)), max(1, int(cell_size.height))
            )
            return self.regenerate()

    def set_cell_size_value(self, size: int) -> Grid:
        """Single-slider cell size, shaped for the current style."""
        return self.set_cell_size(calculate_cell_size(size, self.settings.style))

    def set_contrast(self, black_point: float, white_point: float) -> Grid:
        with self._lock:
            self.settings.black_point = black_point
            self.settings.white_point = white_point
            self.settings = self.settings.validated()
            return self.regenerate()

    def set_invert(self, invert: bool) -> Grid:
        with self._lock:
            self.settings.invert = bool(invert)
            return self.regenerate()

    def _generate_dims(self) -> None:
        self.variable_dims = generate_variable_dimensions(
            self.width, self.height, self.settings.cell_size_range, rng=self._rng
        )

    def set_style(self, style: RenderStyle) -> Grid:
        """Switch style; entering Palette builds a variable layout, leaving drops it."""
        with self._lock:
            previous = self.settings.style
            self.settings.style = style
            self.settings = self.settings.validated()
            if self.settings.style == previous:
                return self.grid
            if self.settings.style == "Palette":
                self._generate_dims()
            elif previous == "Palette":
                self.variable_dims = None
            self.settings.cell_size = calculate_cell_size(
                self.settings.cell_size.width, self.settings.style
            )
            return self.regenerate()

    def set_color_mode(self, mode: ColorMode) -> None:
        """Colour mode only changes rendering, not the grid."""
        with self._lock:
            self.settings.color_mode = mode
            self.settings = self.settings.validated()

    def cycle_color_mode(self) -> ColorMode:
        with self._lock:
            modes = list(COLOR_MODES)
            current = modes.index(self.settings.color_mode)
            self.settings.color_mode = modes[(current + 1) % len(modes)]  # type: ignore[assignment]
            return self.settings.color_mode

    def shuffle_dimensions(self) -> Grid:
        """New random variable layout with the current range (Palette only)."""
        with self._lock:
            if self.settings.style != "Palette":
                return self.grid
            self._generate_dims()
            return self.regenerate()

    def set_cell_size_range(self, cell_range: CellSizeRange) -> Grid:
        with self._lock:
            self.settings.cell_size_range = cell_range.normalized()
            if self.settings.style != "Palette":
                return self.grid
            self._generate_dims()
            return self.regenerate()

    def set_background(
        self,
        blur: float = DEFAULT_BG_BLUR,
        scale: float = DEFAULT_BG_SCALE,
        offset: Tuple[float, float] = (0.0, 0.0),
    ) -> None:
        with self._lock:
            self.settings.bg_blur = blur
            self.settings.bg_scale = scale
            self.settings.bg_offset = offset
            self.settings = self.settings.validated()

    # Viewport

    def resize_canvas(self, width: int, height: int) -> Grid:
        """
        Follow a viewport change.

        Uniform layouts keep existing cells centred and blank the periphery;
        the overlay moves by the same cell-aligned shift. A variable layout is
        rebuilt for the new canvas and regenerated.
        """
        with self._lock:
            width, height = max(0, int(width)), max(0, int(height))
            if self.uses_variable_layout:
                resize_overlay(self.overlay, width, height)
                self.width, self.height = width, height
                self._generate_dims()
                grid = self.regenerate()
            else:
                old_cols, old_rows = self.dimensions
                self.width, self.height = width, height
                new_cols, new_rows = self.dimensions
                grid = resize_grid_periphery(
                    self.grid,
                    old_cols,
                    old_rows,
                    new_cols,
                    new_rows,
                    blank_level=self.blank_level,
                    overlay=self.overlay,
                    cell_size=self.settings.cell_size,
                    canvas_size=(width, height),
                )
                self.grid = grid
            self.is_resizing = False
            return grid

    # Reset / clear

    def reset(self) -> Grid:
        """Drop all edits and contrast/background tweaks; keep the source image."""
        with self._lock:
            clear_overlay(self.overlay)
            self.settings.black_point = DEFAULT_BLACK_POINT
            self.settings.white_point = DEFAULT_WHITE_POINT
            self.settings.bg_blur = DEFAULT_BG_BLUR
            self.settings.bg_scale = DEFAULT_BG_SCALE
            self.settings.bg_offset = (0.0, 0.0)
            return self.regenerate()

    def clear(self) -> Grid:
        """Release the source image and start from a blank grid."""
        with self._lock:
            self._replace_source(None)
            clear_overlay(self.overlay)
            self.settings.black_point = DEFAULT_BLACK_POINT
            self.settings.white_point = DEFAULT_WHITE_POINT
            self.settings.bg_blur = DEFAULT_BG_BLUR
            self.settings.bg_scale = DEFAULT_BG_SCALE
            self.settings.bg_offset = (0.0, 0.0)
            cols, rows = self.dimensions
            self.grid = blank_grid(cols, rows, self.blank_level)
            return self.grid

    # Debounced handlers

    def _debounced_cell_size(self, cell_size: CellSize) -> None:
        with self._lock:
            self.set_cell_size(cell_size)
            self.is_resizing = False

    def _debounced_contrast(self, black_point: float, white_point: float) -> None:
        self.set_contrast(black_point, white_point)

    def _debounced_range(self, cell_range: CellSizeRange) -> None:
        with self._lock:
            self.set_cell_size_range(cell_range)
            self.is_resizing = False

    def _debounced_resize(self, width: int, height: int) -> None:
        self.resize_canvas(width, height)

    def request_cell_size_change(self, cell_size: CellSize) -> None:
        with self._lock:
            self.is_resizing = True
            self._cell_size_debouncer(cell_size)

    def request_contrast_change(self, black_point: float, white_point: float) -> None:
        with self._lock:
            self._contrast_debouncer(black_point, white_point)

    def request_cell_size_range_change(self, cell_range: CellSizeRange) -> None:
        with self._lock:
            self.settings.cell_size_range = cell_range.normalized()
            if self.settings.style == "Palette":
                self.is_resizing = True
            self._range_debouncer(cell_range)

    def request_resize(self, width: int, height: int) -> None:
        with self._lock:
            self.is_resizing = True
            self._resize_debouncer(width, height)

    def flush_pending(self) -> int:
        """Run every pending debounced call now. Returns how many ran."""
        return sum(1 for d in self._debounced if d.flush())

    def cancel_pending(self) -> None:
        with self._lock:
            for d in self._debounced:
                d.cancel()
            self._frames.cancel()
            self.is_resizing = False

    # Drawing

    def set_drawing_mode(self, mode: Optional[DrawingMode]) -> None:
        """Select a drawing mode; None stops drawing."""
        if mode is not None and mode not in DRAWING_MODES:
            raise ValueError(f"unknown drawing mode: {mode!r}")
        with self._lock:
            self.drawing_mode = mode
            self._last_drawn = None

    def select_brush(self, symbol: Optional[int] = None, color: Optional[str] = None) -> None:
        """
        Pick the brush symbol index and/or colour.

        color is '#rrggbb', '#rgb' or a BRUSH_PALETTE name (case-insensitive).
        """
        with self._lock:
            if symbol is not None:
                self.selected_symbol = max(0, min(int(symbol), self.max_level))
            if color is not None:
                named = {name.lower(): hex_code for hex_code, name in BRUSH_PALETTE}
                hex_code = named.get(color.strip().lower(), color)
                self.selected_color = rgb_to_hex(hex_to_rgb(hex_code))

    def cell_at(self, x: float, y: float) -> Optional[Cell]:
        """Cell under a canvas point, or None off the grid."""
        if self.uses_variable_layout:
            assert self.variable_dims is not None
            hit = self.variable_dims.cell_at(x, y)
            if hit is None:
                return None
            col, row = hit
            cols = self.variable_dims.cols
        else:
            if x < 0 or y < 0:
                return None
            col = int(x // self.settings.cell_size.width)
            row = int(y // self.settings.cell_size.height)
            cols, rows = self.dimensions
            if col >= cols or row >= rows:
                return None
        index = row * cols + col
        if index >= len(self.grid):
            return None
        return self.grid[index]

    def _edit_geometry(self, cell: Cell) -> Tuple[CellSize, Optional[Tuple[float, float]]]:
        if self.uses_variable_layout:
            assert self.variable_dims is not None
            x, y, w, h = self.variable_dims.cell_rect(cell.col, cell.row)
            return CellSize(w, h), (float(x), float(y))
        return self.settings.cell_size, None

    def apply_stroke(self, cell: Cell, mode: DrawingMode) -> None:
        """Mutate one cell for the drawing mode and record it in the overlay."""
        max_level = self.max_level
        colored = self.settings.style == "Palette" and self.settings.color_mode != "monochrome"
        if mode == "brush":
            level = max(0, min(int(self.selected_symbol), max_level))
            cell.is_transparent = False
            cell.current_level = level
            rgb = None
            if colored:
                rgb = hex_to_rgb(self.selected_color)
                cell.r, cell.g, cell.b = rgb
            edit = Edit(mode="brush", level=level, is_transparent=False, rgb=rgb)
        elif mode == "increment":
            cell.is_transparent = False
            cell.current_level = min(cell.current_level + 1, max_level)
            edit = Edit(mode="increment", delta=1, is_transparent=False)
        elif mode == "decrement":
            cell.is_transparent = False
            cell.current_level = max(cell.current_level - 1, 0)
            edit = Edit(mode="decrement", delta=-1, is_transparent=False)
        elif mode == "eraser":
            cell.is_transparent = True
            cell.current_level = self.blank_level
            edit = Edit(mode="eraser", level=cell.current_level, is_transparent=True)
        else:
            raise ValueError(f"unknown drawing mode: {mode!r}")
        size, origin = self._edit_geometry(cell)
        record_edit(self.overlay, cell.col, cell.row, size, edit, origin=origin)

    def draw_at(self, x: float, y: float) -> Optional[Cell]:
        """
        Apply the active drawing mode at a canvas point.

        Skips the cell drawn last in the current stroke. Returns the mutated
        cell, or None when nothing changed.
        """
        with self._lock:
            if self.drawing_mode is None:
                return None
            cell = self.cell_at(x, y)
            if cell is None:
                return None
            key = (cell.col, cell.row)
            if key == self._last_drawn:
                return None
            self._last_drawn = key
            self.apply_stroke(cell, self.drawing_mode)
            return cell

    def pointer_down(self, x: float, y: float) -> None:
        self._is_dragging = True
        self._last_drawn = None
        self._frames.request(lambda: self.draw_at(x, y))

    def pointer_move(self, x: float, y: float) -> None:
        if not self._is_dragging:
            return
        self._frames.request(lambda: self.draw_at(x, y))

    def pointer_up(self) -> None:
        self._is_dragging = False
        self._last_drawn = None
        self._frames.cancel()

    def run_frame(self) -> bool:
        """Host calls this once per animation frame."""
        return self._frames.run_frame()

    @property
    def frame_pending(self) -> bool:
        return self._frames.pending

    # Output

    def render(self) -> List[DrawOp]:
        with self._lock:
            dims = self.variable_dims if self.uses_variable_layout else None
            return render_grid(self.grid, self.settings, self.symbols, self.colors, dims)

    def to_text(self) -> str:
        with self._lock:
            cols, rows = self.dimensions
            return grid_to_text(self.grid, self.symbols, cols, rows)

    def to_image(self) -> Image.Image:
        with self._lock:
            dims = self.variable_dims if self.uses_variable_layout else None
            return render_grid_image(
                self.grid,
                self.settings,
                self.symbols,
                self.colors,
                (self.width, self.height),
                dims=dims,
                source=self.source if self.has_source_image else None,
            )

    def save_text(self, path: Path) -> Path:
        path.write_text(self.to_text(), encoding="utf-8")
        return path

    def close(self) -> None:
        """Cancel pending work and release the source image."""
        self.cancel_pending()
        with self._lock:
            self._replace_source(None)

    def __enter__(self) -> "CanvasController":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = ["CanvasController"]
