# glyphgrid/__init__.py
"""
glyphgrid package.

Purpose:
  Turn a raster image into an editable grid of quantized cells (ASCII glyphs,
  dots or colour blocks) whose hand edits survive resolution, contrast and
  layout changes. See glyphgrid_cli.py for the command line.

Public API:
  quantize            : bitmap -> uniform cell grid.
  quantize_variable   : bitmap -> variable-layout cell grid.
  edit_overlay        : resolution-independent stroke store.
  variable_dimensions : random column/row layout and point lookup.
  grid_resize         : centre-anchored periphery resize.
  render              : cell -> draw op mapping.
  export              : text and PNG output.
  CanvasController    : single owner tying the pipeline together.

Quick start:
  from glyphgrid import CanvasController
  with CanvasController(800, 600) as canvas:
      canvas.load_image("photo.jpg")
      print(canvas.to_text())
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import core_types
from . import constants
from . import config
from . import edit_overlay
from . import variable_dimensions
from . import grid_resize
from . import render
from . import export
from . import utils

from .canvas import CanvasController  # noqa: E402,F401
from .config import RenderSettings  # noqa: E402,F401
from .core_types import (  # noqa: E402,F401
    Cell,
    CellSize,
    CellSizeRange,
    Colors,
    Edit,
    EditOverlay,
    VariableCellDimensions,
)
from .image_io import ImageDecodeError, SourceImage, load_source_image  # noqa: E402,F401
from .quantize import quantize, quantize_variable  # noqa: E402,F401

__all__ = [
    "__version__",
    "core_types",
    "constants",
    "config",
    "edit_overlay",
    "variable_dimensions",
    "grid_resize",
    "render",
    "export",
    "utils",
    "CanvasController",
    "RenderSettings",
    "Cell",
    "CellSize",
    "CellSizeRange",
    "Colors",
    "Edit",
    "EditOverlay",
    "VariableCellDimensions",
    "ImageDecodeError",
    "SourceImage",
    "load_source_image",
    "quantize",
    "quantize_variable",
]
