#!/usr/bin/env python3
"""
glyphgrid_cli.py
Convert images into ASCII, dot or colour-block grids and export them as text or PNG.

Usage:
  python glyphgrid_cli.py INPUT [--outdir DIR] --style [Ascii|Dot|Palette] --size N
      --canvas WxH --fit [contain|cover] --black B --white W --invert
      --color-mode [monochrome|original|mixed] --format [txt|png] --debug

Styles:
  Ascii   : one ramp character per cell; cells are twice as tall as wide.
  Dot     : filled dot per cell, radius grows with the level.
  Palette : solid blocks on a random variable layout (see --range, --seed).

Input:
  Any Pillow-readable image, or a folder of them. Alpha below 56 leaves the cell
  transparent.

Output:
  <stem>_glyph.txt or <stem>_glyph.png next to INPUT, or under --outdir.
"""

from __future__ import annotations

import argparse
import io
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from glyphgrid.canvas import CanvasController
from glyphgrid.config import (
    RenderSettings,
    parse_hex_color,
    parse_range,
    parse_size,
    settings_from_args,
)
from glyphgrid.constants import (
    DEFAULT_BG_BLUR,
    DEFAULT_BLACK_POINT,
    DEFAULT_CANVAS_SIZE,
    DEFAULT_CELL_SIZE_RANGE,
    DEFAULT_CELL_WIDTH,
    DEFAULT_WHITE_POINT,
    IMAGE_ASCII_CHARS,
)
from glyphgrid.core_types import (
    COLOR_MODES,
    FIT_MODES,
    RENDER_STYLES,
    CellSizeRange,
    Colors,
)
from glyphgrid.image_io import ImageDecodeError, save_png
from glyphgrid.utils import (
    format_bool_on_off,
    format_total_duration_compact,
    format_seconds_compact,
    print_banner,
    log,
    debug_log,
    error,
    warn,
    print_config_line,
    key_value_pairs_to_string,
    enable_line_buffered_stdout,
    capture_stdout,
)
from glyphgrid.variable_dimensions import describe_range

OUTPUT_SUFFIX = "_glyph"
IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp"}

# CLI args


def parse_cli_args(argv: Optional[list] = None) -> argparse.Namespace:
    """
    Parse CLI arguments for grid conversion.

    Returns:
      argparse.Namespace with:
        src: Path to image or folder
        outdir: optional Path for outputs
        style, size, cell: cell shape (cell WxH overrides size)
        canvas: (W, H) canvas the image is fitted into
        fit, black, white, invert: quantization controls
        color_mode, bg, fg, bg_blur: PNG rendering controls
        range, seed: variable layout for Palette style
        format: "txt" | "png"
        jobs: parallel file workers
        debug: bool for verbose details
    """
    parser = argparse.ArgumentParser(
        prog="glyphgrid",
        description="Turn image(s) into editable glyph grids and export text or PNG.",
    )
    parser.add_argument("src", type=Path, help="Input image or folder")
    parser.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (optional)"
    )
    parser.add_argument(
        "--style", choices=list(RENDER_STYLES), default="Ascii", help="Render style."
    )
    parser.add_argument(
        "--size",
        type=int,
        default=DEFAULT_CELL_WIDTH,
        help="Cell width in pixels; height follows the style.",
    )
    parser.add_argument(
        "--cell",
        type=parse_size,
        default=None,
        help="Explicit cell size WxH. Overrides --size.",
    )
    parser.add_argument(
        "--canvas",
        type=parse_size,
        default=DEFAULT_CANVAS_SIZE,
        help="Canvas size WxH the image is fitted into.",
    )
    parser.add_argument(
        "--fit", choices=list(FIT_MODES), default="contain", help="Fit mode."
    )
    parser.add_argument(
        "--black", type=float, default=DEFAULT_BLACK_POINT, help="Black point 0..0.5"
    )
    parser.add_argument(
        "--white", type=float, default=DEFAULT_WHITE_POINT, help="White point 0.5..1"
    )
    parser.add_argument("--invert", action="store_true", help="Invert levels")
    parser.add_argument(
        "--color-mode",
        dest="color_mode",
        choices=list(COLOR_MODES),
        default="monochrome",
        help="Colour mode for PNG output.",
    )
    parser.add_argument(
        "--bg", type=parse_hex_color, default=None, help="Background colour #rrggbb"
    )
    parser.add_argument(
        "--fg", type=parse_hex_color, default=None, help="Foreground colour #rrggbb"
    )
    parser.add_argument(
        "--bg-blur",
        dest="bg_blur",
        type=float,
        default=DEFAULT_BG_BLUR,
        help="Blur radius of the source image behind glyphs in mixed mode.",
    )
    parser.add_argument(
        "--range",
        type=parse_range,
        default=CellSizeRange(*DEFAULT_CELL_SIZE_RANGE),
        help="Palette cell size range minW,maxW,minH,maxH (or min,max).",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for the Palette layout"
    )
    parser.add_argument(
        "--symbols",
        default=IMAGE_ASCII_CHARS,
        help="Symbol ramp, darkest first.",
    )
    parser.add_argument(
        "--format", choices=["txt", "png"], default="txt", help="Output format."
    )
    parser.add_argument(
        "--jobs", type=int, default=2, help="Files processed in parallel"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    return parser.parse_args(argv)


def _colors_from_args(args: argparse.Namespace) -> Colors:
    colors = Colors()
    return Colors(bg=args.bg or colors.bg, fg=args.fg or colors.fg)


def _output_path(src_path: Path, outdir: Optional[Path], fmt: str) -> Path:
    name = f"{src_path.stem}{OUTPUT_SUFFIX}.{fmt}"
    return (outdir / name) if outdir else src_path.with_name(name)


# Per-file processing


def _process_single_image(
    src_path: Path,
    out_path: Path,
    settings: RenderSettings,
    args: argparse.Namespace,
) -> bool:
    """
    Process a single image path end-to-end:
      load -> quantize -> export -> report.

    Returns False when the image could not be decoded.
    """
    t_start = time.perf_counter()
    print_banner(src_path.name)

    width, height = args.canvas
    rng = np.random.default_rng(args.seed)
    with CanvasController(
        width,
        height,
        settings,
        symbols=args.symbols,
        colors=_colors_from_args(args),
        rng=rng,
        debug=args.debug,
    ) as canvas:
        try:
            canvas.load_image(src_path, fit_mode=settings.fit_mode)
        except ImageDecodeError:
            return False
        t_loaded = time.perf_counter()

        cols, rows = canvas.dimensions
        if args.debug and canvas.source is not None:
            debug_log(
                key_value_pairs_to_string(
                    [
                        ("Loaded", f"{canvas.source.width}x{canvas.source.height}"),
                        ("Canvas", f"{width}x{height}"),
                        ("Grid", f"{cols}x{rows}"),
                    ]
                )
            )

        if args.format == "png":
            out_path = save_png(out_path, canvas.to_image())
        else:
            canvas.save_text(out_path)
        t_saved = time.perf_counter()

    log(f"Wrote {out_path.name} | grid={cols}x{rows} | style={settings.style}")
    if args.debug:
        debug_log(
            f"Total {format_total_duration_compact(t_saved - t_start)}  "
            f"(load={format_seconds_compact(t_loaded - t_start)}, "
            f"export={format_seconds_compact(t_saved - t_loaded)})"
        )
    else:
        log(f"Total time {format_total_duration_compact(t_saved - t_start)}")
    return True


def _process_one_captured(
    path: Path, settings: RenderSettings, args: argparse.Namespace
) -> Tuple[bool, str]:
    """
    Process a single file with stdout capture.

    Useful for concurrent execution where output should be printed in order.
    """
    buf = io.StringIO()
    with capture_stdout(buf):
        ok = _process_one_live(path, settings, args)
    return ok, buf.getvalue()


def _process_one_live(
    path: Path, settings: RenderSettings, args: argparse.Namespace
) -> bool:
    """Process a single file and stream logs to stdout."""
    if path.stem.endswith(OUTPUT_SUFFIX):
        print_banner(path.name)
        debug_log(f"skipped output artifact ({OUTPUT_SUFFIX})")
        return True
    dst = _output_path(path, args.outdir, args.format)
    return _process_single_image(path, dst, settings, args)


# Entry point


def main(argv: Optional[list] = None) -> int:
    """
    CLI entry point.

    Handles single file or folder. In folder mode supports --jobs parallelism
    while preserving readable output ordering. Returns the process exit code.
    """
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)
    settings = settings_from_args(args)

    print_config_line(
        "run",
        [
            ("Style", settings.style),
            ("Cell", f"{settings.cell_size.width}x{settings.cell_size.height}"),
            ("Format", args.format),
            ("Jobs", args.jobs),
        ],
        debug=False,
    )
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Fit", settings.fit_mode),
                    ("Black", settings.black_point),
                    ("White", settings.white_point),
                    ("Invert", format_bool_on_off(settings.invert)),
                    ("Colour", settings.color_mode),
                    ("Layout", describe_range(settings.cell_size_range)),
                ]
            )
        )

    src = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2
    if args.outdir is not None:
        args.outdir.mkdir(parents=True, exist_ok=True)

    if not src.is_dir():
        return 0 if _process_one_live(src, settings, args) else 1

    all_entries = list(src.iterdir())
    files = [
        p
        for p in all_entries
        if p.is_file()
        and p.suffix.lower() in IMAGE_EXTS
        and not p.stem.endswith(OUTPUT_SUFFIX)
    ]
    files.sort(key=lambda p: p.name.lower())
    if not files:
        warn(f"no images in {src}")
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Folder entries", len(all_entries)),
                    ("Images", len(files)),
                    ("Jobs", args.jobs),
                ]
            )
        )

    if args.jobs <= 1:
        ok = [_process_one_live(p, settings, args) for p in files]
        return 0 if all(ok) else 1

    with ThreadPoolExecutor(max_workers=args.jobs) as ex:
        futures = [ex.submit(_process_one_captured, p, settings, args) for p in files]
        results = [f.result() for f in futures]
    print("".join(text for _ok, text in results), end="", flush=True)
    return 0 if all(ok for ok, _text in results) else 1


if __name__ == "__main__":
    sys.exit(main())
