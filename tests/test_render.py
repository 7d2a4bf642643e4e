"""Tests for cell -> draw op mapping."""

from __future__ import annotations

import pytest

from glyphgrid.config import RenderSettings
from glyphgrid.core_types import Cell, CellSize, CellSizeRange, Colors
from glyphgrid.render import dot_radius, render_cell, render_grid
from glyphgrid.variable_dimensions import generate_variable_dimensions

COLORS = Colors(bg="#111111", fg="#ffffff")


def _cell(level: int, **kwargs) -> Cell:
    return Cell(col=0, row=0, base_level=level, current_level=level, **kwargs)


def _settings(**kwargs) -> RenderSettings:
    kwargs.setdefault("cell_size", CellSize(10, 20))
    return RenderSettings(**kwargs)


class TestRenderCell:
    def test_transparent_cell_draws_nothing(self, symbols):
        op = render_cell(_cell(9, is_transparent=True), _settings(), 0, 0, symbols, COLORS)
        assert op.kind == "transparent"

    def test_ascii_monochrome_uses_foreground(self, symbols):
        op = render_cell(_cell(9), _settings(), 30, 40, symbols, COLORS)
        assert op.kind == "text"
        assert op.text == symbols[9]
        assert op.fill == (255, 255, 255)
        assert (op.x, op.y, op.width, op.height) == (30, 40, 10.0, 20.0)
        assert op.background is None

    def test_ascii_monochrome_invert_is_reverse_video(self, symbols):
        op = render_cell(_cell(3), _settings(invert=True), 0, 0, symbols, COLORS)
        assert op.fill == (17, 17, 17)
        assert op.background == (255, 255, 255)
        assert op.text == symbols[3]

    def test_ascii_original_uses_cell_colour(self, symbols):
        cell = _cell(5, r=10, g=20, b=30)
        op = render_cell(cell, _settings(color_mode="original"), 0, 0, symbols, COLORS)
        assert op.fill == (10, 20, 30)

    def test_level_is_clamped_to_ramp(self, symbols):
        op = render_cell(_cell(99), _settings(), 0, 0, symbols, COLORS)
        assert op.text == symbols[-1]

    def test_dot_zero_level_is_empty(self, symbols):
        op = render_cell(_cell(0), _settings(style="Dot"), 0, 0, symbols, COLORS)
        assert op.kind == "empty"

    def test_dot_full_level_radius(self, symbols):
        op = render_cell(_cell(9), _settings(style="Dot"), 0, 0, symbols, COLORS)
        assert op.kind == "circle"
        assert op.radius == pytest.approx(10 / 2 * 0.9)
        assert op.center == (5.0, 10.0)

    def test_dot_radius_is_monotonic(self):
        radii = [dot_radius(level, 9, 12, 12) for level in range(10)]
        assert radii == sorted(radii)
        assert radii[0] == 0.0

    def test_palette_monochrome_grey(self, symbols):
        white = render_cell(_cell(9), _settings(style="Palette"), 0, 0, symbols, COLORS)
        black = render_cell(_cell(0), _settings(style="Palette"), 0, 0, symbols, COLORS)
        assert white.kind == "rect"
        assert white.fill == (255, 255, 255)
        assert black.fill == (0, 0, 0)

    def test_palette_monochrome_invert(self, symbols):
        op = render_cell(_cell(9), _settings(style="Palette", invert=True), 0, 0, symbols, COLORS)
        assert op.fill == (0, 0, 0)

    def test_palette_colour_uses_cell_rgb(self, symbols):
        cell = _cell(2, r=200, g=100, b=50)
        op = render_cell(cell, _settings(style="Palette", color_mode="mixed"), 0, 0, symbols, COLORS)
        assert op.fill == (200, 100, 50)

    def test_size_override(self, symbols):
        op = render_cell(_cell(9), _settings(), 0, 0, symbols, COLORS, CellSize(7, 9))
        assert (op.width, op.height) == (7.0, 9.0)


class TestRenderGrid:
    def test_uniform_positions(self, symbols):
        grid = [Cell(col=c, row=r, base_level=1, current_level=1) for r in range(2) for c in range(3)]
        ops = render_grid(grid, _settings(), symbols, COLORS)
        assert len(ops) == 6
        assert (ops[4].x, ops[4].y) == (10, 20)

    def test_variable_positions_in_palette_style(self, symbols):
        dims = generate_variable_dimensions(50, 50, CellSizeRange(10, 30, 10, 30))
        grid = [
            Cell(col=c, row=r, base_level=9, current_level=9)
            for r in range(dims.rows)
            for c in range(dims.cols)
        ]
        ops = render_grid(grid, _settings(style="Palette"), symbols, COLORS, dims)
        last = ops[-1]
        x, y, w, h = dims.cell_rect(dims.cols - 1, dims.rows - 1)
        assert (last.x, last.y, last.width, last.height) == (x, y, w, h)

    def test_dims_ignored_outside_palette(self, symbols):
        dims = generate_variable_dimensions(50, 50, CellSizeRange(30, 30, 30, 30))
        grid = [Cell(col=1, row=1, base_level=9, current_level=9)]
        op = render_grid(grid, _settings(), symbols, COLORS, dims)[0]
        assert (op.x, op.y) == (10, 20)
