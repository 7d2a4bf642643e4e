"""Tests for centre-anchored grid resizing."""

from __future__ import annotations

from glyphgrid.core_types import Cell, CellSize, Edit
from glyphgrid.edit_overlay import batch_sample_edits, create_edit_overlay, record_edit
from glyphgrid.grid_resize import centering_offsets, resize_grid_periphery


def _numbered_grid(cols: int, rows: int):
    return [
        Cell(col=c, row=r, base_level=(r * cols + c) % 10, current_level=(r * cols + c) % 10)
        for r in range(rows)
        for c in range(cols)
    ]


class TestCenteringOffsets:
    def test_offsets_floor_divide(self):
        assert centering_offsets(4, 4, 6, 6) == (1, 1)
        assert centering_offsets(6, 6, 4, 4) == (-1, -1)
        assert centering_offsets(4, 4, 7, 5) == (1, 0)
        assert centering_offsets(7, 5, 4, 4) == (-2, -1)


class TestResizeGridPeriphery:
    def test_same_size_is_identity(self):
        grid = _numbered_grid(5, 3)
        before = list(grid)
        resized = resize_grid_periphery(grid, 5, 3, 5, 3)
        assert len(resized) == 15
        assert all(a is b for a, b in zip(before, resized))

    def test_grow_keeps_content_centred(self):
        grid = _numbered_grid(4, 4)
        grid[2 * 4 + 2].current_level = 7
        resized = resize_grid_periphery(grid, 4, 4, 6, 6)
        assert len(resized) == 36
        moved = resized[3 * 6 + 3]
        assert moved.current_level == 7
        assert (moved.col, moved.row) == (3, 3)
        assert all(c.current_level == 0 and c.base_level == 0 for c in resized[:6])
        for index, cell in enumerate(resized):
            assert (cell.col, cell.row) == (index % 6, index // 6)

    def test_periphery_uses_blank_level(self):
        resized = resize_grid_periphery(_numbered_grid(2, 2), 2, 2, 4, 4, blank_level=9)
        assert resized[0].current_level == 9
        assert not resized[0].is_transparent

    def test_grow_then_shrink_round_trip(self):
        grid = _numbered_grid(4, 4)
        snapshot = [(c.base_level, c.current_level) for c in grid]
        grown = resize_grid_periphery(grid, 4, 4, 6, 6)
        restored = resize_grid_periphery(grown, 6, 6, 4, 4)
        assert [(c.base_level, c.current_level) for c in restored] == snapshot
        assert [(c.col, c.row) for c in restored] == [(c, r) for r in range(4) for c in range(4)]

    def test_shrink_truncates(self):
        resized = resize_grid_periphery(_numbered_grid(6, 6), 6, 6, 2, 2)
        assert len(resized) == 4
        # old (2,2) is now (0,0)
        assert resized[0].base_level == (2 * 6 + 2) % 10

    def test_to_empty_grid(self):
        assert resize_grid_periphery(_numbered_grid(3, 3), 3, 3, 0, 0) == []

    def test_overlay_moves_with_cells(self):
        cell = CellSize(10, 10)
        grid = _numbered_grid(4, 4)
        overlay = create_edit_overlay(40, 40)
        edit = Edit(mode="brush", level=3, is_transparent=False)
        record_edit(overlay, 2, 2, cell, edit)
        resized = resize_grid_periphery(
            grid, 4, 4, 6, 6, overlay=overlay, cell_size=cell, canvas_size=(60, 60)
        )
        assert (overlay.width, overlay.height) == (60.0, 60.0)
        edit_map = batch_sample_edits(overlay, cell, 6, 6)
        assert list(edit_map) == [(3, 3)]
        assert resized[3 * 6 + 3] is grid[2 * 4 + 2]

    def test_brush_edit_follows_four_to_six(self):
        cell = CellSize(10, 10)
        grid = _numbered_grid(4, 4)
        overlay = create_edit_overlay(40, 40)
        grid[1 * 4 + 1].current_level = 7
        record_edit(overlay, 1, 1, cell, Edit(mode="brush", level=7, is_transparent=False))
        resized = resize_grid_periphery(
            grid, 4, 4, 6, 6, overlay=overlay, cell_size=cell, canvas_size=(60, 60)
        )
        assert resized[2 * 6 + 2].current_level == 7
        assert batch_sample_edits(overlay, cell, 6, 6)[(2, 2)].level == 7
        assert list(batch_sample_edits(overlay, cell, 6, 6)) == [(2, 2)]
