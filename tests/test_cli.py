"""Tests for the command line entry point."""

from __future__ import annotations

import pytest
from PIL import Image

from glyphgrid_cli import main, parse_cli_args

from conftest import png_bytes, solid_rgba

SMALL = ["--canvas", "40x40", "--cell", "10x10"]


class TestMain:
    def test_single_file_to_text(self, tmp_path, white_png, capsys):
        src = tmp_path / "white.png"
        src.write_bytes(white_png)
        assert main([str(src), *SMALL]) == 0
        out = tmp_path / "white_glyph.txt"
        assert out.read_text(encoding="utf-8") == "\n".join(["@@@@"] * 4)
        assert "Wrote white_glyph.txt" in capsys.readouterr().out

    def test_png_output(self, tmp_path, white_png):
        src = tmp_path / "white.png"
        src.write_bytes(white_png)
        outdir = tmp_path / "out"
        assert main([str(src), *SMALL, "--format", "png", "--outdir", str(outdir)]) == 0
        with Image.open(outdir / "white_glyph.png") as im:
            assert im.size == (40, 40)

    def test_missing_input_exits_2(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.png")]) == 2
        assert "[error] not found" in capsys.readouterr().err

    def test_bad_colour_is_a_usage_error(self, tmp_path, white_png, capsys):
        src = tmp_path / "white.png"
        src.write_bytes(white_png)
        with pytest.raises(SystemExit) as exc:
            main([str(src), *SMALL, "--format", "png", "--bg", "red"])
        assert exc.value.code == 2
        assert "--bg" in capsys.readouterr().err
        assert not (tmp_path / "white_glyph.png").exists()

    def test_short_hex_colours_accepted(self, tmp_path, white_png):
        src = tmp_path / "white.png"
        src.write_bytes(white_png)
        args = [str(src), *SMALL, "--format", "png", "--bg", "#f00", "--fg", "#00F"]
        assert main(args) == 0
        assert (tmp_path / "white_glyph.png").exists()
        parsed = parse_cli_args(args)
        assert (parsed.bg, parsed.fg) == ("#ff0000", "#0000ff")

    def test_undecodable_input_fails(self, tmp_path, capsys):
        src = tmp_path / "broken.png"
        src.write_bytes(b"not really a png")
        assert main([str(src), *SMALL]) == 1
        assert "[error]" in capsys.readouterr().err

    def test_folder_mode_in_parallel(self, tmp_path, capsys):
        for name, value in [("a", 255), ("b", 0)]:
            (tmp_path / f"{name}.png").write_bytes(png_bytes(solid_rgba(20, 20, value)))
        (tmp_path / "a_glyph.png").write_bytes(png_bytes(solid_rgba(4, 4)))
        (tmp_path / "notes.txt").write_text("skip me")
        assert main([str(tmp_path), *SMALL, "--jobs", "2"]) == 0
        assert (tmp_path / "a_glyph.txt").read_text(encoding="utf-8").startswith("@@@@")
        assert (tmp_path / "b_glyph.txt").read_text(encoding="utf-8").startswith("    ")
        assert not (tmp_path / "a_glyph_glyph.txt").exists()
        out = capsys.readouterr().out
        assert out.index("=== a.png ===") < out.index("=== b.png ===")

    def test_palette_style_with_seed(self, tmp_path, white_png):
        src = tmp_path / "white.png"
        src.write_bytes(white_png)
        args = [str(src), "--canvas", "40x40", "--style", "Palette", "--range", "10,10", "--seed", "3"]
        assert main(args) == 0
        assert (tmp_path / "white_glyph.txt").read_text(encoding="utf-8") == "\n".join(["@@@@"] * 4)
