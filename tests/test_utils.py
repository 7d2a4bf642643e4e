"""Tests for logging and formatting helpers."""

from __future__ import annotations

import io
import threading

from glyphgrid.utils import (
    capture_stdout,
    debug_log,
    error,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    print_config_line,
)


class TestFormatting:
    def test_seconds(self):
        assert format_seconds_compact(0.0123) == "12.3ms"
        assert format_seconds_compact(2.5) == "2.500s"
        assert format_seconds_compact(75.0) == "1m 15.0s"

    def test_total_duration(self):
        assert format_total_duration_compact(0.5) == "500.0ms"
        assert format_total_duration_compact(3.21) == "3.2s"
        assert format_total_duration_compact(125) == "2m 5s"

    def test_key_value_pairs(self):
        text = key_value_pairs_to_string([("Cols", 1200), ("Invert", True), ("Black", 0.25)])
        assert text == "Cols: 1,200  Invert: on  Black: 0.25"


class TestLogging:
    def test_prefixes(self, capsys):
        log("plain")
        debug_log("detail")
        error("broken")
        captured = capsys.readouterr()
        assert captured.out == "plain\n[debug] detail\n"
        assert captured.err == "[error] broken\n"

    def test_config_line(self, capsys):
        print_config_line("grid", [("Cols", 80)], debug=False)
        assert capsys.readouterr().out == "[grid] Cols: 80\n"

    def test_capture_is_per_thread(self, capsys):
        buffers = {}
        ready = threading.Barrier(2)

        def worker(name):
            buf = io.StringIO()
            with capture_stdout(buf):
                ready.wait(timeout=5)
                log(name)
            buffers[name] = buf.getvalue()

        threads = [threading.Thread(target=worker, args=(n,)) for n in ("one", "two")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        log("main")
        assert buffers == {"one": "one\n", "two": "two\n"}
        assert capsys.readouterr().out == "main\n"
