"""Tests for modguard/utils/logger.py — structlog setup and PerformanceLogger."""

from __future__ import annotations

import io
import json

import pytest

from modguard.utils.logger import PerformanceLogger, configure_logging, get_logger


class TestConfigureLogging:
    def test_json_output(self):
        stream = io.StringIO()
        configure_logging(log_level="INFO", json_output=True, stream=stream)
        get_logger("test").info("Blocked modules computed", count=2)
        record = json.loads(stream.getvalue().strip())
        assert record["event"] == "Blocked modules computed"
        assert record["count"] == 2
        assert record["level"] == "info"

    def test_level_filters(self):
        stream = io.StringIO()
        configure_logging(log_level="WARNING", stream=stream)
        get_logger("test").info("quiet")
        assert stream.getvalue() == ""

    def test_console_output(self):
        stream = io.StringIO()
        configure_logging(log_level="DEBUG", stream=stream)
        get_logger("test").debug("File parse failed", file="x.go")
        assert "File parse failed" in stream.getvalue()
        assert "x.go" in stream.getvalue()


class TestPerformanceLogger:
    def test_logs_completion(self):
        stream = io.StringIO()
        configure_logging(log_level="INFO", json_output=True, stream=stream)
        with PerformanceLogger("Import scan", get_logger("test")) as perf:
            pass
        record = json.loads(stream.getvalue().strip())
        assert record["event"] == "Import scan completed"
        assert record["duration_ms"] == pytest.approx(perf.duration_ms)

    def test_logs_failure_and_propagates(self):
        stream = io.StringIO()
        configure_logging(log_level="INFO", json_output=True, stream=stream)
        with pytest.raises(RuntimeError):
            with PerformanceLogger("Import scan", get_logger("test")):
                raise RuntimeError("boom")
        record = json.loads(stream.getvalue().strip())
        assert record["event"] == "Import scan failed"
        assert record["error"] == "boom"
