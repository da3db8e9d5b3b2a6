"""
Unit tests for polyline_report.logging_config module.

Tests:
- JSON formatter output
- Console formatter output
- Logging setup
- Timing utilities
- Context management
"""

import json
import logging
import sys
from io import StringIO

import pytest

from polyline_report.logging_config import (
    ConsoleFormatter,
    JSONFormatter,
    LogContext,
    get_logger,
    log_timing,
    setup_logging,
)


def _record(name="test", level=logging.INFO, msg="Message", exc_info=None):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class _CaptureHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestJSONFormatter:
    """Tests for JSONFormatter class."""

    def test_basic_format(self):
        data = json.loads(JSONFormatter().format(_record(name="polyline_report.io", msg="Loaded")))

        assert data["level"] == "INFO"
        assert data["logger"] == "polyline_report.io"
        assert data["message"] == "Loaded"
        assert "timestamp" in data
        assert "location" not in data

    def test_extra_fields(self):
        record = _record()
        record.segments = 4
        record.labels = ["A", "B"]

        data = json.loads(JSONFormatter().format(record))

        assert data["segments"] == 4
        assert data["labels"] == ["A", "B"]

    def test_extra_fields_disabled(self):
        record = _record()
        record.segments = 4

        data = json.loads(JSONFormatter(include_extra=False).format(record))
        assert "segments" not in data

    def test_unserializable_extra_as_string(self):
        record = _record()
        record.path = object()

        data = json.loads(JSONFormatter().format(record))
        assert data["path"].startswith("<object")

    def test_location_for_warning(self):
        data = json.loads(JSONFormatter().format(_record(level=logging.WARNING)))
        assert data["location"]["line"] == 42

    def test_exception_format(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = _record(level=logging.ERROR, exc_info=sys.exc_info())

        data = json.loads(JSONFormatter().format(record))
        assert "ValueError" in data["exception"]

    def test_unicode_message(self):
        data = json.loads(JSONFormatter().format(_record(msg="Клапан Ø 100")))
        assert data["message"] == "Клапан Ø 100"


class TestConsoleFormatter:
    """Tests for ConsoleFormatter class."""

    def test_prefix_stripped(self):
        result = ConsoleFormatter(use_colors=False).format(
            _record(name="polyline_report.io.dxf_reader", msg="Loading file")
        )

        assert "INFO" in result
        assert " io.dxf_reader:" in result
        assert "Loading file" in result

    def test_extra_fields_shown(self):
        record = _record()
        record.total = 15.853981
        record.labels = ["A", "B", "C", "D"]

        result = ConsoleFormatter(use_colors=False).format(record)

        assert "total=15.9" in result
        assert "labels=[...4 items]" in result

    def test_colors(self):
        record = _record(level=logging.ERROR)

        assert "\033[" in ConsoleFormatter(use_colors=True).format(record)
        assert "\033[" not in ConsoleFormatter(use_colors=False).format(record)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_returns_package_logger(self):
        logger = setup_logging(level=logging.DEBUG, console=False)

        assert logger.name == "polyline_report"
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_no_duplicate_handlers(self):
        setup_logging(console=True)
        logger = setup_logging(console=True)

        assert len(logger.handlers) == 1

    def test_json_file_handler(self, tmp_path):
        json_path = tmp_path / "log.json"
        logger = setup_logging(json_file=json_path, console=False)
        get_logger("polyline_report.test").info("Test message", extra={"key": "value"})

        for handler in logger.handlers:
            handler.flush()

        data = json.loads(json_path.read_text(encoding="utf-8").strip())
        assert data["message"] == "Test message"
        assert data["key"] == "value"


class TestLogTiming:
    """Tests for log_timing context manager."""

    @pytest.fixture
    def stream_logger(self):
        logger = logging.getLogger("timing_test")
        logger.setLevel(logging.DEBUG)
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        logger.addHandler(handler)
        yield logger, stream
        logger.removeHandler(handler)

    def test_logs_start_and_complete(self, stream_logger):
        logger, stream = stream_logger

        with log_timing(logger, "test operation"):
            pass

        output = stream.getvalue()
        assert "Starting: test operation" in output
        assert "Completed: test operation" in output

    def test_caller_fields_logged(self):
        logger = logging.getLogger("timing_fields")
        logger.setLevel(logging.DEBUG)
        capture = _CaptureHandler()
        logger.addHandler(capture)

        try:
            with log_timing(logger, "operation", groups=2) as info:
                info["rows"] = 3
        finally:
            logger.removeHandler(capture)

        completed = capture.records[-1]
        assert completed.event == "complete"
        assert completed.rows == 3
        assert completed.groups == 2
        assert completed.elapsed_seconds >= 0

    def test_error_logged_and_reraised(self, stream_logger):
        logger, stream = stream_logger

        with pytest.raises(ValueError):
            with log_timing(logger, "failing operation"):
                raise ValueError("Test error")

        output = stream.getvalue()
        assert "ERROR: Failed: failing operation" in output


class TestLogContext:
    """Tests for LogContext class."""

    def test_fields_added_inside_scope(self):
        logger = setup_logging(console=False)
        capture = _CaptureHandler()
        logger.addHandler(capture)
        child = get_logger("polyline_report.pipeline")

        with LogContext(drawing="plant.dxf"):
            child.info("inside")
        child.info("outside")

        assert capture.records[0].drawing == "plant.dxf"
        assert not hasattr(capture.records[1], "drawing")
