"""
Unit tests for logging utilities.

Run with:
    pytest tests/unit/test_logger.py -v
"""

import json
import logging
import sys
import uuid
from datetime import datetime

from healthbatch.utils.logger import (
    StructuredFormatter,
    TextFormatter,
    configure_root_logger,
    get_logger,
)


def unique_logger_name(prefix="test"):
    """Generate unique logger name to avoid caching issues."""
    return f"{prefix}.{uuid.uuid4().hex[:8]}"


def make_log_record(msg="Test message", level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestStructuredFormatter:
    """Test JSON structured formatter."""

    def test_format_basic_message(self):
        """Test formatting a basic log message."""
        data = json.loads(StructuredFormatter().format(make_log_record()))

        assert data["level"] == "INFO"
        assert data["message"] == "Test message"
        assert data["logger"] == "test_logger"
        assert data["line"] == 10
        assert data["timestamp"].endswith("Z")

    def test_format_with_extra_fields(self):
        """Test formatting with extra fields."""
        record = make_log_record()
        record.record_id = "7"
        record.kept = 4

        data = json.loads(StructuredFormatter().format(record))

        assert data["record_id"] == "7"
        assert data["kept"] == 4

    def test_non_serializable_extra(self):
        """Test that non-JSON values are stringified."""
        record = make_log_record()
        record.when = datetime(2024, 1, 15)

        data = json.loads(StructuredFormatter().format(record))

        assert data["when"] == "2024-01-15 00:00:00"

    def test_format_with_exception(self):
        """Test formatting with exception info."""
        try:
            1 / 0
        except ZeroDivisionError:
            record = make_log_record("Error occurred", logging.ERROR, sys.exc_info())

        data = json.loads(StructuredFormatter().format(record))

        assert "ZeroDivisionError" in data["exception"]


class TestTextFormatter:
    """Test human-readable text formatter."""

    def test_format_basic_message(self):
        """Test formatting a basic log message."""
        output = TextFormatter().format(make_log_record())

        assert "INFO" in output
        assert "test_logger" in output
        assert "Test message" in output

    def test_format_includes_colors(self):
        """Test that output includes ANSI color codes."""
        output = TextFormatter().format(make_log_record(level=logging.ERROR))
        assert "\033[31m" in output

    def test_format_with_extra_fields(self):
        """Test formatting with extra fields."""
        record = make_log_record()
        record.stage = "transform"
        record.count = 42

        output = TextFormatter().format(record)

        assert "stage=transform" in output
        assert "count=42" in output


class TestGetLogger:
    """Test logger creation."""

    def test_get_logger_is_idempotent(self):
        """Test that calling get_logger twice returns same configured logger."""
        name = unique_logger_name()
        logger1 = get_logger(name)
        logger2 = get_logger(name)

        assert logger1 is logger2
        assert len(logger1.handlers) == 1
        assert logger1.propagate is False

    def test_logger_respects_level(self):
        """Test that logger respects log level."""
        logger = get_logger(unique_logger_name("level"), level="ERROR")
        assert logger.level == logging.ERROR

    def test_logger_with_extra_fields(self, tmp_path):
        """Test logging with extra fields to a JSON file."""
        log_file = tmp_path / "logs" / "extra.log"
        logger = get_logger(unique_logger_name("extra"), log_file=log_file)

        logger.info("Batch cleaned", extra={"kept": 4, "dropped": 2})

        data = json.loads(log_file.read_text().strip())
        assert data["message"] == "Batch cleaned"
        assert data["kept"] == 4
        assert data["dropped"] == 2

    def test_text_format_from_settings(self, monkeypatch):
        """Test that log_format=text selects the text formatter."""
        monkeypatch.setenv("HEALTHBATCH_LOG_FORMAT", "text")

        logger = get_logger(unique_logger_name("text"))

        assert isinstance(logger.handlers[0].formatter, TextFormatter)


class TestConfigureRootLogger:
    """Test application-wide logging setup."""

    def test_sets_package_logger_levels(self):
        """Test that healthbatch loggers follow the configured level."""
        logger = get_logger(unique_logger_name("healthbatch.test"), level="INFO")

        configure_root_logger("ERROR")

        assert logger.level == logging.ERROR
        assert all(h.level == logging.ERROR for h in logger.handlers)
        assert logging.getLogger().level == logging.ERROR

    def test_quiets_http_libraries(self):
        configure_root_logger("DEBUG")
        assert logging.getLogger("urllib3").level == logging.WARNING
