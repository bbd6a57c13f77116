"""
Structured Logging

JSON-formatted logging for pipeline runs, with a coloured text format for
local development. Any ``extra={...}`` passed to a log call ends up as
top-level keys in the JSON line.

Example:
    >>> from healthbatch.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Batch cleaned", extra={"kept": 4, "dropped": 2})
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from healthbatch.utils.config import get_settings

# Attributes every LogRecord carries; anything else came from ``extra=``.
STANDARD_FIELDS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", "message", "asctime",
})


def _extra_fields(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    for key, value in record.__dict__.items():
        if key not in STANDARD_FIELDS and not key.startswith("_"):
            yield key, value


class StructuredFormatter(logging.Formatter):
    """
    Formatter emitting one JSON object per log line.

    Outputs logs in JSON format for easy parsing by log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            str: JSON-formatted log line
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in _extra_fields(record):
            # Convert non-JSON-serializable types
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable, coloured formatter for terminal use."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",   # Green
        "WARNING": "\033[33m", # Yellow
        "ERROR": "\033[31m",   # Red
        "CRITICAL": "\033[35m", # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        levelname = f"{color}{record.levelname:8s}{self.RESET}"
        timestamp = datetime.fromtimestamp(record.created).strftime(
            "%Y-%m-%d %H:%M:%S"
        )

        extra = [f"{key}={value}" for key, value in _extra_fields(record)]
        extra_str = f" [{', '.join(extra)}]" if extra else ""

        log_line = (
            f"{timestamp} {levelname} {record.name:20s} "
            f"{record.getMessage()}{extra_str}"
        )
        if record.exc_info:
            log_line += f"\n{self.formatException(record.exc_info)}"

        return log_line


def _make_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return StructuredFormatter()
    return TextFormatter()


def get_logger(
    name: str,
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Get or create a logger with structured formatting.

    Args:
        name: Logger name (typically __name__)
        level: Log level (overrides settings)
        log_file: Optional file that also receives every record as JSON

    Returns:
        logging.Logger: Configured logger instance
    """
    settings = get_settings()
    logger = logging.getLogger(name)

    # Prevent duplicate handlers (check own handlers only, not inherited)
    if logger.handlers:
        return logger

    log_level = getattr(logging, (level or settings.log_level).upper())
    logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(_make_formatter(settings.log_format))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(StructuredFormatter())  # Always JSON for files
        logger.addHandler(file_handler)

    # Don't propagate to root logger (avoid duplicate logs)
    logger.propagate = False

    return logger


def configure_root_logger(level: Optional[str] = None) -> None:
    """
    Configure the root logger and every healthbatch logger for the application.

    Args:
        level: Override log level (e.g. "DEBUG", "INFO", "ERROR").
               Falls back to settings.log_level if not provided.

    Call this once at application startup.
    """
    settings = get_settings()
    effective_level = getattr(logging, (level or settings.log_level).upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(effective_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(effective_level)
    console_handler.setFormatter(_make_formatter(settings.log_format))
    root_logger.addHandler(console_handler)

    # Module loggers created by get_logger() keep their own handlers
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith("healthbatch") and isinstance(logger, logging.Logger):
            logger.setLevel(effective_level)
            for handler in logger.handlers:
                handler.setLevel(effective_level)

    # Suppress noisy third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
