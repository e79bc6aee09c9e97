"""
Logging utilities for the service region lookup tool.

Log lines go to stderr so that command output on stdout stays clean. Records are
rendered human-readable by default, or as one JSON object per line when
LOG_FORMAT=json. Keyword arguments passed to the logger methods are carried as
extra context on the record.
"""

import json
import logging
import os
import sys
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "aws_service_regions"


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs JSON or human-readable lines depending on log format.
    """

    def __init__(self, json_output: Optional[bool] = None, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra
        if json_output is None:
            json_output = os.environ.get("LOG_FORMAT", "human").lower() == "json"
        self.json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        if self.json_output:
            return self._format_json(record)
        return self._format_human(record)

    def _format_json(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON line."""
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "thread": record.threadName,
        }

        if self.include_extra and hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)

    def _format_human(self, record: logging.LogRecord) -> str:
        """Format log record for a terminal."""
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        message = record.getMessage()

        if self.include_extra and hasattr(record, "extra_data"):
            extra_parts = [f"{k}={v}" for k, v in record.extra_data.items()]
            if extra_parts:
                message += f" [{', '.join(extra_parts)}]"

        formatted = f"{timestamp} - {record.levelname:8} - {record.name} - {message}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


class RegionsLogger:
    """
    Logger wrapper carrying keyword context and operation timers.

    Child loggers (``aws_service_regions.<name>``) propagate to the package root
    logger, which owns the single stderr handler.
    """

    def __init__(self, name: str = ROOT_LOGGER_NAME):
        if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        self.logger = logging.getLogger(name)

    def info(self, message: str, **extra):
        """Log info message with optional extra context."""
        self._log_with_extra(logging.INFO, message, extra)

    def debug(self, message: str, **extra):
        """Log debug message with optional extra context."""
        self._log_with_extra(logging.DEBUG, message, extra)

    def warning(self, message: str, **extra):
        """Log warning message with optional extra context."""
        self._log_with_extra(logging.WARNING, message, extra)

    def error(self, message: str, exc_info: bool = False, **extra):
        """Log error message with optional exception info and extra context."""
        self._log_with_extra(logging.ERROR, message, extra, exc_info=exc_info)

    def _log_with_extra(
        self, level: int, message: str, extra: Dict[str, Any], exc_info: bool = False
    ):
        if not self.logger.isEnabledFor(level):
            return
        if extra:
            self.logger.log(
                level, message, exc_info=exc_info, extra={"extra_data": extra}
            )
        else:
            self.logger.log(level, message, exc_info=exc_info)

    @contextmanager
    def timer(self, operation: str):
        """Context manager for timing operations."""
        start_time = time.monotonic()
        self.debug(f"Starting {operation}")

        try:
            yield
            duration = time.monotonic() - start_time
            self.info(f"Completed {operation}", duration_seconds=f"{duration:.2f}")
        except Exception as e:
            duration = time.monotonic() - start_time
            self.error(
                f"Failed {operation}",
                duration_seconds=f"{duration:.2f}",
                error=str(e),
            )
            raise


def setup_logging(level: str = "WARNING", log_format: Optional[str] = None) -> RegionsLogger:
    """
    Configure the package root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "human" or "json"; falls back to LOG_FORMAT when None

    Returns:
        Root RegionsLogger instance
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper()))

    json_output = None if log_format is None else log_format == "json"
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter(json_output=json_output))
    root.addHandler(handler)
    root.propagate = False

    return RegionsLogger(ROOT_LOGGER_NAME)


def get_logger(name: str = ROOT_LOGGER_NAME) -> RegionsLogger:
    """
    Get a logger instance.

    Args:
        name: Logger name, nested under the package root logger

    Returns:
        RegionsLogger instance
    """
    return RegionsLogger(name)
