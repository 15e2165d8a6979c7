"""
Logging configuration for botconfig.

The library itself only creates module loggers (logging.getLogger(__name__))
and attaches identifiers such as paths and service ids through `extra`.
Applications that want formatted output call setup_logging() once.

Usage:
    from botconfig.logging_config import setup_logging

    setup_logging(level="DEBUG")
    config = BotConfiguration.load("my.bot", secret)
    # 2024-01-15 10:30:00 INFO     [botconfig.persistence] Loaded bot configuration path=my.bot services=3
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from botconfig.settings import Settings, get_settings

# Standard LogRecord attributes; everything else on a record came from `extra`
_RECORD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message",
})


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Output format:
    {"timestamp": "...", "level": "INFO", "logger": "botconfig.persistence",
     "message": "Saved bot configuration", "path": "my.bot", "encrypted": true}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in _extra_fields(record).items():
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Human-readable single-line formatter with key=value extras."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname
        if self.use_colors:
            level = f"{self.COLORS.get(level, '')}{level}{self.RESET}"

        extras = " ".join(f"{k}={v}" for k, v in _extra_fields(record).items())
        message = f"{timestamp} {level:8} [{record.name}] {record.getMessage()}"
        if extras:
            message += " " + extras

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """
    Configure the "botconfig" logger hierarchy.

    Only botconfig's own logger is touched, so this is safe to call from an
    application that configures the root logger itself.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON formatting on the console
        log_file: Optional file path; file logs are always JSON
    """
    package_logger = logging.getLogger("botconfig")
    package_logger.setLevel(getattr(logging, level.upper()))

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    if json_format:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = DevelopmentFormatter(use_colors=sys.stderr.isatty())

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        package_logger.addHandler(file_handler)

    package_logger.propagate = False


def setup_logging_from_settings(settings: Settings | None = None) -> None:
    """Apply the logging section of the library settings."""
    settings = settings or get_settings()
    setup_logging(
        level=settings.logging.level,
        json_format=settings.logging.json_format,
        log_file=settings.logging.file,
    )
