"""
Centralized logging configuration with structured JSON output.

Provides:
- JSON structured logging (files, log shippers)
- Human-readable console logging with the structured fields appended
- Bearer-token redaction on every handler
- Quieter defaults for the HTTP stack (httpx, httpcore, hpack)

Structured fields reach both formatters from two places: log_with_context()
keyword arguments, and the error_type/exception_class/context fields set by
strikeboard.utils.error_handling.

Usage:
    from strikeboard.core.logging_config import get_logger, log_with_context

    logger = get_logger(__name__)
    log_with_context(logger, "info", "Analytics load finished", period=30, failed=[])
"""

import json
import logging
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# Attributes every LogRecord carries; anything else was passed through extra=
_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "asctime"}

_BEARER = re.compile(r"(Bearer\s+)[^\s'\"]+", re.IGNORECASE)

QUIET_LOGGERS = ("httpx", "httpcore", "hpack")


def structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    """
    Collect the structured fields attached to a record.

    extra_fields (from log_with_context) is flattened; other extra= keys are kept as is.
    """
    fields: dict[str, Any] = {}
    for name, value in record.__dict__.items():
        if name in _RECORD_ATTRS:
            continue
        if name == "extra_fields" and isinstance(value, dict):
            fields.update(value)
        else:
            fields[name] = value
    return fields


class TokenRedactionFilter(logging.Filter):
    """Mask bearer tokens in messages before any handler formats them."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _BEARER.sub(r"\1[REDACTED]", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class JSONFormatter(logging.Formatter):
    """
    Format log records as JSON for structured logging.

    One object per line: timestamp, level, logger, message, source location,
    exception text when present, then every structured field.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for name, value in structured_fields(record).items():
            log_data.setdefault(name, value)

        # Cache keys are tuples, periods are enums
        return json.dumps(log_data, default=str)


class ContextFormatter(logging.Formatter):
    """
    Console formatter: colored level names (on a terminal) and the record's
    structured fields appended as key=value pairs.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if sys.stderr.isatty():
            record.levelname = f"{self.COLORS.get(levelname, '')}{levelname}{self.RESET}"

        try:
            output = super().format(record)
        finally:
            record.levelname = levelname

        fields = structured_fields(record)
        if fields:
            output += " | " + " ".join(f"{key}={value}" for key, value in fields.items())
        return output


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    json_output: bool = False,
) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path; file output is always JSON
        json_output: Use JSON on the console too

    Example:
        setup_logging(level="DEBUG")
        setup_logging(level="INFO", log_file=Path(".tmp/logs/strikeboard.log"), json_output=True)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    if json_output:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            ContextFormatter(fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        )
    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(log_level)
        handler.addFilter(TokenRedactionFilter())
        root_logger.addHandler(handler)

    # httpx logs every request at INFO
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the calling module (pass __name__)."""
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: str, message: str, **context: Any) -> None:
    """
    Log message with additional structured fields.

    Args:
        logger: Logger instance
        level: Log level name (debug, info, warning, error, critical)
        message: Log message
        **context: Fields added to the JSON document (and to console output)

    Example:
        log_with_context(logger, "warning", "Scenario import finished", imported=2, failed=1)
    """
    getattr(logger, level.lower())(message, extra={"extra_fields": context})


# Default configuration (can be overridden by calling setup_logging)
if not logging.getLogger().handlers:
    setup_logging(level="INFO", json_output=False)
