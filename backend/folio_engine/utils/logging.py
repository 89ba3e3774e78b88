# backend/folio_engine/utils/logging.py
"""
Logging configuration for Folio Engine.

Centralized setup with:
- Level and format taken from settings (LOG_LEVEL, LOG_FORMAT)
- Correlation ID on every record, read from the request context
- JSON output for log aggregation, plain text for development

Usage:
    from folio_engine.utils.logging import setup_logging

    # In main.py (or a script), before doing any work
    setup_logging()

Log Levels:
    DEBUG   - Per-cycle detail, skipped rows
    INFO    - One line per computation / import / export
    WARNING - Data quality problems (oversells, missing prices, bad payloads)
    ERROR   - Unexpected exceptions
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from folio_engine.config import settings
from folio_engine.utils.context import get_correlation_id

# =============================================================================
# CONSTANTS
# =============================================================================

# timestamp | level | correlation_id | logger | message
DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "no-correlation-id"

NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "asyncio",
    "multipart",
    "uvicorn.access",
]

# LogRecord attributes that never go into the JSON "extra" block
_STANDARD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
})

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


# =============================================================================
# FILTER / FORMATTER
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """Adds `correlation_id` to every record passing through the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line.

    Output format:
    {
        "timestamp": "2025-01-15T10:30:00.123456+00:00",
        "level": "WARNING",
        "logger": "folio_engine.services.accounting.cycles",
        "correlation_id": "abc-123",
        "message": "Sell ... exceeds the held quantity ...",
        "extra": {...}
    }

    Values that json cannot encode (Decimal, UUID, datetime) are written
    with str().
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS
        }
        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry, default=str)


# =============================================================================
# SETUP
# =============================================================================

def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
) -> None:
    """
    Configure the root logger once at startup.

    Args:
        level: Log level name. Defaults to settings.log_level.
        log_format: 'text' or 'json'. Defaults to settings.log_format.
        suppress_noisy_loggers: Raise third-party loggers to WARNING.

    Raises:
        ValueError: If the level name is unknown
    """
    level_name = level or settings.log_level
    log_level = _get_log_level(level_name)
    format_type = (log_format or settings.log_format).lower()

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=DEFAULT_TEXT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if suppress_noisy_loggers:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={level_name}, format={format_type}"
    )


def _get_log_level(level_str: str) -> int:
    key = level_str.upper().strip()
    if key not in _LEVELS:
        raise ValueError(
            f"Invalid log level: '{level_str}'. "
            f"Valid levels are: {', '.join(_LEVELS)}"
        )
    return _LEVELS[key]


def get_logger(name: str) -> logging.Logger:
    """Standard logger; the correlation ID is added by the handler filter."""
    return logging.getLogger(name)
