"""Logging configuration utilities for the HTTP server.

Records are written as one JSON object per line, or as plain text when
``use_json`` is off. Request targets are echoed into the log verbatim, so
credential-looking fragments in them are masked before they are written.
"""

import json
import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rawhttp.domain.connection_id import LOGGER_ROOT, ConnectionLoggerAdapter

LOG_FORMAT = "%(asctime)s %(levelname)s [%(connection_id)s] %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5
REDACTION = "[REDACTED]"

# (pattern, replacement) pairs applied in order to peer-supplied values.
SENSITIVE_PATTERNS = [
    (
        re.compile(r"(?i)\b(authorization|token|password|secret|api[_-]?key)=[^&\s]*"),
        r"\1=" + REDACTION,
    ),
    (re.compile(r"\b[A-Fa-f0-9]{32,}\b"), REDACTION),
]

# Extra attributes copied into JSON records, in addition to the fixed fields.
EXTRA_KEYS = (
    "client",
    "route",
    "method",
    "status_code",
    "state",
    "bytes_in",
    "bytes_out",
    "duration_ms",
    "error_type",
    "parse_error",
    "limit",
    "remaining_workers",
    "host",
    "port",
    "directory",
    "destination",
    "log_level",
    "socket_timeout",
    "shutdown_grace_seconds",
    "signal",
)

# Extras whose text comes straight off the wire.
PEER_SUPPLIED_KEYS = frozenset({"route", "method"})


def redact_sensitive(value: str) -> str:
    """Mask credential-looking fragments of ``value``, keeping the rest."""
    if not value:
        return value
    for pattern, replacement in SENSITIVE_PATTERNS:
        value = pattern.sub(replacement, value)
    return value


class ConnectionIdFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Give records logged outside a connection a placeholder ID.

    The plain-text format references ``%(connection_id)s`` and would fail
    on records that did not pass through ``ConnectionLoggerAdapter``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Fill in ``connection_id`` when missing; never drops a record."""
        if not hasattr(record, "connection_id"):
            record.connection_id = "-"
        return True


class JsonFormatter(logging.Formatter):
    """JSON formatter with stable key ordering for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Render the fixed fields, the event, and any known extras."""
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "connection_id": getattr(record, "connection_id", "-"),
            "component": getattr(record, "component", "unknown"),
            "message": record.getMessage(),
        }
        if hasattr(record, "event"):
            log_data["event"] = record.event

        for key in EXTRA_KEYS:
            if not hasattr(record, key):
                continue
            value = getattr(record, key)
            if key in PEER_SUPPLIED_KEYS and isinstance(value, str):
                value = redact_sensitive(value)
            log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, sort_keys=True)


def _resolve_level(level_name: str) -> int:
    """Translate a level name into its numeric value, defaulting to INFO."""
    level = getattr(logging, level_name.upper(), None)
    if isinstance(level, int):
        return level
    return logging.INFO


def _build_formatter(use_json: bool) -> logging.Formatter:
    if use_json:
        return JsonFormatter(datefmt=DATE_FORMAT)
    return logging.Formatter(LOG_FORMAT, DATE_FORMAT)


def _build_handler(
    destination: Optional[str], level: int, use_json: bool = True
) -> logging.Handler:
    """Create a handler for ``destination``: ``stdout`` or a rotating log file.

    Missing parent directories of a file destination are created.
    """
    handler: logging.Handler
    if not destination or destination.lower() == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    else:
        log_path = Path(destination)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT
        )
    handler.setLevel(level)
    handler.setFormatter(_build_formatter(use_json))
    handler.addFilter(ConnectionIdFilter())
    return handler


def configure_logging(
    level: str = "INFO", destination: Optional[str] = None, use_json: bool = True
) -> ConnectionLoggerAdapter:
    """Configure the ``rawhttp`` logger and return an adapter for it."""
    logger = logging.getLogger(LOGGER_ROOT)
    numeric_level = _resolve_level(level)
    logger.setLevel(numeric_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    logger.addHandler(_build_handler(destination, numeric_level, use_json))
    adapter = ConnectionLoggerAdapter(logger, {})
    adapter.info(
        "Logging configured",
        extra={
            "event": "logging_configured",
            "destination": destination or "stdout",
            "log_level": logging.getLevelName(numeric_level),
            "use_json": use_json,
        },
    )
    return adapter
