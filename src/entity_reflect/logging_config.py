"""
Logging setup for applications and the CLI.

The library itself only creates module loggers (``logging.getLogger(__name__)``)
and never installs handlers on import. Applications that want entity-reflect
output call ``configure_logging()``:

- console format (default): ``12:00:01 [entity_reflect.identifier] WARNING: ...``
- JSON lines format: one JSON object per record, for log shippers and agents
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

from entity_reflect.config import get_settings

ROOT_LOGGER = "entity_reflect"

_NO_COLOR = os.environ.get("NO_COLOR") or not sys.stderr.isatty()


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "" if _NO_COLOR else "\033[0m"
    DIM = "" if _NO_COLOR else "\033[2m"

    DEBUG = "" if _NO_COLOR else "\033[36m"  # Cyan
    WARNING = "" if _NO_COLOR else "\033[33m"  # Yellow
    ERROR = "" if _NO_COLOR else "\033[31m"  # Red
    CRITICAL = "" if _NO_COLOR else "\033[35m"  # Magenta


class JSONLFormatter(logging.Formatter):
    """
    Formats log records as JSON Lines.

    Example output:
    {"timestamp":"2024-01-15T10:30:45.123000Z","level":"WARNING","logger":"entity_reflect.identifier","message":"Several members ..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC)
            .replace(tzinfo=None)
            .isoformat()
            + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.DEBUG,
        logging.WARNING: Colors.WARNING,
        logging.ERROR: Colors.ERROR,
        logging.CRITICAL: Colors.CRITICAL,
    }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        prefix = f"{Colors.DIM}{timestamp}{Colors.RESET} [{record.name}]"

        if record.levelno != logging.INFO:
            color = self.LEVEL_COLORS.get(record.levelno, "")
            prefix = f"{prefix} {color}{record.levelname}{Colors.RESET}:"

        message = f"{prefix} {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def configure_logging(
    level: int | str | None = None,
    json_format: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """
    Attach a single handler to the ``entity_reflect`` logger.

    Calling again replaces the handler installed by the previous call.

    Args:
        level: Minimum level; defaults to ``ENTITY_REFLECT_LOG_LEVEL`` (WARNING).
        json_format: Emit JSON lines instead of console text.
        stream: Output stream (default: stderr).

    Returns:
        The configured ``entity_reflect`` logger.
    """
    if level is None:
        level = get_settings().log_level

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONLFormatter() if json_format else ConsoleFormatter())

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False
    return root_logger
