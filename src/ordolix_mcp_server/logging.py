"""Structured JSON logging for the MCP server.

Log lines go to stderr; stdout carries the stdio transport.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from typing import Any, TextIO

_setup_lock = threading.Lock()
_EXTRA_FIELDS = ("method", "tool", "session_id", "args_data", "duration_ms", "error")


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                entry[name] = getattr(record, name)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> logging.Logger:
    """Install the JSON handler on the package loggers.

    Calling it again replaces the handler instead of stacking a second one.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonFormatter())
    loggers = [logging.getLogger("ordolix_mcp"), logging.getLogger("ordolix_mcp_server")]
    with _setup_lock:
        for logger in loggers:
            for existing in logger.handlers[:]:
                if isinstance(existing.formatter, JsonFormatter):
                    logger.removeHandler(existing)
            logger.addHandler(handler)
            logger.setLevel(level.upper())
            logger.propagate = False
    return loggers[1]
