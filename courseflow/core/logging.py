"""Logging setup for courseflow.

``LOG_JSON`` picks one of two formatters:

  _ContainerFormatter: one readable line per record for a dev terminal,
    tagged with the request id so a completion and the recalculation it
    triggered can be matched up by eye.

  _JsonFormatter: JSON Lines for log aggregation. Request context and the
    ids a caller attaches with ``extra=`` become top-level keys:

      {"level": "INFO", "request_id": "...", "course_id": "...", ...}
"""

from __future__ import annotations

import json
import logging
import sys

# Attributes copied to the JSON output when present on a record.
CONTEXT_FIELDS = (
    "request_id",
    "user_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "student_id",
    "course_id",
    "trigger",
)

_NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpcore",
    "httpx",
    "asyncpg",
    "sqlalchemy.engine",
)


def _context_value(record: logging.LogRecord, key: str) -> object | None:
    value = getattr(record, key, None)
    return None if value in (None, "-") else value


class _ContainerFormatter(logging.Formatter):
    """``<time> <LEVEL> <logger> [<request id>] <message>``.

    Warnings and above carry ``[file:line]``; tracebacks follow on the
    next lines when the record has exc_info.
    """

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = super().formatTime(record, datefmt)
        # Milliseconds go before the +HHMM offset.
        return f"{base[:-5]}.{int(record.msecs):03d}{base[-5:]}"

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            self.formatTime(record, self.datefmt),
            f"{record.levelname:<8}",
            record.name,
        ]
        request_id = _context_value(record, "request_id")
        if request_id is not None:
            parts.append(f"[{request_id}]")
        line = " ".join(parts) + "  " + record.getMessage()

        if record.levelno >= logging.WARNING:
            line += f"  [{record.filename}:{record.lineno}]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class _JsonFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = _context_value(record, key)
            if value is not None:
                entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Route every logger through one stdout handler at ``level_name``.

    Unknown level names fall back to INFO. Driver and server loggers are
    held at WARNING or above so debug output stays about courseflow.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
