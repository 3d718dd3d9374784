"""Logging setup for the runtime.

Modules log through stdlib loggers under the ``forge_runtime`` namespace
(``forge_runtime.dispatch``, ``forge_runtime.registry``, ...). This module
installs a single handler on that namespace with either human-readable text
or JSON Lines output.

Quick Start:
    >>> from forge_runtime.runtime.observability import configure_logging
    >>> configure_logging(level="DEBUG", format="json")
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

import orjson

ROOT_LOGGER = "forge_runtime"
TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# LogRecord attributes that are not user-supplied ``extra`` fields
_RESERVED = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """JSON Lines output for log aggregation. ``extra`` fields are inlined."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        entry.update((k, v) for k, v in record.__dict__.items() if k not in _RESERVED)
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


def configure_logging(
    level: str = "INFO",
    format: str = "text",  # noqa: A002 - matches LoggingSettings.format
    *,
    output: TextIO | None = None,
) -> logging.Handler:
    """Configure the ``forge_runtime`` logger. Format: "text" (human) or "json" (machine).

    Replaces any handler installed by a previous call, so calling it twice
    does not duplicate output.
    """
    match format:
        case "text": formatter: logging.Formatter = logging.Formatter(TEXT_FORMAT)
        case "json": formatter = JsonFormatter()
        case _: raise ValueError(f"Unknown format: {format}. Use 'text' or 'json'")

    handler = logging.StreamHandler(output or sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger(ROOT_LOGGER)
    for old in [h for h in root.handlers if getattr(h, "_forge_runtime", False)]:
        root.removeHandler(old)
    handler._forge_runtime = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.propagate = False
    return handler
