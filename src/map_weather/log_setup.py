"""Logging setup for library and command-line use."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .config import Settings

# Structured fields callers may attach via ``extra=``; copied into the JSON event.
CONTEXT_FIELDS = ("adcode", "batch_size", "pending", "status_code")


class JsonConsoleFormatter(logging.Formatter):
    """JSON formatter for structured console logs."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = value
        if record.exc_info:
            event["exception"] = self.formatException(record.exc_info)
        return json.dumps(event, default=str)


def setup_logger(
    name: str = "map_weather",
    level: int | str | None = None,
    settings: Settings | None = None,
) -> logging.Logger:
    """Create or reconfigure the process-wide logger.

    The level comes from ``level`` when given, else from ``settings.log_level``,
    else INFO. Calling again updates the level without adding handlers.
    """
    if level is None:
        level = settings.log_level if settings is not None else logging.INFO
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
