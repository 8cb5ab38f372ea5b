"""Logging setup for the list service.

Outside ``dev`` every record is written to stderr as one JSON object per
line (orjson). In ``dev`` records are rendered by rich. Both renderings
carry the request context that the correlation middleware stores in the
context variables below.

Usage:
    configure_logging(json_format=settings.env != "dev", level=settings.log_level)
    logger.info("Added item", extra={"content_id": content_id})
"""

from __future__ import annotations

import contextvars
import logging
import sys
from datetime import datetime, timezone
from typing import Any

import orjson
from rich.console import Console
from rich.logging import RichHandler

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)
user_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("user_id", default="")

_CONTEXT_VARS = (
    ("request_id", request_id_var),
    ("correlation_id", correlation_id_var),
    ("user_id", user_id_var),
)

# Attributes every LogRecord has; anything else was passed through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
    "context_suffix",
}

_QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "asyncio": logging.WARNING,
}


def request_context() -> dict[str, str]:
    """Correlation fields set for the current request, empty ones omitted."""
    return {name: value for name, var in _CONTEXT_VARS if (value := var.get())}


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Example:
        {"timestamp": "2026-01-10T12:34:56.789000+00:00", "level": "INFO",
         "logger": "mylist.access", "message": "GET /api/mylist/items - 200 - 4.1ms",
         "location": "correlation:dispatch:61", "request_id": "abc-123",
         "user_id": "john_doe", "status": 200}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update(request_context())
        entry.update(extra_fields(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return orjson.dumps(entry, default=str).decode()


class ContextFilter(logging.Filter):
    """Exposes the request context as ``%(context_suffix)s`` for text formats."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = request_context()
        short = {"request_id": "req", "correlation_id": "corr", "user_id": "user"}
        parts = [f"{short[name]}={value}" for name, value in context.items()]
        record.context_suffix = f" [{' '.join(parts)}]" if parts else ""
        return True


def _rich_handler(use_colors: bool) -> logging.Handler:
    console = Console(stderr=True, no_color=not use_colors)
    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s%(context_suffix)s"))
    handler.addFilter(ContextFilter())
    return handler


def configure_logging(
    json_format: bool = True,
    level: str = "INFO",
    use_colors: bool = True,
) -> None:
    """Replace the root handlers with a single JSON or rich handler.

    Args:
        json_format: Emit JSON lines (production) instead of rich console output
        level: Root log level name, case-insensitive
        use_colors: Allow ANSI colors in console output
    """
    if json_format:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
    else:
        handler = _rich_handler(use_colors)

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
