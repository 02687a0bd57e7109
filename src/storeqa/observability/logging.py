"""Logging setup for storeqa.

Provides a JSON formatter for CI log collection, a plain formatter for
local runs, and a scenario-scoped logging context. Every handler installed
here carries a SensitiveDataFilter so signatures and secrets never reach
the output.

Example::

    from storeqa.observability.logging import configure_logging, log_context

    configure_logging(level="DEBUG")
    with log_context(scenario="Create customer"):
        logger.info("Creating customer")
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

from storeqa.security.sanitization import SensitiveDataFilter

_context_fields: ContextVar[dict[str, Any] | None] = ContextVar("storeqa_log_context", default=None)

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Attributes:
        include_location: Whether to include file/line/function in output.
        extra_fields: Additional fields to include in every log record.
    """

    def __init__(
        self,
        include_location: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ) -> None:
        super().__init__()
        self.include_location = include_location
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_location:
            log_data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        context = _context_fields.get()
        if context:
            log_data["context"] = dict(context)

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in self.extra_fields.items():
            log_data.setdefault(key, value)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ContextFormatter(logging.Formatter):
    """Plain formatter that appends the active log context, if any."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = _context_fields.get()
        if context:
            fields = " ".join(f"{k}={v}" for k, v in context.items())
            message = f"{message} [{fields}]"
        return message


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    include_location: bool = False,
    stream: Any = None,
) -> logging.Handler:
    """Configure the root logger for a storeqa run.

    Args:
        level: Minimum log level.
        json_format: Use JSON lines instead of the plain format.
        include_location: Include file/line/function in JSON output.
        stream: Output stream, stderr by default.

    Returns:
        The installed handler.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(StructuredFormatter(include_location=include_location))
    else:
        handler.setFormatter(ContextFormatter(PLAIN_FORMAT))
    handler.addFilter(SensitiveDataFilter())

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if getattr(existing, "_storeqa_handler", False):
            root_logger.removeHandler(existing)
    handler._storeqa_handler = True  # type: ignore[attr-defined]
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Keep httpx request lines (which include signed URLs) out of INFO output.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    return handler


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Add fields to every log line emitted inside the block."""
    current = dict(_context_fields.get() or {})
    current.update(kwargs)
    token = _context_fields.set(current)
    try:
        yield
    finally:
        _context_fields.reset(token)


def get_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    current = _context_fields.get()
    return dict(current) if current else {}
