"""Logging configuration for storeqa."""

from storeqa.observability.logging import (
    ContextFormatter,
    StructuredFormatter,
    configure_logging,
    get_context,
    log_context,
)

__all__ = [
    "ContextFormatter",
    "StructuredFormatter",
    "configure_logging",
    "get_context",
    "log_context",
]
