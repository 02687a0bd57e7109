"""Redaction of secrets in logs, error messages and console output."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

REDACTED = "***REDACTED***"

_SIGNATURE_IN_URL = re.compile(r"(oauth_signature=)[^&\s]+")


def redact_url(url: str) -> str:
    """Hide the ``oauth_signature`` value of a signed URL."""
    return _SIGNATURE_IN_URL.sub(rf"\1{REDACTED}", url)


def mask_secret(value: str | None, visible: int = 6) -> str:
    """Show only the first ``visible`` characters of a secret."""
    if not value:
        return "<not set>"
    if len(value) <= visible:
        return "*" * len(value)
    return f"{value[:visible]}{'*' * 8}"


class SensitiveDataFilter(logging.Filter):
    """Logging filter that redacts sensitive data."""

    DEFAULT_PATTERNS = [
        (_SIGNATURE_IN_URL, rf"\1{REDACTED}"),
        (
            re.compile(r"(password|passwd|pwd)[\'\"]?\s*[:=]\s*[\'\"]?([^\s\'\",}&]+)", re.IGNORECASE),
            rf"\1={REDACTED}",
        ),
        (
            re.compile(
                r"(consumer_secret|token|api_key|apikey|secret)[\'\"]?\s*[:=]\s*[\'\"]?([^\s\'\",}&]+)",
                re.IGNORECASE,
            ),
            rf"\1={REDACTED}",
        ),
        (re.compile(r"\bcs_[A-Za-z0-9]+"), f"cs_{REDACTED}"),
        (
            re.compile(r"(bearer|basic)\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
            rf"\1 {REDACTED}",
        ),
    ]

    def __init__(
        self,
        additional_patterns: list[tuple[re.Pattern[str], str]] | None = None,
        custom_redactor: Callable[[str], str] | None = None,
    ) -> None:
        super().__init__()
        self.patterns = list(self.DEFAULT_PATTERNS)
        self.custom_redactor = custom_redactor

        if additional_patterns:
            self.patterns.extend(additional_patterns)

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter and redact sensitive data from log records."""
        if isinstance(record.msg, str):
            record.msg = self.redact(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    k: self.redact(v) if isinstance(v, str) else v for k, v in record.args.items()
                }
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    self.redact(arg) if isinstance(arg, str) else arg for arg in record.args
                )

        return True

    def redact(self, message: str) -> str:
        """Redact sensitive patterns from a message."""
        if self.custom_redactor:
            message = self.custom_redactor(message)

        for pattern, replacement in self.patterns:
            message = pattern.sub(replacement, message)

        return message

    def add_pattern(self, pattern: re.Pattern[str], replacement: str) -> None:
        """Add a custom redaction pattern."""
        self.patterns.append((pattern, replacement))
