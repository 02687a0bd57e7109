"""Secret redaction helpers for storeqa."""

from storeqa.security.sanitization import (
    REDACTED,
    SensitiveDataFilter,
    mask_secret,
    redact_url,
)

__all__ = [
    "REDACTED",
    "SensitiveDataFilter",
    "mask_secret",
    "redact_url",
]
