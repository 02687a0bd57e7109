"""Error hierarchy for storeqa."""

from storeqa.errors.base import (
    ConfigLoadError,
    ErrorCode,
    ErrorContext,
    InvalidCredentialError,
    PageError,
    RequestFailedError,
    SignatureComputationError,
    StoreQAError,
)

__all__ = [
    "ErrorCode",
    "ErrorContext",
    "StoreQAError",
    "InvalidCredentialError",
    "RequestFailedError",
    "SignatureComputationError",
    "ConfigLoadError",
    "PageError",
]
