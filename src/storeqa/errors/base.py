"""Custom exception hierarchy for storeqa.

Every storeqa error carries:
- error_code: a unique ErrorCode enum for categorization
- context: ErrorContext with scenario/request details
- suggestions: actionable steps to resolve the issue
- cause: the underlying exception, when one exists

Example:
    try:
        client.get("/customers")
    except RequestFailedError as e:
        print(e.format_verbose())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from storeqa.observability.logging import get_context


class ErrorCode(Enum):
    """Standardized error codes for storeqa.

    Error codes are organized by category:
    - E1xx: Request errors
    - E2xx: Configuration and credential errors
    - E3xx: Page object errors
    - E9xx: Unknown/internal errors
    """

    # Request errors (E1xx)
    REQUEST_FAILED = "E102"

    # Configuration errors (E2xx)
    INVALID_CREDENTIAL = "E201"
    SIGNATURE_UNAVAILABLE = "E202"
    CONFIG_LOAD_FAILED = "E203"

    # Page object errors (E3xx)
    PAGE_LAYOUT = "E301"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "request"
        elif code_num < 300:
            return "configuration"
        elif code_num < 400:
            return "page"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context attached to an error.

    Attributes:
        scenario_name: Gherkin scenario being executed, if known
        step_name: Step text being executed, if known
        request: HTTP request details (method, url)
        extra: Additional error-specific fields
        timestamp: When the error occurred
    """

    scenario_name: str | None = None
    step_name: str | None = None
    request: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def current(cls) -> ErrorContext:
        """Context for the scenario and step found in the active log context."""
        fields = get_context()
        return cls(scenario_name=fields.get("scenario"), step_name=fields.get("step"))

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "scenario_name": self.scenario_name,
            "step_name": self.step_name,
            "request": self.request,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.scenario_name:
            parts.append(f"scenario={self.scenario_name}")
        if self.step_name:
            parts.append(f"step={self.step_name}")
        return " > ".join(parts) if parts else "unknown location"


class StoreQAError(Exception):
    """Base exception for all storeqa errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with execution details
        suggestions: List of actionable steps to resolve the issue
        recoverable: Whether retrying could succeed
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
        recoverable: bool = False,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext.current()
        self.cause = cause
        self.recoverable = recoverable
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
            "",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.context.request:
            method = self.context.request.get("method", "?")
            url = self.context.request.get("url", "?")
            lines.append(f"Request: {method} {url}")

        if self.cause is not None:
            lines.append(f"Cause: {type(self.cause).__name__}: {self.cause}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class InvalidCredentialError(StoreQAError):
    """Consumer key or secret is missing, blank, or still a placeholder.

    Raised before any request is signed. The message names the environment
    variable that must be set.
    """

    error_code = ErrorCode.INVALID_CREDENTIAL
    default_message = "API credential is missing or invalid"
    default_suggestions = [
        "export API_CONSUMER_KEY=\"ck_your_actual_key_here\"",
        "export API_CONSUMER_SECRET=\"cs_your_actual_secret_here\"",
        "Check config/dev.yaml, config/staging.yaml and config/prod.yaml",
    ]

    def __init__(self, message: str | None = None, env_var: str | None = None, **kwargs: Any) -> None:
        self.env_var = env_var
        super().__init__(message, env_var=env_var, **kwargs)


class RequestFailedError(StoreQAError):
    """Transport-level failure while sending a signed request.

    Covers DNS errors, refused connections, TLS failures, timeouts and
    malformed URLs. HTTP error statuses are not failures here; they are
    returned to the caller as responses.
    """

    error_code = ErrorCode.REQUEST_FAILED
    default_message = "HTTP request failed"
    default_suggestions = [
        "Verify api_base_url for the selected environment",
        "Check network connectivity to the store",
        "Increase timeout in the environment config if the store is slow",
    ]

    def __init__(
        self,
        message: str | None = None,
        method: str | None = None,
        url: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.method = method
        self.url = url
        context = kwargs.pop("context", None) or ErrorContext.current()
        if method or url:
            context.request = {"method": method, "url": url}
        super().__init__(message, context=context, **kwargs)


class SignatureComputationError(StoreQAError):
    """HMAC-SHA1 is unavailable or refused by the runtime.

    This is a configuration problem of the interpreter (for example a
    FIPS-restricted OpenSSL build), not a per-request condition.
    """

    error_code = ErrorCode.SIGNATURE_UNAVAILABLE
    default_message = "Failed to compute OAuth signature"
    default_suggestions = [
        "Check that the Python build's OpenSSL allows SHA-1 for HMAC",
    ]


class ConfigLoadError(StoreQAError):
    """Raised when an environment configuration cannot be loaded."""

    error_code = ErrorCode.CONFIG_LOAD_FAILED
    default_message = "Failed to load configuration"
    default_suggestions = [
        "Select an environment that has a file under config/ (dev, staging, prod)",
        "Set STOREQA_ENV or pass --env",
    ]


class PageError(StoreQAError):
    """A page object could not measure or read the rendered page."""

    error_code = ErrorCode.PAGE_LAYOUT
    default_message = "Failed to read page layout"
