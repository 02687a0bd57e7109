"""Clock and nonce strategies injected into the OAuth signer."""

from __future__ import annotations

import base64
import re
import secrets
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

NONCE_BYTES = 16

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


class Clock(ABC):
    """Supplies the signing timestamp."""

    @abstractmethod
    def timestamp(self) -> int:
        """Return the current Unix time in whole seconds."""
        ...


class SystemClock(Clock):
    """Wall-clock time from the operating system."""

    def timestamp(self) -> int:
        return int(time.time())


class FixedClock(Clock):
    """Always returns the same timestamp."""

    def __init__(self, value: int) -> None:
        self.value = int(value)

    def timestamp(self) -> int:
        return self.value


class NonceSource(ABC):
    """Supplies a request-unique nonce."""

    @abstractmethod
    def nonce(self) -> str:
        """Return a fresh, non-empty nonce."""
        ...


class SecureNonceSource(NonceSource):
    """16 random bytes, base64-encoded, stripped of non-alphanumerics.

    Stripping ``+``, ``/`` and ``=`` makes the nonce variable in length
    (at most 22 characters) but keeps it URL-safe.
    """

    def __init__(self, token_bytes: Callable[[int], bytes] = secrets.token_bytes) -> None:
        self._token_bytes = token_bytes

    def nonce(self) -> str:
        while True:
            raw = base64.b64encode(self._token_bytes(NONCE_BYTES)).decode("ascii")
            value = _NON_ALPHANUMERIC.sub("", raw)
            if value:
                return value


class FixedNonce(NonceSource):
    """Always returns the same nonce."""

    def __init__(self, value: str) -> None:
        if not value:
            raise ValueError("nonce must not be empty")
        self.value = value

    def nonce(self) -> str:
        return self.value
