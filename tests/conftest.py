"""Pytest fixtures for storeqa tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest

from storeqa.config import StoreConfig
from storeqa.config.loader import CONFIG_DIR_ENV, ENV_OVERRIDES, ENVIRONMENT_ENV
from storeqa.mock_store import DEFAULT_CONSUMER_KEY, DEFAULT_CONSUMER_SECRET, MockStoreServer
from storeqa.oauth import FixedClock, FixedNonce

FIXTURE_TIMESTAMP = 1700000000
FIXTURE_NONCE = "abcDEF123"
FIXTURE_URL = "http://mock.local/wc/v3/customers"
FIXTURE_KEY = "ck_test123"
FIXTURE_SECRET = "cs_test456"

PROJECT_ROOT = Path(__file__).parent.parent


class RecordingTransport:
    """httpx transport handler that records every request it receives."""

    def __init__(
        self,
        status_code: int = 200,
        body: str = "[]",
        error: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.error = error
        self.requests: list[httpx.Request] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(FIXTURE_TIMESTAMP)


@pytest.fixture
def fixed_nonce() -> FixedNonce:
    return FixedNonce(FIXTURE_NONCE)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every environment variable the config loader reads."""
    for name in [*ENV_OVERRIDES, ENVIRONMENT_ENV, CONFIG_DIR_ENV, "STOREFRONT_URL"]:
        monkeypatch.delenv(name, raising=False)
    for field_name in StoreConfig.model_fields:
        monkeypatch.delenv(f"STOREQA_{field_name.upper()}", raising=False)


@pytest.fixture
def write_env_file(tmp_path: Path) -> Callable[..., Path]:
    """Write ``<env>.yaml`` into a temporary config directory."""

    def write(env: str, content: str) -> Path:
        path = tmp_path / f"{env}.yaml"
        path.write_text(content, encoding="utf-8")
        return path

    return write


@pytest.fixture
def mock_store() -> Iterator[MockStoreServer]:
    with MockStoreServer(consumer_key=DEFAULT_CONSUMER_KEY, consumer_secret=DEFAULT_CONSUMER_SECRET) as server:
        yield server
