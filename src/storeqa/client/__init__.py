"""Signed HTTP client for the WooCommerce REST API.

Every request is signed with one-legged OAuth 1.0a and the parameters are
carried in the query string. Responses are returned verbatim; HTTP error
statuses are data, not exceptions.
"""

from __future__ import annotations

import json as jsonlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from storeqa.errors import RequestFailedError
from storeqa.oauth import Clock, NonceSource, OAuthSigner
from storeqa.oauth.signer import normalize_method
from storeqa.security.sanitization import redact_url

if TYPE_CHECKING:
    from storeqa.config import StoreConfig

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Accept": "application/json"}


@dataclass(frozen=True)
class ApiResponse:
    """Status code and raw body of one API call."""

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return jsonlib.loads(self.body)


class OAuthClient:
    """HTTP client that signs each request for one consumer credential.

    Args:
        consumer_key: WooCommerce consumer key (``ck_...``).
        consumer_secret: WooCommerce consumer secret (``cs_...``).
        base_url: REST base URL, e.g. ``https://store/wp-json/wc/v3``.
        timeout: Connect/read timeout in seconds.
        http_client: Pre-built httpx client (tests pass one with a mock
            transport). A client passed in is not closed by :meth:`close`.
        clock: Timestamp source for signing.
        nonce_source: Nonce source for signing.

    Raises:
        InvalidCredentialError: If the key or secret is unusable. Nothing is
            sent in that case.
    """

    def __init__(
        self,
        consumer_key: str | None,
        consumer_secret: str | None,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
        clock: Clock | None = None,
        nonce_source: NonceSource | None = None,
    ) -> None:
        self.signer = OAuthSigner(consumer_key, consumer_secret, clock=clock, nonce_source=nonce_source)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout, headers=DEFAULT_HEADERS)

    @classmethod
    def from_config(cls, config: StoreConfig, **kwargs: Any) -> OAuthClient:
        """Build a client for the API of the given environment."""
        return cls(
            config.get_consumer_key(),
            config.get_consumer_secret(),
            config.get_api_base_url(),
            timeout=config.timeout,
            **kwargs,
        )

    def __repr__(self) -> str:
        return f"OAuthClient(base_url={self.base_url!r}, signer={self.signer!r})"

    def url_for(self, endpoint: str) -> str:
        if not endpoint:
            return self.base_url
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def request(self, method: str, endpoint: str, body: Any = None) -> ApiResponse:
        """Sign and send one request.

        Raises:
            RequestFailedError: On any transport failure (DNS, refused
                connection, TLS, timeout, malformed URL).
            ValueError: If ``method`` is not a supported HTTP verb.
        """
        method = normalize_method(method)
        url = self.url_for(endpoint)
        try:
            signed_url = self.signer.signed_url(method, url)
        except ValueError as e:
            safe_url = redact_url(url)
            logger.error("%s %s failed: invalid URL: %s", method, safe_url, e)
            raise RequestFailedError(
                f"{method} {safe_url} failed: invalid URL: {e}",
                method=method,
                url=safe_url,
                cause=e,
            ) from e
        safe_url = redact_url(signed_url)

        headers = dict(DEFAULT_HEADERS)
        content: bytes | None = None
        if body is not None:
            content = jsonlib.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        logger.debug("%s %s", method, safe_url)
        try:
            response = self._client.request(method, signed_url, content=content, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("%s %s failed: %s", method, safe_url, e)
            raise RequestFailedError(
                f"{method} {safe_url} failed: {e}",
                method=method,
                url=safe_url,
                cause=e,
            ) from e

        logger.debug("%s %s -> %d", method, safe_url, response.status_code)
        return ApiResponse(status_code=response.status_code, body=response.text)

    def get(self, endpoint: str) -> ApiResponse:
        return self.request("GET", endpoint)

    def post(self, endpoint: str, body: Any = None) -> ApiResponse:
        return self.request("POST", endpoint, body)

    def put(self, endpoint: str, body: Any = None) -> ApiResponse:
        return self.request("PUT", endpoint, body)

    def delete(self, endpoint: str) -> ApiResponse:
        return self.request("DELETE", endpoint)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> OAuthClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


__all__ = ["ApiResponse", "OAuthClient"]
