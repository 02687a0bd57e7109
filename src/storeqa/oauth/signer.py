"""One-legged OAuth 1.0a request signing (HMAC-SHA1).

The signer produces the six ``oauth_*`` parameters for a request and can
render them as a query string or an ``Authorization`` header. It holds no
mutable state; clock and nonce are injected so signatures are reproducible
in tests.

Example::

    signer = OAuthSigner("ck_...", "cs_...")
    url = signer.signed_url("GET", "https://store.example.com/wp-json/wc/v3/customers")
"""

from __future__ import annotations

import base64
import hashlib
import hmac

from storeqa.credentials import CONSUMER_KEY_ENV, CONSUMER_SECRET_ENV, check_credential
from storeqa.errors import SignatureComputationError
from storeqa.oauth.encoding import (
    append_query,
    collect_query_params,
    normalize_base_url,
    normalize_parameters,
    percent_encode,
    to_query_string,
)
from storeqa.oauth.sources import Clock, NonceSource, SecureNonceSource, SystemClock

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"

SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})


def normalize_method(method: str) -> str:
    """Uppercase ``method`` and check it is a known HTTP verb."""
    normalized = (method or "").strip().upper()
    if normalized not in SUPPORTED_METHODS:
        raise ValueError(f"Unsupported HTTP method: {method!r}")
    return normalized


def signature_base_string(method: str, url: str, oauth_params: dict[str, str]) -> str:
    """Build the signature base string (RFC 5849 section 3.4.1).

    Query parameters already on ``url`` are folded into the normalized
    parameter string together with ``oauth_params``. ``oauth_signature``
    itself must not be present.
    """
    pairs = collect_query_params(url)
    pairs.extend((k, v) for k, v in oauth_params.items() if k != "oauth_signature")
    return "&".join(
        [
            normalize_method(method),
            percent_encode(normalize_base_url(url)),
            percent_encode(normalize_parameters(pairs)),
        ]
    )


def sign_hmac_sha1(base_string: str, consumer_secret: str, token_secret: str = "") -> str:
    """Return base64(HMAC-SHA1(consumer_secret & token_secret, base_string)).

    In the one-legged flow the token secret is empty, so the key is the
    consumer secret followed by a single ``&``.
    """
    key = f"{consumer_secret}&{token_secret}".encode("utf-8")
    try:
        digest = hmac.new(key, base_string.encode("utf-8"), hashlib.sha1).digest()
    except ValueError as e:
        raise SignatureComputationError(
            f"HMAC-SHA1 is not available in this runtime: {e}", cause=e
        ) from e
    return base64.b64encode(digest).decode("ascii")


def build_auth_params(
    method: str,
    url: str,
    consumer_key: str | None,
    consumer_secret: str | None,
    clock: Clock | None = None,
    nonce_source: NonceSource | None = None,
) -> dict[str, str]:
    """Produce the signed OAuth parameter set for one request.

    Returns a dict whose iteration order is sorted by key and which holds
    ``oauth_consumer_key``, ``oauth_nonce``, ``oauth_signature``,
    ``oauth_signature_method``, ``oauth_timestamp`` and ``oauth_version``.

    Raises:
        InvalidCredentialError: consumer key or secret is missing, blank or a placeholder.
        SignatureComputationError: HMAC-SHA1 is unavailable.
        ValueError: unsupported method or relative URL.
    """
    method = normalize_method(method)
    consumer_key = check_credential(CONSUMER_KEY_ENV, consumer_key)
    consumer_secret = check_credential(CONSUMER_SECRET_ENV, consumer_secret)
    clock = clock or SystemClock()
    nonce_source = nonce_source or SecureNonceSource()

    params = {
        "oauth_consumer_key": consumer_key,
        "oauth_nonce": nonce_source.nonce(),
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": str(clock.timestamp()),
        "oauth_version": OAUTH_VERSION,
    }
    base_string = signature_base_string(method, url, params)
    params["oauth_signature"] = sign_hmac_sha1(base_string, consumer_secret)

    return dict(sorted(params.items()))


class OAuthSigner:
    """Signs requests for one consumer credential.

    Safe to share between threads as long as the injected clock and nonce
    source are.
    """

    def __init__(
        self,
        consumer_key: str | None,
        consumer_secret: str | None,
        clock: Clock | None = None,
        nonce_source: NonceSource | None = None,
    ) -> None:
        self.consumer_key = check_credential(CONSUMER_KEY_ENV, consumer_key)
        self._consumer_secret = check_credential(CONSUMER_SECRET_ENV, consumer_secret)
        self.clock = clock or SystemClock()
        self.nonce_source = nonce_source or SecureNonceSource()

    def __repr__(self) -> str:
        return f"OAuthSigner(consumer_key={self.consumer_key!r}, consumer_secret='***')"

    def sign(self, method: str, url: str) -> dict[str, str]:
        """Return the sorted, signed OAuth parameter set for ``method url``."""
        return build_auth_params(
            method,
            url,
            self.consumer_key,
            self._consumer_secret,
            clock=self.clock,
            nonce_source=self.nonce_source,
        )

    def signed_url(self, method: str, url: str) -> str:
        """Return ``url`` with the OAuth parameters appended to its query."""
        params = self.sign(method, url)
        return append_query(url, to_query_string(params.items()))

    def authorization_header(self, method: str, url: str) -> str:
        """Render the parameter set as an ``Authorization: OAuth`` value."""
        params = self.sign(method, url)
        fields = ", ".join(f'{k}="{percent_encode(v)}"' for k, v in params.items())
        return f"OAuth {fields}"
