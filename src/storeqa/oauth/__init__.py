"""OAuth 1.0a request signing for the WooCommerce REST API."""

from storeqa.oauth.encoding import (
    normalize_base_url,
    normalize_parameters,
    percent_decode,
    percent_encode,
)
from storeqa.oauth.signer import (
    OAUTH_VERSION,
    SIGNATURE_METHOD,
    OAuthSigner,
    build_auth_params,
    sign_hmac_sha1,
    signature_base_string,
)
from storeqa.oauth.sources import (
    Clock,
    FixedClock,
    FixedNonce,
    NonceSource,
    SecureNonceSource,
    SystemClock,
)

__all__ = [
    "OAuthSigner",
    "build_auth_params",
    "signature_base_string",
    "sign_hmac_sha1",
    "percent_encode",
    "percent_decode",
    "normalize_base_url",
    "normalize_parameters",
    "SIGNATURE_METHOD",
    "OAUTH_VERSION",
    "Clock",
    "SystemClock",
    "FixedClock",
    "NonceSource",
    "SecureNonceSource",
    "FixedNonce",
]
