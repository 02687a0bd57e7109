"""storeqa - QA harness for a WooCommerce storefront.

Signs WooCommerce REST requests with one-legged OAuth 1.0a, loads
per-environment configuration, and provides the page objects and
pytest-bdd steps behind the API and UI acceptance features.

Example:
    >>> from storeqa import OAuthClient, load_config
    >>> config = load_config("staging")
    >>> with OAuthClient.from_config(config) as client:
    ...     response = client.get("/customers")
"""

from storeqa.client import ApiResponse, OAuthClient
from storeqa.config import StoreConfig, load_config
from storeqa.errors import (
    ConfigLoadError,
    InvalidCredentialError,
    PageError,
    RequestFailedError,
    SignatureComputationError,
    StoreQAError,
)
from storeqa.oauth import OAuthSigner, build_auth_params

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ApiResponse",
    "OAuthClient",
    "OAuthSigner",
    "build_auth_params",
    "StoreConfig",
    "load_config",
    "StoreQAError",
    "InvalidCredentialError",
    "RequestFailedError",
    "SignatureComputationError",
    "ConfigLoadError",
    "PageError",
]
