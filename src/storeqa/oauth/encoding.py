"""RFC 5849 / RFC 3986 encoding helpers for OAuth 1.0a signing."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import parse_qsl, quote, unquote, urlsplit, urlunsplit

DEFAULT_PORTS = {"http": 80, "https": 443}


def percent_encode(value: str) -> str:
    """Percent-encode a value per RFC 3986 section 2.1.

    Unreserved characters (``A-Z a-z 0-9 - . _ ~``) are kept as-is, every
    other UTF-8 byte becomes ``%XX`` in uppercase hex. Space is ``%20``.

    >>> percent_encode("a b&c=d")
    'a%20b%26c%3Dd'
    """
    return quote(str(value).encode("utf-8"), safe="~")


def percent_decode(value: str) -> str:
    """Decode a percent-encoded value. ``+`` is kept literally."""
    return unquote(value, encoding="utf-8", errors="strict")


def normalize_base_url(url: str) -> str:
    """Return the base string URI (RFC 5849 section 3.4.1.2).

    Scheme and host are lowercased, the default port is dropped, and the
    query and fragment are removed. An empty path becomes ``/``.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if not scheme or not parts.hostname:
        raise ValueError(f"URL must be absolute: {url!r}")

    host = parts.hostname.lower()
    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    netloc = host if port is None or DEFAULT_PORTS.get(scheme) == port else f"{host}:{port}"

    return urlunsplit((scheme, netloc, parts.path or "/", "", ""))


def collect_query_params(url: str) -> list[tuple[str, str]]:
    """Decode the application query parameters already present on ``url``."""
    query = urlsplit(url).query
    if not query:
        return []
    return parse_qsl(query, keep_blank_values=True)


def normalize_parameters(params: Iterable[tuple[str, str]]) -> str:
    """Encode, sort and join request parameters (RFC 5849 section 3.4.1.3.2).

    Names and values are encoded first, then sorted by name and by value
    for equal names, then joined as ``name=value`` pairs with ``&``.
    """
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in params)
    return "&".join(f"{k}={v}" for k, v in encoded)


def to_query_string(params: Iterable[tuple[str, str]]) -> str:
    """Render parameters as a query string using :func:`percent_encode`."""
    return "&".join(f"{k}={percent_encode(v)}" for k, v in params)


def append_query(url: str, query: str) -> str:
    """Append ``query`` to ``url``, keeping any existing query string."""
    if not query:
        return url
    if url.endswith(("?", "&")):
        return f"{url}{query}"
    separator = "&" if urlsplit(url).query else "?"
    return f"{url}{separator}{query}"
