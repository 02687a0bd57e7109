"""In-process mock of the WooCommerce customers API.

The server checks the OAuth 1.0a signature of every request the same way
WooCommerce does, so offline runs exercise the real signing path. State is
kept in memory and lost when the server stops.

Example::

    with MockStoreServer(consumer_key="ck_test", consumer_secret="cs_test") as server:
        client = OAuthClient("ck_test", "cs_test", server.api_base_url)
        client.get("/customers")
"""

from __future__ import annotations

import hmac
import itertools
import json
import logging
import re
import threading
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qsl, urlsplit

from storeqa.oauth.encoding import append_query, to_query_string
from storeqa.oauth.signer import SIGNATURE_METHOD, sign_hmac_sha1, signature_base_string

logger = logging.getLogger(__name__)

DEFAULT_CONSUMER_KEY = "ck_test123"
DEFAULT_CONSUMER_SECRET = "cs_test456"
API_PREFIX = "/wc/v3"

REQUIRED_OAUTH_PARAMS = (
    "oauth_consumer_key",
    "oauth_nonce",
    "oauth_signature",
    "oauth_signature_method",
    "oauth_timestamp",
)

_CUSTOMER_PATH = re.compile(r"^/customers/(\d+)$")


class ApiError(Exception):
    """A WooCommerce-style REST error response."""

    def __init__(self, status: int, code: str, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.message = message

    def to_body(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "data": {"status": self.status}}


class CustomerStore:
    """Thread-safe in-memory customer records."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._customers: dict[int, dict[str, Any]] = {}
        self._ids = itertools.count(1)

    def reset(self) -> None:
        with self._lock:
            self._customers.clear()
            self._ids = itertools.count(1)

    def list_all(self) -> list[dict[str, Any]]:
        with self._lock:
            return [dict(c) for c in self._customers.values()]

    def get(self, customer_id: int) -> dict[str, Any]:
        with self._lock:
            customer = self._customers.get(customer_id)
            if customer is None:
                raise ApiError(404, "woocommerce_rest_invalid_id", "Invalid resource ID.")
            return dict(customer)

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        missing = [name for name in ("email", "password") if not data.get(name)]
        if missing:
            raise ApiError(
                400, "rest_missing_callback_param", f"Missing parameter(s): {', '.join(missing)}"
            )
        email = str(data["email"]).strip().lower()
        with self._lock:
            if any(c["email"] == email for c in self._customers.values()):
                raise ApiError(
                    400,
                    "registration-error-email-exists",
                    "An account is already registered with your email address. Please log in.",
                )
            customer_id = next(self._ids)
            customer = {
                "id": customer_id,
                "date_created": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S"),
                "email": email,
                "first_name": data.get("first_name", ""),
                "last_name": data.get("last_name", ""),
                "role": "customer",
                "username": data.get("username") or self._username_for(email),
                "billing": data.get("billing", {}),
                "shipping": data.get("shipping", {}),
                "is_paying_customer": False,
            }
            self._customers[customer_id] = customer
            return dict(customer)

    def update(self, customer_id: int, data: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            customer = self._customers.get(customer_id)
            if customer is None:
                raise ApiError(404, "woocommerce_rest_invalid_id", "Invalid resource ID.")
            for key in ("email", "first_name", "last_name", "billing", "shipping"):
                if key in data:
                    customer[key] = data[key]
            return dict(customer)

    def delete(self, customer_id: int, force: bool) -> dict[str, Any]:
        if not force:
            raise ApiError(501, "woocommerce_rest_trash_not_supported", "Customers do not support trashing.")
        with self._lock:
            customer = self._customers.pop(customer_id, None)
            if customer is None:
                raise ApiError(404, "woocommerce_rest_invalid_id", "Invalid resource ID.")
            return customer

    def _username_for(self, email: str) -> str:
        base = email.split("@")[0]
        taken = {c["username"] for c in self._customers.values()}
        username, suffix = base, 2
        while username in taken:
            username = f"{base}-{suffix}"
            suffix += 1
        return username


def verify_signature(
    method: str, url: str, consumer_key: str, consumer_secret: str
) -> dict[str, str]:
    """Check the OAuth query parameters on ``url``.

    Returns the received OAuth parameters.

    Raises:
        ApiError: 401 when a parameter is missing, the key is unknown or the
            signature does not match.
    """
    parts = urlsplit(url)
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    oauth = {k: v for k, v in pairs if k.startswith("oauth_")}
    app_params = [(k, v) for k, v in pairs if not k.startswith("oauth_")]

    missing = [name for name in REQUIRED_OAUTH_PARAMS if name not in oauth]
    if missing:
        raise ApiError(
            401,
            "woocommerce_rest_authentication_missing_parameter",
            f"Missing OAuth parameter {missing[0]}",
        )
    if oauth["oauth_signature_method"] != SIGNATURE_METHOD:
        raise ApiError(401, "woocommerce_rest_authentication_error", "Invalid signature method.")
    if oauth["oauth_consumer_key"] != consumer_key:
        raise ApiError(401, "woocommerce_rest_authentication_error", "Consumer key is invalid.")

    unsigned = f"{parts.scheme}://{parts.netloc}{parts.path}"
    base_string = signature_base_string(method, append_query(unsigned, to_query_string(app_params)), oauth)
    expected = sign_hmac_sha1(base_string, consumer_secret)
    if not hmac.compare_digest(expected, oauth["oauth_signature"]):
        logger.debug("Signature mismatch; base string was %s", base_string)
        raise ApiError(401, "woocommerce_rest_authentication_error", "Invalid signature - provided signature does not match.")
    return oauth


class _StoreHandler(BaseHTTPRequestHandler):
    server: _StoreHTTPServer

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    def _send_json(self, status: int, body: Any) -> None:
        payload = json.dumps(body).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=UTF-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def _read_json(self) -> dict[str, Any]:
        if not self._body:
            return {}
        try:
            data = json.loads(self._body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ApiError(400, "rest_invalid_json", f"Invalid JSON body passed: {e}") from e
        if not isinstance(data, dict):
            raise ApiError(400, "rest_invalid_json", "JSON body must be an object.")
        return data

    def _full_url(self) -> str:
        host = self.headers.get("Host") or "{}:{}".format(*self.server.server_address[:2])
        return f"http://{host}{self.path}"

    def _handle(self) -> None:
        # The body is read before any response is sent.
        length = int(self.headers.get("Content-Length") or 0)
        self._body = self.rfile.read(length) if length else b""
        method = self.command
        url = self._full_url()
        parts = urlsplit(self.path)
        path = parts.path
        if path.startswith("/wp-json/"):
            path = path[len("/wp-json"):]

        try:
            if path == "/echo":
                self._send_json(200, self._echo(method, url))
                return

            verify_signature(method, url, self.server.consumer_key, self.server.consumer_secret)

            if not path.startswith(API_PREFIX + "/"):
                raise ApiError(404, "rest_no_route", "No route was found matching the URL and request method.")
            status, body = self._route(method, path[len(API_PREFIX):], dict(parse_qsl(parts.query)))
            self._send_json(status, body)
        except ApiError as e:
            logger.debug("%s %s -> %d %s", method, path, e.status, e.code)
            self._send_json(e.status, e.to_body())

    def _route(self, method: str, path: str, query: dict[str, str]) -> tuple[int, Any]:
        customers = self.server.customers
        if path == "/customers":
            if method == "GET":
                return 200, customers.list_all()
            if method == "POST":
                return 201, customers.create(self._read_json())

        match = _CUSTOMER_PATH.match(path)
        if match:
            customer_id = int(match.group(1))
            if method == "GET":
                return 200, customers.get(customer_id)
            if method == "PUT":
                return 200, customers.update(customer_id, self._read_json())
            if method == "DELETE":
                force = query.get("force", "").lower() in ("true", "1")
                return 200, customers.delete(customer_id, force)

        raise ApiError(404, "rest_no_route", "No route was found matching the URL and request method.")

    def _echo(self, method: str, url: str) -> dict[str, Any]:
        pairs = parse_qsl(urlsplit(url).query, keep_blank_values=True)
        try:
            verify_signature(method, url, self.server.consumer_key, self.server.consumer_secret)
            valid = True
        except ApiError:
            valid = False
        return {
            "method": method,
            "oauth": {k: v for k, v in pairs if k.startswith("oauth_")},
            "query": {k: v for k, v in pairs if not k.startswith("oauth_")},
            "signature_valid": valid,
        }

    do_GET = _handle
    do_POST = _handle
    do_PUT = _handle
    do_DELETE = _handle


class _StoreHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], consumer_key: str, consumer_secret: str) -> None:
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.customers = CustomerStore()
        super().__init__(address, _StoreHandler)


class MockStoreServer:
    """Mock WooCommerce server running on a background thread.

    Args:
        host: Interface to bind.
        port: Port to bind; 0 picks a free one.
        consumer_key: The only consumer key accepted.
        consumer_secret: Secret used to verify signatures.
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 0,
        consumer_key: str = DEFAULT_CONSUMER_KEY,
        consumer_secret: str = DEFAULT_CONSUMER_SECRET,
    ) -> None:
        self._httpd = _StoreHTTPServer((host, port), consumer_key, consumer_secret)
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        host, port = self._httpd.server_address[:2]
        return f"http://{host}:{port}"

    @property
    def api_base_url(self) -> str:
        return f"{self.url}{API_PREFIX}"

    @property
    def customers(self) -> CustomerStore:
        return self._httpd.customers

    def start(self) -> MockStoreServer:
        self._thread = threading.Thread(target=self._httpd.serve_forever, daemon=True)
        self._thread.start()
        logger.info("Mock store listening on %s", self.url)
        return self

    def serve_forever(self) -> None:
        """Serve on the calling thread until interrupted."""
        logger.info("Mock store listening on %s", self.url)
        try:
            self._httpd.serve_forever()
        finally:
            self._httpd.server_close()

    def stop(self) -> None:
        if self._thread is not None:
            self._httpd.shutdown()
            self._thread.join(timeout=5)
            self._thread = None
        self._httpd.server_close()

    def __enter__(self) -> MockStoreServer:
        return self.start()

    def __exit__(self, *args: Any) -> None:
        self.stop()
