"""Tests for OAuth 1.0a HMAC-SHA1 signing."""

from __future__ import annotations

import base64
import hashlib
import hmac
import re
from unittest.mock import patch
from urllib.parse import parse_qsl, urlsplit

import pytest

from storeqa.errors import InvalidCredentialError, SignatureComputationError
from storeqa.oauth import (
    FixedClock,
    FixedNonce,
    OAuthSigner,
    SecureNonceSource,
    SystemClock,
    build_auth_params,
    sign_hmac_sha1,
    signature_base_string,
)
from tests.conftest import FIXTURE_KEY, FIXTURE_NONCE, FIXTURE_SECRET, FIXTURE_TIMESTAMP, FIXTURE_URL

EXPECTED_BASE_STRING = (
    "GET&http%3A%2F%2Fmock.local%2Fwc%2Fv3%2Fcustomers&oauth_consumer_key%3Dck_test123"
    "%26oauth_nonce%3DabcDEF123%26oauth_signature_method%3DHMAC-SHA1"
    "%26oauth_timestamp%3D1700000000%26oauth_version%3D1.0"
)

OAUTH_KEYS = [
    "oauth_consumer_key",
    "oauth_nonce",
    "oauth_signature",
    "oauth_signature_method",
    "oauth_timestamp",
    "oauth_version",
]


def independent_signature(base_string: str, secret: str) -> str:
    digest = hmac.new(f"{secret}&".encode(), base_string.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def fixture_params(method: str = "GET", url: str = FIXTURE_URL, secret: str = FIXTURE_SECRET) -> dict[str, str]:
    return build_auth_params(
        method,
        url,
        FIXTURE_KEY,
        secret,
        clock=FixedClock(FIXTURE_TIMESTAMP),
        nonce_source=FixedNonce(FIXTURE_NONCE),
    )


class TestRegressionFixture:
    """The documented fixture: ck_test123 / cs_test456, GET, 1700000000, abcDEF123."""

    def test_parameter_values(self) -> None:
        params = fixture_params()

        assert params["oauth_consumer_key"] == "ck_test123"
        assert params["oauth_nonce"] == "abcDEF123"
        assert params["oauth_signature_method"] == "HMAC-SHA1"
        assert params["oauth_timestamp"] == "1700000000"
        assert params["oauth_version"] == "1.0"

    def test_base_string_is_exact(self) -> None:
        params = fixture_params()
        assert signature_base_string("GET", FIXTURE_URL, params) == EXPECTED_BASE_STRING

    def test_signature_matches_independent_hmac(self) -> None:
        params = fixture_params()
        assert params["oauth_signature"] == independent_signature(EXPECTED_BASE_STRING, "cs_test456")

    def test_signature_is_base64(self) -> None:
        signature = fixture_params()["oauth_signature"]
        assert len(base64.b64decode(signature)) == 20


class TestBuildAuthParams:
    """Tests for build_auth_params."""

    def test_exactly_six_keys_in_sorted_order(self) -> None:
        params = fixture_params()
        assert list(params) == OAUTH_KEYS

    def test_deterministic_for_fixed_inputs(self) -> None:
        assert fixture_params() == fixture_params()

    def test_method_is_case_insensitive(self) -> None:
        assert fixture_params("get")["oauth_signature"] == fixture_params("GET")["oauth_signature"]

    def test_method_changes_signature(self) -> None:
        assert fixture_params("POST")["oauth_signature"] != fixture_params("GET")["oauth_signature"]

    def test_unsupported_method_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unsupported HTTP method"):
            fixture_params("FETCH")

    def test_tamper_sensitivity(self) -> None:
        baseline = fixture_params(secret="cs_test456")["oauth_signature"]
        for tampered in ["cs_test457", "Cs_test456", "cs_test45", "cs_test4566"]:
            assert fixture_params(secret=tampered)["oauth_signature"] != baseline

    def test_existing_query_parameters_are_signed(self) -> None:
        url = f"{FIXTURE_URL}?force=true"
        params = fixture_params(url=url)
        base = signature_base_string("GET", url, params)

        assert base.startswith("GET&http%3A%2F%2Fmock.local%2Fwc%2Fv3%2Fcustomers&")
        assert "force%3Dtrue" in base
        assert params["oauth_signature"] == independent_signature(base, FIXTURE_SECRET)
        assert params["oauth_signature"] != fixture_params()["oauth_signature"]

    def test_uses_system_clock_by_default(self) -> None:
        with patch("storeqa.oauth.sources.time.time", return_value=1712345678.9):
            params = build_auth_params("GET", FIXTURE_URL, FIXTURE_KEY, FIXTURE_SECRET)
        assert params["oauth_timestamp"] == "1712345678"

    def test_fresh_nonce_per_request(self) -> None:
        first = build_auth_params("GET", FIXTURE_URL, FIXTURE_KEY, FIXTURE_SECRET)
        second = build_auth_params("GET", FIXTURE_URL, FIXTURE_KEY, FIXTURE_SECRET)
        assert first["oauth_nonce"] != second["oauth_nonce"]


class TestSortInvariant:
    """Insertion order of the parameter set never affects the result."""

    def test_permuted_insertion_order(self) -> None:
        params = fixture_params()
        unsigned = {k: v for k, v in params.items() if k != "oauth_signature"}
        reversed_params = dict(reversed(list(unsigned.items())))
        shuffled = {k: unsigned[k] for k in ["oauth_version", "oauth_consumer_key", "oauth_timestamp",
                                              "oauth_nonce", "oauth_signature_method"]}

        expected = signature_base_string("GET", FIXTURE_URL, unsigned)
        assert signature_base_string("GET", FIXTURE_URL, reversed_params) == expected
        assert signature_base_string("GET", FIXTURE_URL, shuffled) == expected
        assert sign_hmac_sha1(expected, FIXTURE_SECRET) == params["oauth_signature"]

    def test_signature_parameter_excluded_from_base_string(self) -> None:
        params = fixture_params()
        assert "oauth_signature%3D" not in signature_base_string("GET", FIXTURE_URL, params)


class TestCredentialValidation:
    """Empty, missing and placeholder credentials are rejected."""

    @pytest.mark.parametrize("key", [None, "", "   ", "your_consumer_key_here"])
    def test_invalid_consumer_key(self, key: str | None) -> None:
        with pytest.raises(InvalidCredentialError) as exc_info:
            build_auth_params("GET", FIXTURE_URL, key, FIXTURE_SECRET)
        assert exc_info.value.env_var == "API_CONSUMER_KEY"
        assert "API_CONSUMER_KEY" in exc_info.value.message

    @pytest.mark.parametrize("secret", [None, "", "your_consumer_secret_here"])
    def test_invalid_consumer_secret(self, secret: str | None) -> None:
        with pytest.raises(InvalidCredentialError) as exc_info:
            OAuthSigner(FIXTURE_KEY, secret)
        assert exc_info.value.env_var == "API_CONSUMER_SECRET"

    def test_message_has_setup_instructions(self) -> None:
        with pytest.raises(InvalidCredentialError) as exc_info:
            OAuthSigner("", FIXTURE_SECRET)
        message = exc_info.value.message
        assert 'export API_CONSUMER_KEY="ck_your_actual_key_here"' in message
        assert "config/staging.yaml" in message


class TestSignHmacSha1:
    """Tests for the HMAC primitive wrapper."""

    def test_empty_token_secret_keeps_trailing_ampersand(self) -> None:
        assert sign_hmac_sha1("base", "secret") == independent_signature("base", "secret")

    def test_unavailable_digest_raises(self) -> None:
        with patch("storeqa.oauth.signer.hmac.new", side_effect=ValueError("unsupported hash type sha1")):
            with pytest.raises(SignatureComputationError) as exc_info:
                sign_hmac_sha1("base", "secret")
        assert isinstance(exc_info.value.cause, ValueError)
        assert exc_info.value.error_code.value == "E202"


class TestOAuthSigner:
    """Tests for OAuthSigner rendering helpers."""

    @pytest.fixture
    def signer(self, fixed_clock: FixedClock, fixed_nonce: FixedNonce) -> OAuthSigner:
        return OAuthSigner(FIXTURE_KEY, FIXTURE_SECRET, clock=fixed_clock, nonce_source=fixed_nonce)

    def test_sign_matches_function(self, signer: OAuthSigner) -> None:
        assert signer.sign("GET", FIXTURE_URL) == fixture_params()

    def test_signed_url_carries_all_parameters(self, signer: OAuthSigner) -> None:
        signed = signer.signed_url("GET", FIXTURE_URL)

        assert signed.startswith(f"{FIXTURE_URL}?oauth_consumer_key=ck_test123&oauth_nonce=abcDEF123&")
        assert not signed.endswith("&")
        assert dict(parse_qsl(urlsplit(signed).query)) == fixture_params()

    def test_signed_url_percent_encodes_signature(self, signer: OAuthSigner) -> None:
        signed = signer.signed_url("GET", FIXTURE_URL)
        raw_signature = re.search(r"oauth_signature=([^&]+)", signed).group(1)
        assert not set(raw_signature) & set("+/=")

    def test_signed_url_keeps_existing_query(self, signer: OAuthSigner) -> None:
        signed = signer.signed_url("DELETE", f"{FIXTURE_URL}/5?force=true")
        assert signed.startswith(f"{FIXTURE_URL}/5?force=true&oauth_consumer_key=")

    def test_authorization_header(self, signer: OAuthSigner) -> None:
        header = signer.authorization_header("GET", FIXTURE_URL)
        assert header.startswith('OAuth oauth_consumer_key="ck_test123", oauth_nonce="abcDEF123"')
        assert 'oauth_signature_method="HMAC-SHA1"' in header

    def test_repr_hides_secret(self, signer: OAuthSigner) -> None:
        assert FIXTURE_SECRET not in repr(signer)
        assert FIXTURE_KEY in repr(signer)


class TestNonceAndClock:
    """Tests for the injected strategies."""

    def test_secure_nonce_is_alphanumeric(self) -> None:
        for _ in range(50):
            nonce = SecureNonceSource().nonce()
            assert nonce.isalnum()
            assert 0 < len(nonce) <= 22

    def test_secure_nonce_strips_base64_symbols(self) -> None:
        raw = bytes([0xFB, 0xEF, 0xBE]) * 5 + b"\x00"
        calls: list[int] = []

        def token_bytes(n: int) -> bytes:
            calls.append(n)
            return raw

        nonce = SecureNonceSource(token_bytes=token_bytes).nonce()
        expected = re.sub(r"[^a-zA-Z0-9]", "", base64.b64encode(raw).decode())

        assert calls == [16]
        assert nonce == expected
        assert nonce == "AA"

    def test_fixed_nonce_rejects_empty(self) -> None:
        with pytest.raises(ValueError):
            FixedNonce("")

    def test_system_clock_whole_seconds(self) -> None:
        with patch("storeqa.oauth.sources.time.time", return_value=1700000000.75):
            assert SystemClock().timestamp() == 1700000000
