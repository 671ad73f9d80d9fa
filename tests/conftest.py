"""
Pytest fixtures for the test suite.

Keys and certificates are generated with ``cryptography``; the JWKS endpoint
is faked by patching ``requests.get`` inside ``jwks_resolver.fetcher``, so no
test touches the network.
"""
from __future__ import annotations

import base64
import datetime
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from jwt.algorithms import RSAAlgorithm

JWKS_URI = "http://localhost/.well-known/jwks.json"


def make_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def make_certificate(private_key: rsa.RSAPrivateKey, common_name: str = "jwks-test") -> x509.Certificate:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(private_key, hashes.SHA256())
    )


def x5c_value(cert: x509.Certificate) -> str:
    return base64.b64encode(cert.public_bytes(serialization.Encoding.DER)).decode("ascii")


def rsa_jwk(private_key: rsa.RSAPrivateKey, kid: str | None = None, **extra: Any) -> dict[str, Any]:
    """Public JWK (n/e form) for ``private_key``."""
    jwk = RSAAlgorithm.to_jwk(private_key.public_key(), as_dict=True)
    if kid is not None:
        jwk["kid"] = kid
    jwk.update(extra)
    return jwk


def cert_jwk(private_key: rsa.RSAPrivateKey, kid: str | None = None, **extra: Any) -> dict[str, Any]:
    """Public JWK (x5c form) for ``private_key``."""
    jwk: dict[str, Any] = {"kty": "RSA", "use": "sig", "x5c": [x5c_value(make_certificate(private_key))]}
    if kid is not None:
        jwk["kid"] = kid
    jwk.update(extra)
    return jwk


def make_response(body: Any, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = body
    return resp


class FakeJwksEndpoint:
    """Wraps the patched ``requests.get`` with helpers to serve key sets."""

    def __init__(self, mock_get: MagicMock) -> None:
        self.mock_get = mock_get

    def serve(self, keys: list[dict[str, Any]], status_code: int = 200) -> None:
        self.mock_get.side_effect = None
        self.mock_get.return_value = make_response({"keys": keys}, status_code)

    def serve_sequence(self, *key_sets: list[dict[str, Any]]) -> None:
        """Serve a different key set on each successive fetch."""
        self.mock_get.side_effect = [make_response({"keys": keys}) for keys in key_sets]

    @property
    def call_count(self) -> int:
        return self.mock_get.call_count


@pytest.fixture(scope="session")
def private_key() -> rsa.RSAPrivateKey:
    return make_private_key()


@pytest.fixture(scope="session")
def other_private_key() -> rsa.RSAPrivateKey:
    return make_private_key()


@pytest.fixture
def jwks_endpoint():
    with patch("jwks_resolver.fetcher.requests.get") as mock_get:
        yield FakeJwksEndpoint(mock_get)


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
