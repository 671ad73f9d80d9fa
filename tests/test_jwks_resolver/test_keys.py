"""Tests for JWK -> SigningKey extraction."""

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm

from conftest import cert_jwk, make_certificate, make_private_key, rsa_jwk, x5c_value
from jwks_resolver.errors import ErrorKind, InvalidKeyError
from jwks_resolver.keys import extract_key, is_signing_key


def test_extract_from_rsa_params(private_key):
    key = extract_key(rsa_jwk(private_key, kid="123", alg="RS256"))
    assert key.kid == "123"
    assert key.kty == "RSA"
    assert key.alg == "RS256"
    assert key.certificate is None
    assert key.public_key.public_numbers() == private_key.public_key().public_numbers()


def test_extract_from_x5c_uses_leaf_only(private_key, other_private_key):
    """Only the first certificate counts; the rest of the chain is ignored."""
    leaf = make_certificate(private_key, "leaf")
    issuer = make_certificate(other_private_key, "issuer")
    jwk = {"kid": "abc", "kty": "RSA", "x5c": [x5c_value(leaf), x5c_value(issuer)]}

    key = extract_key(jwk)

    assert key.public_key.public_numbers() == private_key.public_key().public_numbers()
    assert key.certificate.startswith("-----BEGIN CERTIFICATE-----")


def test_x5c_preferred_over_rsa_params(private_key, other_private_key):
    jwk = cert_jwk(private_key, kid="k")
    jwk.update({"n": rsa_jwk(other_private_key)["n"], "e": "AQAB"})
    key = extract_key(jwk)
    assert key.public_key.public_numbers() == private_key.public_key().public_numbers()


def test_empty_x5c_falls_back_to_rsa_params(private_key):
    jwk = rsa_jwk(private_key, kid="k")
    jwk["x5c"] = []
    key = extract_key(jwk)
    assert key.public_key.public_numbers() == private_key.public_key().public_numbers()


def test_private_parameters_never_yield_private_key():
    priv = make_private_key()
    full = RSAAlgorithm.to_jwk(priv, as_dict=True)
    assert "d" in full
    key = extract_key(full)
    assert isinstance(key.public_key, rsa.RSAPublicKey)


def test_missing_material_raises():
    with pytest.raises(InvalidKeyError) as exc_info:
        extract_key({"kid": "ec-1", "kty": "EC", "crv": "P-256", "x": "abc", "y": "def"})
    assert exc_info.value.kind is ErrorKind.INVALID_KEY
    assert "ec-1" in exc_info.value.message


def test_unreadable_certificate_raises():
    with pytest.raises(InvalidKeyError):
        extract_key({"kid": "bad", "x5c": ["not base64!!"]})
    with pytest.raises(InvalidKeyError):
        extract_key({"kid": "bad", "x5c": ["aGVsbG8="]})  # valid base64, not DER


def test_invalid_rsa_params_raise():
    with pytest.raises(InvalidKeyError):
        extract_key({"kid": "bad", "kty": "RSA", "n": "AQ", "e": "AQAB"})


def test_extraction_is_deterministic(private_key):
    jwk = cert_jwk(private_key, kid="same")
    assert extract_key(jwk).get_public_key() == extract_key(jwk).get_public_key()


def test_get_public_key_is_spki_pem(private_key):
    pem = extract_key(cert_jwk(private_key, kid="k")).get_public_key()
    assert pem.startswith("-----BEGIN PUBLIC KEY-----")


def test_is_signing_key():
    assert is_signing_key({"kid": "a"})
    assert is_signing_key({"kid": "a", "use": "sig"})
    assert not is_signing_key({"kid": "a", "use": "enc"})
