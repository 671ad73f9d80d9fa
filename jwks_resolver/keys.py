"""
Turn one JWK entry from a key set into a usable verification key.

Background for newcomers:
    A JWKS entry publishes a public key in one of two shapes:

    * ``x5c``: an X.509 certificate chain (base64 DER, leaf first). The
      verification key is the leaf certificate's public key; the rest of the
      chain only describes who issued the leaf, so we ignore it.
    * ``n`` / ``e``: the raw RSA modulus and exponent (base64url).

    Anything else has no material we can verify with and is rejected with
    ``InvalidKeyError``.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from jwt.algorithms import RSAAlgorithm
from jwt.exceptions import InvalidKeyError as _JwtInvalidKeyError

from .errors import InvalidKeyError


@dataclass(frozen=True)
class SigningKey:
    """
    Verification key resolved from one JWK entry. Treat as read-only.
    """

    kid: str | None
    """Key id as published; None when the entry had none."""

    kty: str | None
    """Key type tag (``RSA``, ``EC``...)."""

    alg: str | None
    """Algorithm hint from the entry, if published."""

    public_key: Any
    """``cryptography`` public key object."""

    certificate: str | None = None
    """Leaf certificate PEM when the entry came from ``x5c``."""

    @property
    def key(self) -> Any:
        """Alias matching ``jwt.PyJWK.key``."""
        return self.public_key

    def get_public_key(self) -> str:
        """Return the SubjectPublicKeyInfo PEM, accepted by ``jwt.decode``."""
        pem = self.public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return pem.decode("ascii")


def is_signing_key(jwk: Mapping[str, Any]) -> bool:
    """Entries published for another purpose (``use: enc``) are never handed out."""
    use = jwk.get("use")
    return use is None or use == "sig"


def _describe(jwk: Mapping[str, Any]) -> str:
    kid = jwk.get("kid")
    return f"kid={kid!r}" if kid is not None else "entry without kid"


def _from_certificate(cert_b64: Any, jwk: Mapping[str, Any]) -> SigningKey:
    if not isinstance(cert_b64, str):
        raise InvalidKeyError(f"JWK {_describe(jwk)} has a non-string x5c certificate")
    try:
        der = base64.b64decode(cert_b64, validate=True)
        cert = x509.load_der_x509_certificate(der)
        public_key = cert.public_key()
    except (binascii.Error, ValueError) as exc:
        raise InvalidKeyError(f"JWK {_describe(jwk)} has an unreadable x5c certificate") from exc

    return SigningKey(
        kid=jwk.get("kid"),
        kty=jwk.get("kty"),
        alg=jwk.get("alg"),
        public_key=public_key,
        certificate=cert.public_bytes(serialization.Encoding.PEM).decode("ascii"),
    )


def _from_rsa_params(jwk: Mapping[str, Any]) -> SigningKey:
    # Only the public parameters; a published "d" must never turn into a private key.
    params = {"kty": "RSA", "n": jwk["n"], "e": jwk["e"]}
    try:
        public_key = RSAAlgorithm.from_jwk(params)
    except (_JwtInvalidKeyError, binascii.Error, ValueError, TypeError) as exc:
        raise InvalidKeyError(f"JWK {_describe(jwk)} has invalid RSA parameters") from exc

    return SigningKey(
        kid=jwk.get("kid"),
        kty=jwk.get("kty"),
        alg=jwk.get("alg"),
        public_key=public_key,
    )


def extract_key(jwk: Mapping[str, Any]) -> SigningKey:
    """
    Build a ``SigningKey`` from one JWK entry.

    Order of preference:
    1. ``x5c`` present and non-empty -> public key of the first certificate.
    2. ``n`` and ``e`` present -> RSA public key.
    3. otherwise -> ``InvalidKeyError``.
    """
    if not isinstance(jwk, Mapping):
        raise InvalidKeyError("JWK entry must be a JSON object")

    x5c = jwk.get("x5c")
    if isinstance(x5c, list) and x5c:
        return _from_certificate(x5c[0], jwk)

    if jwk.get("n") and jwk.get("e"):
        return _from_rsa_params(jwk)

    raise InvalidKeyError(f"JWK {_describe(jwk)} has no usable key material (x5c or n/e)")
