"""
Bridge between a token-verification middleware and ``JwksClient``.

Background for newcomers:
    Verification middlewares ask for "the secret" of a token before they
    check its signature. For tokens signed by an identity provider that
    secret is a public key from the provider's JWKS. ``SecretResolver``
    answers that question and nothing more: it never checks signatures,
    expiry, audience or issuer.

    It refuses HMAC (``HS*``) and ``none`` tokens outright. A JWKS endpoint
    only publishes public keys, so handing out anything for a symmetric
    token could let a forged token verify against a public key used as an
    HMAC secret.

Two calling conventions are supported on top of one internal contract
(``resolve(header) -> SigningKey``):

* ``resolver(header, done)``: continuation style, ``done(error, key_pem)``.
* ``resolver.key_for_token(token)``: returns the PEM for ``jwt.decode``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import jwt

from .client import JwksClient
from .config import ClientOptions
from .errors import ArgumentError, InvalidTokenError, JwksResolverError
from .keys import SigningKey

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = frozenset({
    "RS256", "RS384", "RS512",
    "PS256", "PS384", "PS512",
    "ES256", "ES384", "ES512", "ES256K",
    "EdDSA",
})

Done = Callable[[Exception | None, str | None], Any]


class SecretResolver:
    """
    Resolves the verification key for an unverified token header.

    ``handle_signing_key_error`` (from the options) is called on failure as
    ``hook(error, complete)``; ``complete(err=None)`` finishes the request
    with ``err`` (or with no error and no key).
    """

    def __init__(
        self,
        options: ClientOptions | Mapping[str, Any] | None,
        *,
        client: JwksClient | None = None,
    ) -> None:
        if options is None:
            raise ArgumentError("An options object must be provided when initializing the secret resolver")
        self._options = ClientOptions.coerce(options)
        self._client = client if client is not None else JwksClient(self._options)

    @property
    def client(self) -> JwksClient:
        return self._client

    def resolve(self, header: Mapping[str, Any]) -> SigningKey:
        """Return the ``SigningKey`` for ``header`` or raise a ``JwksResolverError``."""
        if not isinstance(header, Mapping):
            raise InvalidTokenError("Invalid token: header is not an object")

        alg = header.get("alg")
        if not isinstance(alg, str) or alg not in SUPPORTED_ALGORITHMS:
            logger.info("Refusing key resolution for alg=%r", alg)
            raise InvalidTokenError(f"Invalid token: unsupported algorithm {alg!r}")

        kid = header.get("kid")
        if kid is not None and not isinstance(kid, str):
            raise InvalidTokenError("Invalid token: kid must be a string")

        return self._client.get_signing_key(kid)

    def __call__(self, header: Mapping[str, Any], done: Done) -> None:
        try:
            key = self.resolve(header)
        except JwksResolverError as err:
            self._fail(err, done)
            return
        done(None, key.get_public_key())

    def _fail(self, err: JwksResolverError, done: Done) -> None:
        hook = self._options.handle_signing_key_error
        if hook is None:
            done(err, None)
            return

        def complete(replacement: Exception | None = None) -> None:
            done(replacement, None)

        hook(err, complete)

    def key_for_token(self, token: str) -> str | None:
        """
        Return the PEM key for a raw token, for verifiers that take the key up front.

        With an override hook, the error the hook completes with is raised
        instead; completing with no error returns None. A hook that never
        completes leaves the original error in place.
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token: header cannot be decoded") from e

        try:
            return self.resolve(header).get_public_key()
        except JwksResolverError as err:
            outcome: list[Exception | None] = []
            self._fail(err, lambda e, _key: outcome.append(e))
            if not outcome:
                raise
            if outcome[0] is not None:
                raise outcome[0] from err
            return None


def jwks_secret(options: ClientOptions | Mapping[str, Any] | None) -> SecretResolver:
    """Build a ``SecretResolver``; usable directly as a ``(header, done)`` callback."""
    return SecretResolver(options)
