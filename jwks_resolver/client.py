"""
JWKS client: cache first, then a rate-limited, de-duplicated fetch.

Background for newcomers:
    Identity providers publish their current public signing keys at a JWKS
    URL and rotate them from time to time. A token names the key that signed
    it with the ``kid`` header. Resolving a kid therefore means: look in our
    cache; on a miss, download the whole key set (once, even if many requests
    miss at the same moment), cache every key in it, and pick the one asked
    for.

    Because the kid comes from an *unverified* token, an attacker can send
    random kids to force refetches. The rate limiter caps how often a miss
    may reach the provider.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import jwt

from .cache import KeyCache
from .config import ClientOptions
from .errors import InvalidKeyError, InvalidTokenError, RateLimitError, SigningKeyNotFoundError
from .fetcher import fetch_jwks
from .inflight import InflightRegistry
from .keys import SigningKey, extract_key, is_signing_key
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

NO_KID_MESSAGE = "secret or public key must be provided"


class _NoKid:
    """Cache slot for the key resolved for tokens that carry no kid."""

    def __repr__(self) -> str:
        return "<no kid>"


_NO_KID = _NoKid()


class JwksClient:
    """
    Resolves signing keys from one JWKS URI.

    Build one per URI and share it; all state (cache, rate limiter, in-flight
    fetches) is owned by the instance and safe to use from many threads.
    """

    def __init__(
        self,
        options: ClientOptions | Mapping[str, Any] | None,
        *,
        cache: KeyCache | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self._options = ClientOptions.coerce(options)
        self._cache = cache if cache is not None else KeyCache(
            enabled=self._options.cache,
            max_entries=self._options.cache_max_entries,
            max_age_seconds=self._options.cache_max_age_seconds,
        )
        self._rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter(
            self._options.jwks_requests_per_minute,
            enabled=self._options.rate_limit,
        )
        self._inflight: InflightRegistry[list[SigningKey]] = InflightRegistry()

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def cache(self) -> KeyCache:
        return self._cache

    # ---- Fetch path ---------------------------------------------------------------------

    def _admit(self) -> None:
        if not self._rate_limiter.allow():
            raise RateLimitError("Too many requests to the JWKS endpoint")

    def _load_keys(self) -> list[SigningKey]:
        document = fetch_jwks(
            self._options.jwks_uri,
            self._options.request_timeout,
            headers=self._options.request_headers,
            proxy=self._options.proxy,
        )

        keys: list[SigningKey] = []
        for entry in document["keys"]:
            if not isinstance(entry, Mapping) or not is_signing_key(entry):
                logger.debug("Skipping non-signing JWK entry")
                continue
            try:
                keys.append(extract_key(entry))
            except InvalidKeyError as e:
                logger.info("Skipping unusable JWK entry: %s", e.message)
        logger.info("JWKS fetched uri=%s usable_keys=%s", self._options.jwks_uri, len(keys))
        return keys

    def _fetch_keys(self) -> list[SigningKey]:
        """Fetch through the in-flight registry; only a leader spends rate-limit budget."""
        return self._inflight.run(self._options.jwks_uri, self._load_keys, admit=self._admit)

    # ---- Public API ---------------------------------------------------------------------

    def get_signing_keys(self) -> list[SigningKey]:
        """Fetch the key set and return its usable keys in document order."""
        keys = self._fetch_keys()
        self._cache.populate(keys)
        return keys

    def get_signing_key(self, kid: str | None = None) -> SigningKey:
        """
        Return the key for ``kid``.

        Without a kid the key set must contain exactly one usable key,
        otherwise the choice would be a guess.

        Raises SigningKeyNotFoundError, RateLimitError, JwksFetchError.
        """
        if kid is None:
            return self._get_only_key()

        key = self._cache.get_or_fetch(kid, self._fetch_keys)
        if key is None:
            logger.info("No signing key matches kid=%s", kid)
            raise SigningKeyNotFoundError(f"Unable to find a signing key that matches '{kid}'")
        return key

    def _get_only_key(self) -> SigningKey:
        cached = self._cache.get(_NO_KID)
        if cached is not None:
            return cached

        keys = self.get_signing_keys()
        if len(keys) != 1:
            logger.info("Token has no kid and JWKS has %s usable keys", len(keys))
            raise SigningKeyNotFoundError(NO_KID_MESSAGE)
        self._cache.put(_NO_KID, keys[0])
        return keys[0]

    def get_signing_key_from_jwt(self, token: str) -> SigningKey:
        """Resolve the key named by a raw token's (unverified) header."""
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token: header cannot be decoded") from e

        kid = header.get("kid")
        if kid is not None and not isinstance(kid, str):
            raise InvalidTokenError("Invalid token: kid must be a string")
        return self.get_signing_key(kid)

    def close(self) -> None:
        """Drop cached keys. The instance should not be used afterwards."""
        self._cache.clear()
