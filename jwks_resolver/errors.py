"""
Error kinds raised by the resolver.

Every failure the package surfaces is one of the subclasses below. Callers
should branch on ``err.kind`` (or the class), never on message text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    ARGUMENT = "argument"
    JWKS_FETCH = "jwks_fetch"
    RATE_LIMIT = "rate_limit"
    INVALID_KEY = "invalid_key"
    SIGNING_KEY_NOT_FOUND = "signing_key_not_found"
    INVALID_TOKEN = "invalid_token"


class JwksResolverError(Exception):
    """Base class. Do not put token contents in messages."""

    kind: ErrorKind
    code: str = "jwks_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ArgumentError(JwksResolverError):
    """Invalid or missing configuration at construction time."""

    kind = ErrorKind.ARGUMENT
    code = "argument_error"


class JwksFetchError(JwksResolverError):
    """Transport or parse failure while retrieving the key set."""

    kind = ErrorKind.JWKS_FETCH
    code = "jwks_fetch_error"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(JwksResolverError):
    kind = ErrorKind.RATE_LIMIT
    code = "rate_limit_error"


class InvalidKeyError(JwksResolverError):
    kind = ErrorKind.INVALID_KEY
    code = "invalid_key"


class SigningKeyNotFoundError(JwksResolverError):
    kind = ErrorKind.SIGNING_KEY_NOT_FOUND
    code = "signing_key_not_found"


class InvalidTokenError(JwksResolverError):
    """Token header cannot be used for asymmetric key resolution."""

    kind = ErrorKind.INVALID_TOKEN
    code = "invalid_token"
