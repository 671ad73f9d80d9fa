"""
Resolve JWT verification keys from an identity provider's JWKS endpoint.

This package does not verify tokens. It hands the right public key to
whatever does: build a ``SecretResolver`` (or ``jwks_secret(options)``) and
plug it into the verification middleware, or use ``JwksClient`` directly.
"""

from .client import JwksClient
from .config import ClientOptions, load_client_options
from .errors import (
    ArgumentError,
    ErrorKind,
    InvalidKeyError,
    InvalidTokenError,
    JwksFetchError,
    JwksResolverError,
    RateLimitError,
    SigningKeyNotFoundError,
)
from .keys import SigningKey, extract_key
from .resolver import SecretResolver, jwks_secret
from .settings import ResolverSettings, get_settings, resolver_from_env

__all__ = [
    "ArgumentError",
    "ClientOptions",
    "ErrorKind",
    "InvalidKeyError",
    "InvalidTokenError",
    "JwksClient",
    "JwksFetchError",
    "JwksResolverError",
    "RateLimitError",
    "ResolverSettings",
    "SecretResolver",
    "SigningKey",
    "SigningKeyNotFoundError",
    "extract_key",
    "get_settings",
    "jwks_secret",
    "load_client_options",
    "resolver_from_env",
]
