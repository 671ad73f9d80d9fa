from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import (
    DEFAULT_CACHE_MAX_AGE_MS,
    DEFAULT_CACHE_MAX_ENTRIES,
    DEFAULT_REQUEST_TIMEOUT_MS,
    DEFAULT_REQUESTS_PER_MINUTE,
    ClientOptions,
    load_client_options,
)
from .errors import ArgumentError
from .logging_config import configure_logging
from .resolver import SecretResolver


class ResolverSettings(BaseSettings):
    """
    Process-level settings read from the environment.

    Notes:
    - Every field maps to ``JWKS_RESOLVER_<FIELD>`` (e.g. ``JWKS_RESOLVER_JWKS_URI``).
    - If ``config_path`` is set, the YAML file wins over the individual variables.
    - The override hook cannot come from the environment; pass it to ``to_options``.
    """

    model_config = SettingsConfigDict(env_prefix="JWKS_RESOLVER_", extra="ignore")

    jwks_uri: str | None = None
    config_path: str | None = None
    cache: bool = True
    cache_max_entries: int | None = DEFAULT_CACHE_MAX_ENTRIES
    cache_max_age: int | None = DEFAULT_CACHE_MAX_AGE_MS
    rate_limit: bool = False
    jwks_requests_per_minute: int = DEFAULT_REQUESTS_PER_MINUTE
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT_MS
    proxy: str | None = None
    log_level: str = "INFO"

    def to_options(self, handle_signing_key_error=None) -> ClientOptions:
        if self.config_path:
            options = load_client_options(Path(self.config_path))
            if handle_signing_key_error is not None:
                options = options.model_copy(update={"handle_signing_key_error": handle_signing_key_error})
            return options

        if not self.jwks_uri:
            raise ArgumentError("JWKS_RESOLVER_JWKS_URI or JWKS_RESOLVER_CONFIG_PATH must be set")

        return ClientOptions.coerce(
            {
                "jwks_uri": self.jwks_uri,
                "cache": self.cache,
                "cache_max_entries": self.cache_max_entries,
                "cache_max_age": self.cache_max_age,
                "rate_limit": self.rate_limit,
                "jwks_requests_per_minute": self.jwks_requests_per_minute,
                "request_timeout": self.request_timeout,
                "proxy": self.proxy,
                "handle_signing_key_error": handle_signing_key_error,
            }
        )


@lru_cache
def get_settings() -> ResolverSettings:
    return ResolverSettings()


def resolver_from_env(handle_signing_key_error=None) -> SecretResolver:
    """
    Build a ``SecretResolver`` from process settings, applying ``log_level`` first.

    This is the startup path for applications configured through the environment.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    return SecretResolver(settings.to_options(handle_signing_key_error=handle_signing_key_error))
