"""Client options: validation plus a YAML loader."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import ArgumentError

DEFAULT_CACHE_MAX_ENTRIES = 5
DEFAULT_CACHE_MAX_AGE_MS = 10 * 60 * 1000
DEFAULT_REQUESTS_PER_MINUTE = 10
DEFAULT_REQUEST_TIMEOUT_MS = 30 * 1000


class ClientOptions(BaseModel):
    """
    Immutable configuration for one ``JwksClient``.

    Durations are milliseconds. Both snake_case names and the camelCase
    aliases (``jwksUri``, ``cacheMaxAge``...) are accepted.
    ``cache_max_entries=None`` means unbounded; ``cache_max_age=None`` means
    entries never expire.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    jwks_uri: str
    cache: bool = True
    cache_max_entries: int | None = Field(default=DEFAULT_CACHE_MAX_ENTRIES, ge=1)
    cache_max_age: int | None = Field(default=DEFAULT_CACHE_MAX_AGE_MS, gt=0)
    rate_limit: bool = False
    jwks_requests_per_minute: int = Field(default=DEFAULT_REQUESTS_PER_MINUTE, ge=1)
    request_timeout: int = Field(default=DEFAULT_REQUEST_TIMEOUT_MS, gt=0)
    request_headers: dict[str, str] = Field(default_factory=dict)
    proxy: str | None = None
    handle_signing_key_error: Callable[..., Any] | None = None

    @field_validator("jwks_uri")
    @classmethod
    def _jwks_uri_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("jwksUri must be a non-empty string")
        return value

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout / 1000.0

    @property
    def cache_max_age_seconds(self) -> float | None:
        return None if self.cache_max_age is None else self.cache_max_age / 1000.0

    @classmethod
    def coerce(cls, options: ClientOptions | Mapping[str, Any] | None) -> ClientOptions:
        """Accept a ready model or a plain mapping; anything unusable is an ``ArgumentError``."""
        if options is None:
            raise ArgumentError("An options object must be provided when initializing the JWKS client")
        if isinstance(options, ClientOptions):
            return options
        if not isinstance(options, Mapping):
            raise ArgumentError(f"Options must be a mapping, got {type(options).__name__}")
        try:
            return cls.model_validate(dict(options))
        except ValidationError as exc:
            raise ArgumentError(_describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "options"
        parts.append(f"{loc}: {err.get('msg')}")
    return "Invalid JWKS client options: " + "; ".join(parts)


def load_client_options(path: Path) -> ClientOptions:
    """
    Load options from a YAML file.

    Expected shape:

        jwks:
          jwksUri: https://issuer.example.com/.well-known/jwks.json
          cacheMaxEntries: 5
          rateLimit: true
          jwksRequestsPerMinute: 10
    """
    try:
        raw_text = path.read_text(encoding="utf-8")
        raw: dict[str, Any] = yaml.safe_load(raw_text) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ArgumentError(f"Cannot read JWKS config {path}: {exc}") from exc

    if not isinstance(raw, dict) or "jwks" not in raw:
        raise ArgumentError(f"Missing top-level 'jwks' key in config: {path}")

    return ClientOptions.coerce(raw["jwks"])
