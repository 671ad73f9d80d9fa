"""Single-attempt retrieval of a JWKS document."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from .errors import JwksFetchError

logger = logging.getLogger(__name__)


def _http_error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Http Error {resp.status_code}"


def fetch_jwks(
    uri: str,
    timeout_ms: int,
    headers: Mapping[str, str] | None = None,
    proxy: str | None = None,
) -> dict[str, Any]:
    """
    GET the key set at ``uri`` and return the parsed ``{"keys": [...]}`` document.

    One attempt, no retries. Every failure (timeout, connection error,
    non-2xx, bad JSON, missing ``keys``) becomes ``JwksFetchError``.
    """
    proxies = {"http": proxy, "https": proxy} if proxy else None
    logger.info("Fetching JWKS uri=%s", uri)

    try:
        resp = requests.get(
            uri,
            headers=dict(headers or {}),
            proxies=proxies,
            timeout=timeout_ms / 1000.0,
        )
    except requests.Timeout as e:
        logger.warning("JWKS request timed out uri=%s", uri)
        raise JwksFetchError(f"Timed out fetching JWKS after {timeout_ms}ms") from e
    except requests.RequestException as e:
        logger.warning("JWKS request failed uri=%s error=%s", uri, type(e).__name__)
        raise JwksFetchError(f"Failed to fetch JWKS: {type(e).__name__}") from e

    if not 200 <= resp.status_code < 300:
        logger.warning("JWKS endpoint returned status=%s uri=%s", resp.status_code, uri)
        raise JwksFetchError(_http_error_message(resp), status_code=resp.status_code)

    try:
        body = resp.json()
    except ValueError as e:
        raise JwksFetchError("JWKS response is not valid JSON", status_code=resp.status_code) from e

    if not isinstance(body, dict) or not isinstance(body.get("keys"), list):
        raise JwksFetchError("JWKS response has no 'keys' list", status_code=resp.status_code)

    return body
