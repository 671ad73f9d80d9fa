from __future__ import annotations

import logging


def configure_logging(level: str = "INFO") -> None:
    """
    Set the level of the ``jwks_resolver`` package logger.

    Notes:
    - Plain stdlib logging; the embedding application owns handlers and formatting.
    - Child loggers (``jwks_resolver.client`` etc.) inherit this level.
    """

    normalized = level.upper()
    logging.getLogger("jwks_resolver").setLevel(normalized)
    logging.getLogger("jwks_resolver").propagate = True
