"""
Bounded, TTL-aware kid -> SigningKey store.

Eviction is LRU by entry count; expiry is checked lazily on read, so there
is no background sweep. Either bound can be switched off.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable, Hashable, Iterable

from cachetools import Cache, LRUCache, TTLCache

from .keys import SigningKey

logger = logging.getLogger(__name__)


class KeyCache:
    """
    Thread-safe wrapper around a ``cachetools`` LRU/TTL cache.

    A disabled cache (``enabled=False``) always misses and stores nothing.
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        max_entries: int | None = None,
        max_age_seconds: float | None = None,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._enabled = enabled
        maxsize = math.inf if max_entries is None else max_entries
        self._store: Cache
        if max_age_seconds is None:
            self._store = LRUCache(maxsize=maxsize)
        else:
            self._store = TTLCache(maxsize=maxsize, ttl=max_age_seconds, timer=timer)
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def __len__(self) -> int:
        with self._lock:
            if isinstance(self._store, TTLCache):
                self._store.expire()
            return len(self._store)

    def get(self, kid: Hashable) -> SigningKey | None:
        if not self._enabled:
            return None
        with self._lock:
            # TTLCache.get treats expired entries as absent and refreshes LRU order on hit.
            return self._store.get(kid)

    def put(self, kid: Hashable, key: SigningKey) -> None:
        if not self._enabled:
            return
        with self._lock:
            self._store[kid] = key

    def populate(self, keys: Iterable[SigningKey]) -> None:
        """Store every key that carries a kid; keys without one are skipped."""
        if not self._enabled:
            return
        with self._lock:
            for key in keys:
                if key.kid is not None:
                    self._store[key.kid] = key

    def get_or_fetch(self, kid: str, fetch_fn: Callable[[], list[SigningKey]]) -> SigningKey | None:
        """
        Return the cached key for ``kid``, fetching the whole set on a miss.

        A successful fetch populates every kid it returns, with ``kid`` itself
        written last so it is the most recently used entry. Returns None when
        the fetched set still has no such kid.
        """
        cached = self.get(kid)
        if cached is not None:
            logger.debug("JWKS cache hit kid=%s", kid)
            return cached

        keys = fetch_fn()
        wanted = next((k for k in keys if k.kid == kid), None)
        self.populate(k for k in keys if k.kid != kid)
        if wanted is not None:
            self.put(kid, wanted)
        return wanted

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
