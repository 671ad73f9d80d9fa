"""
Join concurrent fetches for the same URI into one network call.

The first thread to miss becomes the leader: it registers a ``Future``,
runs the fetch outside the lock and publishes the outcome. Threads that
arrive meanwhile block on the same ``Future`` and see the same result or
the same exception.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InflightRegistry(Generic[T]):
    def __init__(self) -> None:
        self._pending: dict[str, Future[T]] = {}
        self._lock = threading.Lock()

    def in_flight(self, key: str) -> bool:
        with self._lock:
            return key in self._pending

    def run(
        self,
        key: str,
        fn: Callable[[], T],
        *,
        admit: Callable[[], None] | None = None,
    ) -> T:
        """
        Run ``fn`` once for ``key`` no matter how many threads ask at once.

        ``admit`` is called only by a would-be leader, under the registry lock,
        before the fetch is registered; if it raises, nothing is registered and
        the exception propagates to that caller alone.
        """
        with self._lock:
            future = self._pending.get(key)
            leader = future is None
            if leader:
                if admit is not None:
                    admit()
                future = Future()
                self._pending[key] = future

        if not leader:
            logger.debug("Joining in-flight JWKS fetch key=%s", key)
            return future.result()

        try:
            result = fn()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._pending.pop(key, None)
