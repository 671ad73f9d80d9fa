from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0


class RateLimiter:
    """
    Sliding-window budget for JWKS fetches.

    Keeps the timestamps of the fetches it allowed in the last minute. A new
    fetch is allowed only while fewer than ``requests_per_minute`` of them
    remain in the window. Rejections are free: they record nothing.
    """

    def __init__(
        self,
        requests_per_minute: int,
        *,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limit = requests_per_minute
        self._enabled = enabled
        self._clock = clock
        self._allowed_at: deque[float] = deque()
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def allow(self) -> bool:
        if not self._enabled:
            return True
        with self._lock:
            now = self._clock()
            while self._allowed_at and now - self._allowed_at[0] >= WINDOW_SECONDS:
                self._allowed_at.popleft()
            if len(self._allowed_at) >= self._limit:
                logger.warning("JWKS fetch rejected: %s fetches in the last minute", len(self._allowed_at))
                return False
            self._allowed_at.append(now)
            return True
