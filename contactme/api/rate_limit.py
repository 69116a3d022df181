"""In-memory rate limiting for contact form submissions."""

import time
from collections import deque
from typing import Callable


class SubmissionRateLimiter:
    """Sliding-window limit on submissions per client key (usually the IP).

    State lives in process memory, so limits are per worker process. Keys
    whose hits have all expired are dropped, at most once per window for
    keys that are not seen again.

    Attributes:
        max_requests: Submissions allowed per window
        window_seconds: Window length in seconds
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: int = 900,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def _prune(self, key: str, now: float) -> deque[float] | None:
        """Drop expired hits for key; forget the key once none are left."""
        hits = self._hits.get(key)
        if hits is None:
            return None
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()
        if not hits:
            del self._hits[key]
            return None
        return hits

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self.window_seconds:
            return
        for key in list(self._hits):
            self._prune(key, now)
        self._last_sweep = now

    def is_allowed(self, key: str) -> bool:
        """Record a submission attempt for key if it is within the limit.

        Args:
            key: Client identifier

        Returns:
            False when the key has used up its window
        """
        now = self._clock()
        self._sweep(now)

        hits = self._prune(key, now)
        if hits is None:
            hits = self._hits[key] = deque()

        if len(hits) >= self.max_requests:
            return False

        hits.append(now)
        return True

    def retry_after(self, key: str) -> int:
        """Seconds until key may submit again (0 if it may now)."""
        now = self._clock()
        hits = self._prune(key, now)
        if hits is None or len(hits) < self.max_requests:
            return 0
        return max(0, int(self.window_seconds - (now - hits[0])) + 1)

    @property
    def tracked_keys(self) -> int:
        """Number of client keys currently tracked."""
        return len(self._hits)

    def reset(self) -> None:
        self._hits.clear()
