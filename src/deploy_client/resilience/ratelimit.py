"""Token bucket admission control for outbound calls."""

from __future__ import annotations

import threading
import time
from typing import Callable


class TokenBucketLimiter:
    """Non-blocking token bucket.

    ``rate`` tokens are added every ``per`` seconds, up to ``burst`` tokens.
    The bucket starts full. ``allow()`` never waits: it takes a token and
    returns True, or returns False when the bucket is empty.

    One instance is shared by every endpoint of a client and by every
    attempt of a retried call, so all token accounting happens under a lock.

    Example:
        >>> limiter = TokenBucketLimiter(rate=1.0, burst=100)
        >>> limiter.allow()
        True
    """

    def __init__(
        self,
        rate: float,
        burst: int,
        *,
        per: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if rate <= 0:
            raise ValueError("rate must be greater than 0")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        if per <= 0:
            raise ValueError("per must be greater than 0")

        self.rate = rate
        self.burst = burst
        self.per = per
        self._clock = clock

        self._tokens = float(burst)
        self._last_refill = clock()
        self._lock = threading.Lock()

    @property
    def refill_rate(self) -> float:
        """Tokens added per second."""
        return self.rate / self.per

    def _refill(self, now: float) -> None:
        elapsed = now - self._last_refill
        if elapsed > 0:
            self._tokens = min(float(self.burst), self._tokens + elapsed * self.refill_rate)
            self._last_refill = now

    def allow(self) -> bool:
        with self._lock:
            self._refill(self._clock())
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return True
            return False

    @property
    def tokens(self) -> float:
        """Tokens currently available, after refill."""
        with self._lock:
            self._refill(self._clock())
            return self._tokens
