"""Cooperative cancellation for blocking calls."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from deploy_client.core.exceptions import DeadlineExceeded, OperationCancelled


class CallContext:
    """Cancellation token with an optional deadline.

    A context may be shared with another thread which calls ``cancel()``;
    any ``sleep()`` in progress wakes up immediately.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._clock = clock
        self._cancelled = threading.Event()
        self._deadline: Optional[float] = clock() + timeout if timeout is not None else None

    @classmethod
    def background(cls) -> "CallContext":
        """A context that is never cancelled and has no deadline."""
        return cls()

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def cancel(self) -> None:
        self._cancelled.set()

    def cancellation_error(self) -> OperationCancelled:
        if self.cancelled:
            return OperationCancelled()
        return DeadlineExceeded()

    def raise_if_done(self) -> None:
        if self.done:
            raise self.cancellation_error()

    def sleep(self, seconds: float) -> bool:
        """Wait up to ``seconds``.

        Returns False if the context finished before the full wait elapsed.
        """
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._cancelled.wait(remaining)
            return False
        return not self._cancelled.wait(seconds)
