"""Bounded constant-interval retry."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple, Type, TypeVar

import structlog

from deploy_client.core.context import CallContext
from deploy_client.core.exceptions import RateLimitExceeded, RetryExhaustedError, TransportError


logger = structlog.get_logger()

T = TypeVar("T")

RETRYABLE_ERRORS: Tuple[Type[Exception], ...] = (TransportError, RateLimitExceeded)


@dataclass
class RetryState:
    """Attempt bookkeeping for one retried call."""

    max_attempts: int
    attempts: int = 0
    started_at: float = field(default_factory=time.monotonic)
    last_error: Optional[Exception] = None

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.max_attempts

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


class RetryPolicy:
    """Retry a call on transient errors with a fixed wait between attempts.

    Only exceptions in ``retry_on`` are retried. Anything the call returns
    ends the loop, as does any other exception, which propagates unchanged.
    The context is checked before every attempt and after every wait.
    """

    def __init__(
        self,
        interval: float,
        max_attempts: int,
        *,
        retry_on: Tuple[Type[Exception], ...] = RETRYABLE_ERRORS,
    ):
        if interval < 0:
            raise ValueError("interval must not be negative")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.interval = interval
        self.max_attempts = max_attempts
        self.retry_on = retry_on

    def call(
        self,
        ctx: CallContext,
        fn: Callable[..., T],
        *args,
        operation: Optional[str] = None,
    ) -> T:
        """Run ``fn(ctx, *args)`` until it returns or the budget is spent.

        Raises:
            RetryExhaustedError: If every attempt raised a retryable error
            OperationCancelled: If the context finished first
        """
        state = RetryState(max_attempts=self.max_attempts)

        while not state.exhausted:
            if ctx.done:
                raise ctx.cancellation_error() from state.last_error

            state.attempts += 1
            try:
                return fn(ctx, *args)
            except self.retry_on as e:
                state.last_error = e
                logger.warning(
                    "Call attempt failed",
                    operation=operation,
                    attempt=state.attempts,
                    max_attempts=self.max_attempts,
                    error=str(e),
                )

            if state.exhausted:
                break
            if not ctx.sleep(self.interval):
                raise ctx.cancellation_error() from state.last_error

        logger.error(
            "Retry budget exhausted",
            operation=operation,
            attempts=state.attempts,
            elapsed_sec=round(state.elapsed, 3),
            error=str(state.last_error),
        )
        raise RetryExhaustedError(state.attempts, state.last_error, operation=operation) from state.last_error
