"""Admission control and retry for outbound calls."""

from .ratelimit import TokenBucketLimiter
from .retry import RETRYABLE_ERRORS, RetryPolicy, RetryState

__all__ = [
    "TokenBucketLimiter",
    "RetryPolicy",
    "RetryState",
    "RETRYABLE_ERRORS",
]
