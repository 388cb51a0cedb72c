"""Endpoint middlewares for rate limiting, logging and metrics.

A middleware takes a ``CallEndpoint`` and returns another one with the same
contract. ``chain(a, b, c)`` yields ``a(b(c(endpoint)))``: the first
middleware is outermost and sees each call first.
"""

from __future__ import annotations

import time
from typing import Any, Callable

import structlog
from prometheus_client import Counter, Histogram

from deploy_client.core.context import CallContext
from deploy_client.core.exceptions import DeployClientError, RateLimitExceeded
from deploy_client.resilience.ratelimit import TokenBucketLimiter
from deploy_client.transport.endpoint import CallEndpoint


logger = structlog.get_logger()

Middleware = Callable[[CallEndpoint], CallEndpoint]

# Prometheus metrics
CALL_COUNT = Counter(
    "deploy_client_calls_total",
    "Total remote calls issued by the deployment client",
    ["operation", "result"],
)

CALL_DURATION = Histogram(
    "deploy_client_call_duration_seconds",
    "Remote call duration",
    ["operation"],
)


class RateLimitedEndpoint(CallEndpoint):
    """Reject calls the shared limiter does not admit."""

    def __init__(self, limiter: TokenBucketLimiter, wrapped: CallEndpoint):
        self.limiter = limiter
        self.wrapped = wrapped
        self.operation = wrapped.operation

    def invoke(self, ctx: CallContext, request: Any) -> Any:
        if not self.limiter.allow():
            logger.warning("Outbound call rejected by rate limiter", operation=self.operation)
            raise RateLimitExceeded(operation=self.operation)
        return self.wrapped.invoke(ctx, request)


class InstrumentedEndpoint(CallEndpoint):
    """Log and time every call that reaches the wrapped endpoint."""

    def __init__(self, wrapped: CallEndpoint, operation: str):
        self.wrapped = wrapped
        self.operation = operation

    def invoke(self, ctx: CallContext, request: Any) -> Any:
        start = time.perf_counter()
        try:
            response = self.wrapped.invoke(ctx, request)
        except DeployClientError as e:
            CALL_COUNT.labels(operation=self.operation, result=e.code or "error").inc()
            logger.info(
                "Remote call failed",
                operation=self.operation,
                error=str(e),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise
        finally:
            CALL_DURATION.labels(operation=self.operation).observe(time.perf_counter() - start)

        CALL_COUNT.labels(operation=self.operation, result="response").inc()
        logger.info(
            "Remote call completed",
            operation=self.operation,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response


def rate_limit(limiter: TokenBucketLimiter) -> Middleware:
    """Middleware admitting calls through ``limiter``."""

    def middleware(endpoint: CallEndpoint) -> CallEndpoint:
        return RateLimitedEndpoint(limiter, endpoint)

    return middleware


def instrument(operation: str) -> Middleware:
    """Middleware adding logs and metrics labelled with ``operation``."""

    def middleware(endpoint: CallEndpoint) -> CallEndpoint:
        return InstrumentedEndpoint(endpoint, operation)

    return middleware


def chain(outer: Middleware, *others: Middleware) -> Middleware:
    """Compose middlewares, outermost first."""

    def middleware(endpoint: CallEndpoint) -> CallEndpoint:
        for inner in reversed(others):
            endpoint = inner(endpoint)
        return outer(endpoint)

    return middleware
