"""Tests for endpoint middleware composition."""

import pytest
from prometheus_client import REGISTRY

from deploy_client.core.context import CallContext
from deploy_client.core.exceptions import RateLimitExceeded, TransportError
from deploy_client.resilience.ratelimit import TokenBucketLimiter
from deploy_client.transport.endpoint import CallEndpoint
from deploy_client.transport.middleware import (
    InstrumentedEndpoint,
    RateLimitedEndpoint,
    chain,
    instrument,
    rate_limit,
)


class StubEndpoint(CallEndpoint):
    def __init__(self, response=None, error=None, operation="stub"):
        self.response = response
        self.error = error
        self.operation = operation
        self.requests = []

    def invoke(self, ctx, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


class TracingEndpoint(CallEndpoint):
    """Appends its name to a shared trace, then delegates."""

    def __init__(self, name, trace, wrapped):
        self.name = name
        self.trace = trace
        self.wrapped = wrapped
        self.operation = wrapped.operation

    def invoke(self, ctx, request):
        self.trace.append(self.name)
        return self.wrapped.invoke(ctx, request)


def tracing(name, trace):
    return lambda endpoint: TracingEndpoint(name, trace, endpoint)


def _sample(name, labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestRateLimitedEndpoint:

    def test_admitted_call_reaches_wrapped_endpoint(self, fake_clock):
        stub = StubEndpoint(response={"id": "d1"})
        endpoint = RateLimitedEndpoint(TokenBucketLimiter(1.0, 1, clock=fake_clock), stub)

        assert endpoint.invoke(CallContext(), "req") == {"id": "d1"}
        assert stub.requests == ["req"]

    def test_rejected_call_never_reaches_wrapped_endpoint(self, fake_clock):
        stub = StubEndpoint(response={"id": "d1"}, operation="create_deployment")
        endpoint = RateLimitedEndpoint(TokenBucketLimiter(1.0, 1, clock=fake_clock), stub)
        endpoint.invoke(CallContext(), "first")

        with pytest.raises(RateLimitExceeded) as exc_info:
            endpoint.invoke(CallContext(), "second")

        assert stub.requests == ["first"]
        assert exc_info.value.operation == "create_deployment"
        assert exc_info.value.code == "rate_limited"

    def test_limiter_is_shared_between_endpoints(self, fake_clock):
        limiter = TokenBucketLimiter(1.0, 2, clock=fake_clock)
        create = rate_limit(limiter)(StubEndpoint(response="c"))
        get = rate_limit(limiter)(StubEndpoint(response="g"))

        assert create(CallContext(), "a") == "c"
        assert get(CallContext(), "b") == "g"
        with pytest.raises(RateLimitExceeded):
            create(CallContext(), "c")


class TestChain:

    def test_first_middleware_is_outermost(self):
        trace = []
        endpoint = chain(tracing("a", trace), tracing("b", trace), tracing("c", trace))(StubEndpoint("ok"))

        assert endpoint.invoke(CallContext(), "req") == "ok"
        assert trace == ["a", "b", "c"]

    def test_single_middleware(self):
        trace = []
        chain(tracing("only", trace))(StubEndpoint("ok")).invoke(CallContext(), "req")
        assert trace == ["only"]

    def test_composition_is_associative(self):
        left_trace, right_trace = [], []
        left = chain(chain(tracing("a", left_trace), tracing("b", left_trace)), tracing("c", left_trace))
        right = chain(tracing("a", right_trace), chain(tracing("b", right_trace), tracing("c", right_trace)))

        left(StubEndpoint("ok")).invoke(CallContext(), "req")
        right(StubEndpoint("ok")).invoke(CallContext(), "req")

        assert left_trace == right_trace == ["a", "b", "c"]

    def test_rate_limit_outermost_short_circuits_inner_layers(self, fake_clock):
        trace = []
        limiter = TokenBucketLimiter(1.0, 1, clock=fake_clock)
        stub = StubEndpoint("ok")
        endpoint = chain(rate_limit(limiter), tracing("inner", trace))(stub)

        endpoint.invoke(CallContext(), "first")
        with pytest.raises(RateLimitExceeded):
            endpoint.invoke(CallContext(), "second")

        assert trace == ["inner"]
        assert stub.requests == ["first"]


class TestInstrumentedEndpoint:

    def test_counts_responses(self):
        labels = {"operation": "metrics_ok", "result": "response"}
        before = _sample("deploy_client_calls_total", labels)

        endpoint = instrument("metrics_ok")(StubEndpoint("ok"))
        assert endpoint.invoke(CallContext(), "req") == "ok"

        assert _sample("deploy_client_calls_total", labels) == before + 1
        assert _sample("deploy_client_call_duration_seconds_count", {"operation": "metrics_ok"}) >= 1

    def test_counts_errors_by_code_and_reraises(self):
        labels = {"operation": "metrics_err", "result": "timeout"}
        before = _sample("deploy_client_calls_total", labels)
        error = TransportError("slow", code="timeout")

        endpoint = InstrumentedEndpoint(StubEndpoint(error=error), "metrics_err")
        with pytest.raises(TransportError) as exc_info:
            endpoint.invoke(CallContext(), "req")

        assert exc_info.value is error
        assert _sample("deploy_client_calls_total", labels) == before + 1
