"""HTTP transport: endpoints, codec and middleware."""

from .codec import decode_json_response, encode_generic_request
from .endpoint import CallEndpoint, HttpEndpoint
from .middleware import (
    InstrumentedEndpoint,
    Middleware,
    RateLimitedEndpoint,
    chain,
    instrument,
    rate_limit,
)

__all__ = [
    "CallEndpoint",
    "HttpEndpoint",
    "InstrumentedEndpoint",
    "Middleware",
    "RateLimitedEndpoint",
    "chain",
    "decode_json_response",
    "encode_generic_request",
    "instrument",
    "rate_limit",
]
