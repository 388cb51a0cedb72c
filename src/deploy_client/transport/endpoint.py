"""Call endpoints: one remote operation behind a uniform invoke contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
import structlog

from deploy_client.core.context import CallContext
from deploy_client.core.exceptions import TransportError
from deploy_client.transport.codec import (
    RequestEncoder,
    ResponseDecoder,
    decode_json_response,
    encode_generic_request,
)


logger = structlog.get_logger()


class CallEndpoint(ABC):
    """Invoke a remote operation with a request value, get a response value.

    Failures are raised. The response is whatever the decoder produced; its
    shape is not checked at this layer.
    """

    operation: Optional[str] = None

    @abstractmethod
    def invoke(self, ctx: CallContext, request: Any) -> Any:
        ...

    def __call__(self, ctx: CallContext, request: Any) -> Any:
        return self.invoke(ctx, request)


class HttpEndpoint(CallEndpoint):
    """Encode, POST and decode one operation over a shared ``httpx.Client``."""

    def __init__(
        self,
        client: httpx.Client,
        url: httpx.URL,
        *,
        operation: str,
        method: str = "POST",
        encode: RequestEncoder = encode_generic_request,
        decode: ResponseDecoder = decode_json_response,
        timeout: float = 30.0,
    ):
        self._client = client
        self.url = url
        self.operation = operation
        self.method = method
        self._encode = encode
        self._decode = decode
        self.timeout = timeout

    def _timeout_for(self, ctx: CallContext) -> float:
        remaining = ctx.remaining()
        if remaining is None:
            return self.timeout
        return min(self.timeout, remaining)

    def invoke(self, ctx: CallContext, request: Any) -> Any:
        ctx.raise_if_done()
        payload = self._encode(request)
        try:
            response = self._client.request(
                self.method,
                self.url,
                json=payload,
                timeout=self._timeout_for(ctx),
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                f"{self.method} {self.url} timed out: {e}",
                operation=self.operation,
                code="timeout",
            ) from e
        except httpx.TransportError as e:
            raise TransportError(
                f"{self.method} {self.url} failed: {e}",
                operation=self.operation,
                code="connection",
            ) from e
        except httpx.DecodingError as e:
            raise TransportError(
                f"{self.method} {self.url} returned an undecodable body: {e}",
                operation=self.operation,
                code="undecodable",
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                f"{self.method} {self.url} failed: {e}",
                operation=self.operation,
                code="request",
            ) from e

        logger.debug(
            "Remote call returned",
            operation=self.operation,
            status_code=response.status_code,
        )
        try:
            return self._decode(response)
        except TransportError as e:
            e.operation = self.operation
            raise
