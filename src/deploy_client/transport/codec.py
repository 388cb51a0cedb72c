"""Request encoding and response decoding for the HTTP transport."""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping

import httpx
from pydantic import BaseModel

from deploy_client.core.exceptions import TransportError


RequestEncoder = Callable[[Any], Any]
ResponseDecoder = Callable[[httpx.Response], Any]


def encode_generic_request(request: Any) -> Any:
    """Turn a request value into a JSON-ready structure."""
    if isinstance(request, BaseModel):
        return request.model_dump(mode="json", exclude_none=True)
    if isinstance(request, Mapping):
        return dict(request)
    return request


def decode_json_response(response: httpx.Response) -> Any:
    """Parse the response body as JSON, whatever the status code.

    Error statuses usually still carry a structured error body, which is
    left for classification. A body that is not JSON is a transport failure.

    Raises:
        TransportError: If the body is empty or not valid JSON
    """
    if not response.content:
        raise TransportError(
            f"empty response body (HTTP {response.status_code})",
            code="undecodable",
        )
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise TransportError(
            f"undecodable response body (HTTP {response.status_code}): {e}",
            code="undecodable",
        ) from e
