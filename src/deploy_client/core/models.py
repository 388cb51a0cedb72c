"""Models for deployments exchanged with the remote service."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class DeploymentDefinition(BaseModel):
    """A desired or actual deployment.

    Only ``id`` is required; the calling domain owns every other field, so
    unknown keys are kept and sent back unchanged.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    status: Optional[str] = None


class RemoteErrorBody(BaseModel):
    """Structured error payload returned by the remote service."""

    message: str
    code: Optional[str] = None
    details: Optional[Any] = None
