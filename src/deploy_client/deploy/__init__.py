"""Deployment client and response classification."""

from .classifier import (
    DomainResult,
    RemoteErrorResult,
    RemoteOutcome,
    ResponseClassifier,
    UnclassifiedResponse,
    render_diagnostic,
)
from .client import DeploymentClient, DeploymentService

__all__ = [
    "DeploymentClient",
    "DeploymentService",
    "DomainResult",
    "RemoteErrorResult",
    "RemoteOutcome",
    "ResponseClassifier",
    "UnclassifiedResponse",
    "render_diagnostic",
]
