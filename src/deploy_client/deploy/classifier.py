"""Classification of decoded responses into a closed set of outcomes."""

from __future__ import annotations

import json
import pprint
from dataclasses import dataclass
from typing import Any, Optional, Type, Union

import structlog
from pydantic import BaseModel, ValidationError

from deploy_client.core.exceptions import RemoteError, UnexpectedResponseError
from deploy_client.core.models import DeploymentDefinition, RemoteErrorBody


logger = structlog.get_logger()


@dataclass(frozen=True)
class DomainResult:
    deployment: DeploymentDefinition

    def unwrap(self, operation: Optional[str] = None) -> DeploymentDefinition:
        return self.deployment


@dataclass(frozen=True)
class RemoteErrorResult:
    error: RemoteErrorBody

    def unwrap(self, operation: Optional[str] = None) -> DeploymentDefinition:
        raise RemoteError(self.error, operation=operation)


@dataclass(frozen=True)
class UnclassifiedResponse:
    raw: Any
    diagnostic: str

    def unwrap(self, operation: Optional[str] = None) -> DeploymentDefinition:
        raise UnexpectedResponseError(self.raw, self.diagnostic, operation=operation)


RemoteOutcome = Union[DomainResult, RemoteErrorResult, UnclassifiedResponse]


def render_diagnostic(raw: Any) -> str:
    """Stable human-readable rendering of a response value.

    JSON values render as indented, key-sorted JSON; anything else falls
    back to ``pprint``.
    """
    try:
        return json.dumps(raw, indent=2, sort_keys=True)
    except (TypeError, ValueError):
        return pprint.pformat(raw)


class ResponseClassifier:
    """Map a raw decoded response to exactly one ``RemoteOutcome``.

    The success shape is tried before the error shape, so a payload that
    validates as both is a success.
    """

    def __init__(
        self,
        success_model: Type[BaseModel] = DeploymentDefinition,
        error_model: Type[BaseModel] = RemoteErrorBody,
    ):
        self.success_model = success_model
        self.error_model = error_model

    def _match(self, model: Type[BaseModel], raw: Any) -> Optional[BaseModel]:
        try:
            return model.model_validate(raw)
        except ValidationError:
            return None

    def classify(self, raw: Any) -> RemoteOutcome:
        deployment = self._match(self.success_model, raw)
        if deployment is not None:
            return DomainResult(deployment)

        logger.debug("Response is not a deployment", success_model=self.success_model.__name__)
        error = self._match(self.error_model, raw)
        if error is not None:
            return RemoteErrorResult(error)

        logger.debug("Response is not a remote error", error_model=self.error_model.__name__)
        return UnclassifiedResponse(raw=raw, diagnostic=render_diagnostic(raw))
