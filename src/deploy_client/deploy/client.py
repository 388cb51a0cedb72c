"""Client for the remote deployment-management service."""

from __future__ import annotations

from typing import Optional, Protocol

import httpx
import structlog

from deploy_client.core.config import ClientSettings, load_settings
from deploy_client.core.context import CallContext
from deploy_client.core.exceptions import RemoteError, UnexpectedResponseError
from deploy_client.core.models import DeploymentDefinition
from deploy_client.deploy.classifier import RemoteOutcome, ResponseClassifier
from deploy_client.resilience.ratelimit import TokenBucketLimiter
from deploy_client.resilience.retry import RetryPolicy
from deploy_client.transport.endpoint import CallEndpoint, HttpEndpoint
from deploy_client.transport.middleware import chain, instrument, rate_limit
from deploy_client.utils.address import normalize_instance, operation_url
from deploy_client.utils.logging import call_context


logger = structlog.get_logger()

CREATE_OPERATION = "create_deployment"
GET_OPERATION = "get_latest_deployment"


class DeploymentService(Protocol):
    """The two operations offered by the deployment-management service."""

    def create_deployment(
        self, request: DeploymentDefinition, ctx: Optional[CallContext] = None
    ) -> DeploymentDefinition:
        ...

    def get_latest_deployment(
        self, request: DeploymentDefinition, ctx: Optional[CallContext] = None
    ) -> DeploymentDefinition:
        ...


class DeploymentClient:
    """Resilient client for one remote deployment-management instance.

    Each operation owns an endpoint built as::

        rate_limit(limiter) -> instrument(operation) -> HttpEndpoint

    One ``TokenBucketLimiter`` is shared by both endpoints, so it bounds the
    total outgoing request rate to the instance, retries included. Only
    ``create_deployment`` retries; reads are issued once.

    Example:
        >>> with DeploymentClient("deployer.internal:8080") as client:
        ...     client.create_deployment(DeploymentDefinition(id="d1"))
    """

    def __init__(
        self,
        instance: Optional[str] = None,
        settings: Optional[ClientSettings] = None,
        *,
        http_client: Optional[httpx.Client] = None,
        limiter: Optional[TokenBucketLimiter] = None,
        classifier: Optional[ResponseClassifier] = None,
    ):
        """Initialize the client.

        Args:
            instance: Remote instance address; overrides ``settings.instance``
            settings: Client settings; loaded from the environment if omitted
            http_client: Client to send requests with; owned by the caller
            limiter: Rate limiter to share; built from settings if omitted
            classifier: Response classifier; defaults to deployment/error shapes

        Raises:
            AddressError: If the instance address is malformed
            ConfigurationError: If settings loaded from the environment are invalid
        """
        self.settings = settings or load_settings()
        self.base_url = normalize_instance(instance or self.settings.instance)

        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client()
        self.limiter = limiter or TokenBucketLimiter(
            rate=self.settings.requests_per_second,
            burst=self.settings.burst,
        )
        self.retry_policy = RetryPolicy(
            interval=self.settings.retry_interval_seconds,
            max_attempts=self.settings.retry_max_attempts,
        )
        self.classifier = classifier or ResponseClassifier()

        self._create_endpoint = self._build_endpoint(CREATE_OPERATION, self.settings.create_path)
        self._get_endpoint = self._build_endpoint(GET_OPERATION, self.settings.get_path)

        logger.info(
            "Deployment client ready",
            instance=str(self.base_url),
            requests_per_second=self.settings.requests_per_second,
            burst=self.settings.burst,
        )

    def _build_endpoint(self, operation: str, path: str) -> CallEndpoint:
        endpoint = HttpEndpoint(
            self._http,
            operation_url(self.base_url, path),
            operation=operation,
            timeout=self.settings.request_timeout_seconds,
        )
        return chain(rate_limit(self.limiter), instrument(operation))(endpoint)

    def _resolve(self, operation: str, outcome: RemoteOutcome) -> DeploymentDefinition:
        try:
            return outcome.unwrap(operation)
        except (RemoteError, UnexpectedResponseError) as e:
            logger.error("Deployment call did not return a deployment", operation=operation, error=str(e))
            raise

    def create_deployment(
        self, request: DeploymentDefinition, ctx: Optional[CallContext] = None
    ) -> DeploymentDefinition:
        """Create a deployment, retrying transient failures.

        Raises:
            RemoteError: The service returned a structured error
            UnexpectedResponseError: The response matched no known shape
            RetryExhaustedError: Every attempt failed below the domain layer
            OperationCancelled: ``ctx`` was cancelled or expired
        """
        ctx = ctx or CallContext.background()
        with call_context(CREATE_OPERATION, getattr(request, "id", None)):
            raw = self.retry_policy.call(
                ctx,
                self._create_endpoint.invoke,
                request,
                operation=CREATE_OPERATION,
            )
            deployment = self._resolve(CREATE_OPERATION, self.classifier.classify(raw))
            logger.info("Deployment created", status=getattr(deployment, "status", None))
        return deployment

    def get_latest_deployment(
        self, request: DeploymentDefinition, ctx: Optional[CallContext] = None
    ) -> DeploymentDefinition:
        """Fetch the latest state of the deployment described by ``request``.

        Issued once; callers decide whether to repeat a failed read.

        Raises:
            RateLimitExceeded: The shared limiter rejected the call
            TransportError: The call failed below the domain layer
            RemoteError: The service returned a structured error
            UnexpectedResponseError: The response matched no known shape
            OperationCancelled: ``ctx`` was cancelled or expired
        """
        ctx = ctx or CallContext.background()
        ctx.raise_if_done()
        with call_context(GET_OPERATION, getattr(request, "id", None)):
            raw = self._get_endpoint.invoke(ctx, request)
            return self._resolve(GET_OPERATION, self.classifier.classify(raw))

    def close(self) -> None:
        if self._owns_http_client:
            self._http.close()

    def __enter__(self) -> "DeploymentClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
