"""Deploy Client - resilient client for a remote deployment-management service."""

__version__ = "0.1.0"
__author__ = "Pixell Core Team"

from deploy_client.core.config import ClientSettings
from deploy_client.core.context import CallContext
from deploy_client.core.models import DeploymentDefinition, RemoteErrorBody
from deploy_client.deploy.client import DeploymentClient, DeploymentService

__all__ = [
    "ClientSettings",
    "CallContext",
    "DeploymentClient",
    "DeploymentDefinition",
    "DeploymentService",
    "RemoteErrorBody",
    "__version__",
]
