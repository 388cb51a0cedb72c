"""Configuration management for Deploy Client."""

from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from deploy_client.core.exceptions import ConfigurationError


class ClientSettings(BaseSettings):
    """Client configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="DEPLOY_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote instance
    instance: str = Field("localhost:8080", description="Remote instance address, scheme optional")
    create_path: str = Field("/apps/v1/create", description="Path of the create-deployment operation")
    get_path: str = Field("/apps/v1/get", description="Path of the get-latest-deployment operation")
    request_timeout_seconds: float = Field(30.0, gt=0, description="Per-request transport timeout")

    # Outbound rate limiting, shared by both operations
    requests_per_second: float = Field(1.0, gt=0, description="Steady-state token refill rate")
    burst: int = Field(100, gt=0, description="Token bucket capacity")

    # Retry policy for create
    retry_interval_seconds: float = Field(2.0, gt=0, description="Constant wait between create attempts")
    retry_max_attempts: int = Field(31, gt=0, description="Hard cap on create attempts")

    # Observability
    log_level: str = Field("INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_format: str = Field("json", pattern="^(json|console)$")

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator("create_path", "get_path")
    @classmethod
    def check_path(cls, v: str) -> str:
        """Operation paths are absolute."""
        if not v.startswith("/"):
            raise ValueError("path must start with '/'")
        return v


def load_settings(**overrides: Any) -> ClientSettings:
    """Build settings from the environment plus explicit overrides.

    Raises:
        ConfigurationError: If any value fails validation
    """
    try:
        return ClientSettings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid client configuration: {e}") from e
