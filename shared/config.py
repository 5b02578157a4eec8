"""
Shared configuration management for the Resource Manager client.
"""

from typing import Annotated, Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_ENDPOINT = "https://cloudresourcemanager.googleapis.com"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="RESOURCE_MANAGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Observability
    enable_tracing: bool = Field(default=False)


class ResourceManagerSettings(BaseConfig):
    """Settings for the Resource Manager client and its retry policy."""

    # Service endpoint
    endpoint: str = Field(default=DEFAULT_ENDPOINT)
    request_timeout: float = Field(default=30.0, gt=0)

    # Retry policy
    max_attempts: int = Field(default=6, ge=1)
    base_delay: float = Field(default=1.0, ge=0)
    max_delay: float = Field(default=32.0, ge=0)
    exponential_base: float = Field(default=2.0, ge=1)
    jitter: bool = Field(default=True)
    retryable_status_codes: Annotated[List[int], NoDecode] = Field(default_factory=lambda: [500, 502, 503, 504])

    # Listing
    default_page_size: int = Field(default=0, ge=0)

    @field_validator("retryable_status_codes", mode="before")
    @classmethod
    def _split_codes(cls, value: Any) -> Any:
        # Allows RESOURCE_MANAGER_RETRYABLE_STATUS_CODES=500,503
        if isinstance(value, str):
            return [int(code) for code in value.split(",") if code.strip()]
        if isinstance(value, int):
            return [value]
        return value

    @field_validator("endpoint")
    @classmethod
    def _strip_endpoint(cls, value: str) -> str:
        return value.rstrip("/")


def get_settings(**overrides: Any) -> ResourceManagerSettings:
    """Load settings from the environment, applying explicit overrides."""
    return ResourceManagerSettings(**overrides)
