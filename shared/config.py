"""
Shared configuration management for the catalog cache service.
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias=AliasChoices("CACHE_ENV", "env"))
    log_level: str = Field(default="info", validation_alias=AliasChoices("CACHE_LOG_LEVEL", "log_level"))

    # Bulk purge endpoint
    cache_api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("CACHE_API_KEY", "cache_api_key")
    )

    # Site configuration service
    config_service_url: str = Field(
        default="https://config.aem.page",
        validation_alias=AliasChoices("HLX_CONFIG_SERVICE_URL", "config_service_url"),
    )
    config_service_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("HLX_CONFIG_SERVICE_TOKEN", "config_service_token"),
    )

    # CDN providers
    managed_purge_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("HLX_ADMIN_MANAGED_PURGEPROXY_TOKEN", "managed_purge_token"),
    )
    cloudflare_concurrency: int = Field(
        default=8,
        validation_alias=AliasChoices("CACHE_CLOUDFLARE_CONCURRENCY", "cloudflare_concurrency"),
    )
    cloudflare_stop_on_error: bool = Field(
        default=False,
        validation_alias=AliasChoices("CACHE_CLOUDFLARE_STOP_ON_ERROR", "cloudflare_stop_on_error"),
    )
    akamai_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices("CACHE_AKAMAI_TIMEOUT_SECONDS", "akamai_timeout_seconds"),
    )


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
