"""
Application settings using Pydantic.

Provides environment-based configuration loading with CLUSTERMGMT_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Environment
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_prefix: str = ""
    cors_origins: list[str] = []

    # Cluster registry: remote API if set, else the YAML file, else empty
    cluster_registry_url: str | None = None
    cluster_registry_token: str | None = None
    clusters_file: str | None = None

    # Provisioning
    provision_timeout_seconds: float | None = None  # None waits indefinitely
    noop_provisioner_kinds: list[str] = ["noop"]
    noop_provisioner_delay_seconds: float = 0.0
    webhook_provisioners: dict[str, str] = {}  # kind -> base URL
    webhook_token: str | None = None

    # JWT (for API authentication)
    jwt_jwks_url: str | None = None
    jwt_issuer: str | None = None
    jwt_audience: str | None = None
    admin_role: str = "admin"

    # HTTP client settings
    http_timeout: int = 30
    http_max_retries: int = 3
    http_retry_backoff_factor: float = 0.5

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "CLUSTERMGMT_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
