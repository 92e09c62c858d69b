"""Application settings and configuration.

This module defines all configuration options for the Gatehouse service.
Settings are loaded from environment variables with sensible defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    This class defines all configuration options for the Gatehouse service.
    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Gatehouse", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: Literal["development", "production", "test"] = Field(
        default="development",
        alias="APP_ENV",
    )
    debug: bool = Field(default=False, alias="DEBUG")

    # Canonical URLs accepted by the origin check
    app_url: str | None = Field(default=None, alias="APP_URL")
    auth_url: str | None = Field(default=None, alias="AUTH_URL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    legacy_token_ttl_seconds: int = Field(default=60 * 60 * 24, alias="LEGACY_TOKEN_TTL_SECONDS")
    session_max_age_seconds: int = Field(
        default=30 * 24 * 60 * 60,
        alias="SESSION_MAX_AGE_SECONDS",
    )
    csrf_token_ttl_seconds: int = Field(default=60 * 60, alias="CSRF_TOKEN_TTL_SECONDS")

    # Database configuration
    database_url: str = Field(default="sqlite:///./gatehouse.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Sliding-window rate limits (window in milliseconds)
    contact_rate_limit_window_ms: int = Field(
        default=15 * 60 * 1000,
        alias="CONTACT_RATE_LIMIT_WINDOW_MS",
    )
    contact_rate_limit_max: int = Field(default=3, alias="CONTACT_RATE_LIMIT_MAX")
    api_rate_limit_window_ms: int = Field(default=60 * 1000, alias="API_RATE_LIMIT_WINDOW_MS")
    api_rate_limit_max: int = Field(default=10, alias="API_RATE_LIMIT_MAX")

    # Background sweeps of expired in-memory state
    rate_limit_sweep_seconds: float = Field(default=5 * 60, alias="RATE_LIMIT_SWEEP_SECONDS")
    csrf_sweep_seconds: float = Field(default=10 * 60, alias="CSRF_SWEEP_SECONDS")

    # Federated sign-in providers (enabled only when both values are present)
    google_client_id: str | None = Field(default=None, alias="GOOGLE_CLIENT_ID")
    google_client_secret: str | None = Field(default=None, alias="GOOGLE_CLIENT_SECRET")
    github_client_id: str | None = Field(default=None, alias="GITHUB_CLIENT_ID")
    github_client_secret: str | None = Field(default=None, alias="GITHUB_CLIENT_SECRET")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_production(self) -> bool:
        """Return True when running with production semantics.

        Production disables the missing-origin fallback of the CSRF check and
        marks authentication cookies as ``Secure``.
        """
        return self.environment == "production"

    @property
    def federated_providers(self) -> dict[str, tuple[str, str]]:
        """Return configured federated providers as ``{name: (client_id, secret)}``.

        Returns:
            Only providers whose client id and secret are both set
        """
        candidates = {
            "google": (self.google_client_id, self.google_client_secret),
            "github": (self.github_client_id, self.github_client_secret),
        }
        return {
            name: (client_id, secret)
            for name, (client_id, secret) in candidates.items()
            if client_id and secret
        }


settings = Settings()  # type: ignore[call-arg]
