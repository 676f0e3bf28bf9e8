"""Configuration management using Pydantic Settings."""

from typing import List

from pydantic import Field, PostgresDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    url: PostgresDsn = Field(..., description="PostgreSQL database URL with asyncpg driver")
    pool_size: int = Field(default=10, ge=1, le=100, description="Database connection pool size")
    max_overflow: int = Field(
        default=20,
        ge=0,
        le=100,
        description="Maximum number of connections that can be created beyond pool_size",
    )
    pool_timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Timeout in seconds for getting a connection from the pool",
    )
    echo: bool = Field(default=False, description="Enable SQLAlchemy query logging")

    model_config = SettingsConfigDict(env_prefix="DATABASE_", case_sensitive=False)


class SessionSettings(BaseSettings):
    """Resource owner session cookie settings.

    The login page itself is served by a separate identity frontend; this
    service only verifies the signed cookie it leaves behind.
    """

    secret: str = Field(..., min_length=32, description="Secret key for signing session cookies")
    cookie_name: str = Field(default="cpa_session", description="Name of the session cookie")
    login_url: str = Field(default="/login", description="Where unauthenticated users are sent")
    max_age: int = Field(
        default=86400,
        ge=60,
        description="Session cookie lifetime in seconds",
    )

    model_config = SettingsConfigDict(env_prefix="SESSION_", case_sensitive=False)


class OAuthSettings(BaseSettings):
    """Token lifetimes and protocol URIs."""

    verification_uri: str = Field(
        ...,
        description="End-user verification URI where device pairings are approved",
    )
    registration_client_uri: str = Field(
        default="", description="URI of the client registration service"
    )
    access_token_lifetime: int = Field(
        default=3600, ge=60, description="Access token lifetime in seconds"
    )
    refresh_token_lifetime: int = Field(
        default=0,
        ge=0,
        description="Refresh token lifetime in seconds (0 means the token does not expire)",
    )
    authorization_code_lifetime: int = Field(
        default=600, ge=30, le=3600, description="Authorization code lifetime in seconds"
    )
    device_code_lifetime: int = Field(
        default=1800, ge=60, description="Lifetime of a pending device pairing in seconds"
    )
    device_polling_interval: int = Field(
        default=5, ge=1, le=300, description="Minimum polling interval advertised to devices"
    )
    user_code_length: int = Field(
        default=8, ge=6, le=16, description="Number of characters in a user code"
    )

    model_config = SettingsConfigDict(env_prefix="OAUTH_", case_sensitive=False)


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    enabled: bool = Field(default=False, description="Allow cross-origin token requests")
    origins: List[str] = Field(
        default=["http://localhost:3000"], description="Allowed CORS origins"
    )
    allow_credentials: bool = Field(default=True, description="Allow credentials in CORS requests")

    @field_validator("origins", mode="before")
    @classmethod
    def parse_origins(cls, v):
        """Parse comma-separated origins string into list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    model_config = SettingsConfigDict(env_prefix="CORS_", case_sensitive=False)


class AppSettings(BaseSettings):
    """Main application settings that aggregates all configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application metadata
    app_name: str = Field(default="CPA Authorization Server", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    port: int = Field(default=8000, ge=1, le=65535, description="Application port")

    # Nested configuration settings, each read from its own env prefix
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed_levels:
            raise ValueError(f"Log level must be one of {allowed_levels}, got '{v}'")
        return v_upper


# Global settings instance
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """
    Get the global settings instance.

    Settings are loaded once from the environment and are read-only for the
    lifetime of the process.

    Returns:
        AppSettings: The application settings instance

    Raises:
        ValidationError: If required environment variables are missing or invalid
    """
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reset_settings() -> None:
    """
    Reset the global settings instance.

    This is primarily useful for testing purposes to reload settings
    with different environment variables.
    """
    global _settings
    _settings = None
