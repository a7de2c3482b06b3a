"""Application settings and configuration.

This module defines all configuration options for the PlantSpace backend.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="PlantSpace API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(
        default="your-secret-key-change-in-production",
        alias="SECRET_KEY",
    )
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    bcrypt_rounds: int = Field(default=12, alias="BCRYPT_ROUNDS")

    # Database configuration
    database_url: str = Field(default="sqlite:///./plantspace.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # In-process rate limiting (per client IP, single process only)
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    register_rate_window_seconds: int = Field(default=15 * 60, alias="REGISTER_RATE_WINDOW_SECONDS")
    register_rate_max_requests: int = Field(default=5, alias="REGISTER_RATE_MAX_REQUESTS")
    login_rate_window_seconds: int = Field(default=15 * 60, alias="LOGIN_RATE_WINDOW_SECONDS")
    login_rate_max_requests: int = Field(default=10, alias="LOGIN_RATE_MAX_REQUESTS")
    post_rate_window_seconds: int = Field(default=60 * 60, alias="POST_RATE_WINDOW_SECONDS")
    post_rate_max_requests: int = Field(default=10, alias="POST_RATE_MAX_REQUESTS")
    feed_rate_window_seconds: int = Field(default=60, alias="FEED_RATE_WINDOW_SECONDS")
    feed_rate_max_requests: int = Field(default=30, alias="FEED_RATE_MAX_REQUESTS")

    # Onboarding
    new_user_window_hours: int = Field(default=24, alias="NEW_USER_WINDOW_HOURS")

    # CORS configuration for the mobile/web client
    cors_origins: list[str] = Field(
        default=["http://localhost:19006"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
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
    )

    @property
    def access_token_ttl_seconds(self) -> int:
        """Return the access-token lifetime in seconds."""
        return self.access_token_expire_minutes * 60


settings = Settings()
