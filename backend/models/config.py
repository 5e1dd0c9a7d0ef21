import os
import sys
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    For local development, load `.env` automatically so `SECRET_KEY` can be
    provided from `backend/.env` (convenience). **SECRET_KEY remains required**
    and must be set in production via environment variables.

    Do NOT auto-load `.env` when running under pytest or in CI (so tests
    that validate missing secrets continue to fail fast).
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'staging', 'production' or 'test'",
    )

    DATABASE_URL: str = "sqlite:///./data/streamvault.db"
    SECRET_KEY: str = Field(
        ...,  # Required, no default
        description="JWT secret key - must be set via SECRET_KEY environment variable",
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins (comma-separated in env var)",
    )

    # Initial moderator account (used by init_db.py)
    ADMIN_EMAIL: str = Field(
        ...,
        description="Moderator email - must be set via ADMIN_EMAIL environment variable",
    )
    ADMIN_PASSWORD: str = Field(
        ...,
        description="Moderator password - must be set via ADMIN_PASSWORD environment variable",
    )

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(
        default=5,
        description="Number of persistent connections in pool",
    )
    DB_MAX_OVERFLOW: int = Field(
        default=10,
        description="Extra connections when pool exhausted",
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        description="Seconds to wait for connection from pool",
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800,
        description="Recycle connections after N seconds (30 min default)",
    )

    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )

    # Performance settings
    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    # Rate limit policies (limit per trailing window)
    RATE_LIMIT_COMMENT_LIMIT: int = 5
    RATE_LIMIT_COMMENT_WINDOW_MINUTES: int = 1
    RATE_LIMIT_REACTION_LIMIT: int = 20
    RATE_LIMIT_REACTION_WINDOW_MINUTES: int = 1
    RATE_LIMIT_REPORT_LIMIT: int = 10
    RATE_LIMIT_REPORT_WINDOW_MINUTES: int = 60
    RATE_LIMIT_CREATOR_POST_LIMIT: int = 3
    RATE_LIMIT_CREATOR_POST_WINDOW_MINUTES: int = 60
    RATE_LIMIT_UPLOAD_LIMIT: int = 5
    RATE_LIMIT_UPLOAD_WINDOW_MINUTES: int = 60
    AUTH_ATTEMPT_LIMIT: int = Field(
        default=5,
        description="Maximum failed login attempts per identifier in the window",
    )
    AUTH_ATTEMPT_WINDOW_MINUTES: int = 15
    AUTH_LOCKOUT_MINUTES: int = Field(
        default=30,
        description="Lockout duration after the auth attempt limit is reached",
    )

    # Feature flags
    FEATURE_FLAG_CACHE_TTL_SECONDS: float = Field(
        default=5.0,
        description="Seconds a feature flag read is cached per process (0 disables)",
    )

    # Moderation
    BAN_SWEEP_INTERVAL_MINUTES: int = Field(
        default=15,
        description="Interval of the background job that deactivates expired bans",
    )

    # Video pipeline (Mux-compatible API)
    VIDEO_API_URL: str = Field(
        default="https://api.mux.com/video/v1",
        description="Base URL of the video pipeline REST API",
    )
    VIDEO_API_TOKEN_ID: str = Field(default="", description="Video pipeline token id")
    VIDEO_API_TOKEN_SECRET: str = Field(
        default="", description="Video pipeline token secret"
    )
    VIDEO_API_TIMEOUT_SECONDS: float = 10.0
    VIDEO_UPLOAD_CORS_ORIGIN: str = "*"
    UPLOAD_POLL_MAX_ATTEMPTS: int = Field(
        default=30,
        description="Maximum status polls while waiting for an upload to become ready",
    )
    UPLOAD_POLL_DELAY_SECONDS: float = Field(
        default=2.0,
        description="Fixed delay between upload status polls",
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """Accept a comma-separated string as well as a JSON list."""
        if isinstance(v, str) and not v.startswith("["):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v  # type: ignore[return-value]

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
