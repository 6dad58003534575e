"""
Application settings module.

This module provides configuration settings for the assessment scheduling
and compliance engine, including the database connection, the default
compliance policy, notification links and logging.
"""

# Standard Library Imports
import logging
from functools import lru_cache
from pathlib import Path
from typing import Self

# Third-Party Imports
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings using Pydantic for validation and environment variable loading."""

    # API Information
    API_TITLE: str = "MBC Tracker API"
    API_DESCRIPTION: str = "Measurement-based care assessment scheduling and compliance engine"
    API_VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "MBC Tracker"

    # Environment
    ENVIRONMENT: str = "development"  # development, test, production
    TESTING: bool = False

    # Server Settings
    SERVER_HOST: str = "127.0.0.1"
    SERVER_PORT: int = 8000
    UVICORN_WORKERS: int = 1

    # Database Settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./mbc_tracker.db"
    ASYNC_DATABASE_URL: str | None = None  # Derived from DATABASE_URL when unset
    DB_ECHO_LOG: bool = False
    SQLITE_BUSY_TIMEOUT_SECONDS: float = 15.0

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    AUDIT_LOG_FILE: str | None = Field(default="logs/audit.log")

    # Compliance policy defaults (used only when the named policy does not exist yet)
    POLICY_NAME: str = "default"
    DEFAULT_CADENCE_DAYS: int = Field(default=14, ge=0)
    DEFAULT_GRACE_WINDOW_DAYS: int = Field(default=3, ge=0)
    DEFAULT_EXPIRATION_DAYS: int = Field(default=7, ge=0)
    DEFAULT_MEASURES: list[str] = Field(default_factory=lambda: ["PHQ-9", "GAD-7"])
    DEFAULT_REQUIRE_AT_INTAKE: bool = True

    # Scheduled jobs
    UPCOMING_DAYS_AHEAD: int = Field(default=7, ge=0)
    NOTIFICATION_LOOKAHEAD_HOURS: int = Field(default=24, ge=0)
    COMPLIANCE_WINDOW_DAYS: int = Field(default=30, ge=1)
    CRON_SECRET: str | None = None

    # Magic links
    PUBLIC_APP_URL: str = "http://localhost:3000"

    # Monitoring and Error Tracking (Sentry)
    SENTRY_DSN: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log level is one of the valid levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("DEFAULT_MEASURES")
    @classmethod
    def validate_default_measures(cls, v: list[str]) -> list[str]:
        """The configured measure set must name at least one measure."""
        cleaned = [name.strip() for name in v if name and name.strip()]
        if not cleaned:
            raise ValueError("DEFAULT_MEASURES must contain at least one measure name")
        return cleaned

    @field_validator("PUBLIC_APP_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def ensure_async_database_url(self) -> Self:
        """Ensure ASYNC_DATABASE_URL is set properly from DATABASE_URL."""
        if not self.ASYNC_DATABASE_URL:
            db_url = self.DATABASE_URL
            # If it's a SQLite URL without async driver, convert it
            if db_url.startswith("sqlite:///"):
                self.ASYNC_DATABASE_URL = db_url.replace("sqlite:///", "sqlite+aiosqlite:///")
            elif db_url.startswith("postgresql://"):
                self.ASYNC_DATABASE_URL = db_url.replace("postgresql://", "postgresql+asyncpg://")
            else:
                self.ASYNC_DATABASE_URL = db_url
            logger.debug("Set ASYNC_DATABASE_URL based on DATABASE_URL")

        # Ensure audit log directory exists
        if self.AUDIT_LOG_FILE:
            log_dir = Path(self.AUDIT_LOG_FILE).parent
            if log_dir and not log_dir.is_dir():
                log_dir.mkdir(parents=True, exist_ok=True)

        return self

    @property
    def is_sqlite(self) -> bool:
        return (self.ASYNC_DATABASE_URL or self.DATABASE_URL).startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Factory function to get the application settings.

    This function enables dependency injection of settings in FastAPI.
    Tests construct ``Settings(...)`` directly or override this dependency.

    Returns:
        The application settings instance
    """
    return Settings()
