"""Type-safe environment configuration using Pydantic Settings."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.

    Every field has a default so the gateway starts with no environment
    at all; values from the process environment or a .env file override them.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields in .env
        env_ignore_empty=True,
    )

    APP_NAME: str = Field(
        default="hn-graphql",
        description="Application name"
    )

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    LOG_FORMAT: Literal["standard", "json"] = Field(
        default="standard",
        description="Log output format"
    )

    DEBUG: bool = Field(
        default=False,
        description="Debug mode flag"
    )

    # Upstream Hacker News API
    HN_API_BASE_URL: str = Field(
        default="https://hacker-news.firebaseio.com/v0",
        description="Base URL of the Hacker News Firebase API"
    )

    HN_API_TIMEOUT: float = Field(
        default=10.0,
        description="Overall timeout for a single upstream call in seconds",
        gt=0
    )

    # Batch loading
    BATCH_WINDOW_DELAY: float = Field(
        default=0.0,
        description="Seconds a batch window stays open; 0 closes it on the next loop tick",
        ge=0
    )

    LOADER_RAISE_ERRORS: bool = Field(
        default=False,
        description="Raise per-key fetch errors to callers instead of dropping the key"
    )

    # GraphQL / HTTP server
    DEFAULT_LIST_LIMIT: int = Field(
        default=10,
        description="Default number of stories returned by list queries",
        gt=0
    )

    HOST: str = Field(
        default="0.0.0.0",
        description="Listen host"
    )

    PORT: int = Field(
        default=8000,
        description="Listen port",
        gt=0,
        lt=65536
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {valid_levels}, got '{v}'"
            )
        return v_upper

    @field_validator("HN_API_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended with a single '/'."""
        return v.rstrip("/")


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Loads settings from environment variables and .env file on first call.
    Subsequent calls return the cached instance.

    Returns:
        Settings: The application settings instance

    Raises:
        ValidationError: If an environment variable holds an invalid value
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton. Useful for testing."""
    global _settings
    _settings = None
