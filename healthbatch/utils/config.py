"""
Configuration Management

Uses Pydantic for type-safe settings with environment variable support.
Follows 12-factor app principles for configuration.

Example:
    >>> from healthbatch.utils.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.api_base_url)
    https://api.example.com
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from healthbatch.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are prefixed with HEALTHBATCH_
    Example: HEALTHBATCH_API_KEY=secret
    """

    # External API
    api_base_url: str = Field(
        default="https://api.example.com",
        description="Base URL of the records API",
    )
    api_key: str = Field(
        default="",
        description="Bearer token sent to the records API",
    )
    fetch_endpoint: str = Field(
        default="/records",
        description="Path (relative to api_base_url) that serves raw records",
    )
    post_endpoint: str = Field(
        default="https://api.example.com/results",
        description="Absolute URL that accepts analysis submissions",
    )

    # Request behaviour
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout (seconds)",
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Maximum attempts per request, including the first",
    )
    retry_backoff: float = Field(
        default=1.0,
        ge=0.0,
        description="Base delay (seconds); attempt i waits retry_backoff * 2**i",
    )

    # Pipeline
    required_fields: List[str] = Field(
        default_factory=lambda: ["id", "subjectId", "category"],
        description="Fields every record must carry after transformation",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_format: str = Field(
        default="json",
        description="Log format (json or text)",
    )

    # Environment
    environment: str = Field(
        default="development",
        description="Environment (development, staging, production)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    model_config = SettingsConfigDict(
        env_prefix="HEALTHBATCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure valid log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of {valid_levels}"
            )
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure valid log format."""
        v_lower = v.lower()
        if v_lower not in ("json", "text"):
            raise ValueError(f"Invalid log format '{v}'. Must be 'json' or 'text'")
        return v_lower

    @field_validator("required_fields")
    @classmethod
    def validate_required_fields(cls, v):
        """Reject empty field names."""
        if any(not name or not name.strip() for name in v):
            raise ValueError("Required field names must be non-empty")
        return v

    @property
    def is_production(self) -> bool:
        """Whether settings describe a production deployment."""
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Override with environment variables.

    Returns:
        Settings: Application settings instance

    Example:
        >>> settings = get_settings()
        >>> print(settings.retry_attempts)
        3
    """
    return Settings()


def override_settings(**kwargs) -> Settings:
    """
    Create settings instance with overrides (for testing).

    Args:
        **kwargs: Setting overrides

    Returns:
        Settings: New settings instance

    Example:
        >>> settings = override_settings(retry_attempts=1, debug=True)
        >>> assert settings.retry_attempts == 1
    """
    return Settings(**kwargs)


def validate_config(settings: Optional[Settings] = None) -> None:
    """
    Check that all configuration required for the current environment is present.

    Args:
        settings: Settings to check (defaults to cached settings)

    Raises:
        ConfigurationError: If the API key is missing in production
    """
    settings = settings or get_settings()
    if settings.is_production and not settings.api_key:
        raise ConfigurationError(
            "API key is required in production. Set HEALTHBATCH_API_KEY.",
            environment=settings.environment,
        )
