"""
Configuration module for the Clerk Webhook Bridge.

This module provides environment variable configuration and settings management
using Pydantic Settings for type-safe configuration.
"""
import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class ClerkBridgeSettings(BaseSettings):
    """
    Configuration settings for the Clerk Webhook Bridge.

    All settings are loaded from environment variables with validation.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Required environment variables
    webhook_secret: str = Field(
        ...,
        description="Svix signing secret from Clerk Dashboard -> Webhooks (whsec_...)"
    )

    # Environment variables with defaults
    clerk_secret_key: str = Field(
        "",
        description="Clerk Backend API secret key; empty disables metadata sync"
    )

    clerk_api_url: str = Field(
        "https://api.clerk.com/v1",
        description="Base URL of the Clerk Backend API"
    )

    clerk_api_timeout: float = Field(
        10.0,
        description="Timeout in seconds for Clerk Backend API requests"
    )

    user_store_file: Path = Field(
        Path("/data/users.json"),
        description="JSON file path for the persistent user store"
    )

    log_level: str = Field(
        "INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @field_validator("webhook_secret")
    @classmethod
    def validate_webhook_secret(cls, v):
        """Reject blank signing secrets so verification can never be skipped."""
        if not v or not v.strip():
            raise ValueError("WEBHOOK_SECRET cannot be empty")
        return v.strip()

    @field_validator("clerk_secret_key")
    @classmethod
    def strip_secret_key(cls, v):
        return v.strip()

    @field_validator("clerk_api_url")
    @classmethod
    def validate_clerk_api_url(cls, v):
        """Validate Clerk API URL format."""
        if not v.startswith(("https://", "http://")):
            raise ValueError("CLERK_API_URL must be an HTTP(S) URL")
        return v.rstrip("/")

    @field_validator("clerk_api_timeout")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("CLERK_API_TIMEOUT must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @property
    def metadata_sync_enabled(self) -> bool:
        """Whether the Clerk user should receive the internal id back-reference."""
        return bool(self.clerk_secret_key)

    def ensure_data_directories(self) -> None:
        """Create the parent directory of the user store file if it doesn't exist."""
        self.user_store_file.parent.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


# Global settings instance
settings: Optional[ClerkBridgeSettings] = None


def _load_settings() -> ClerkBridgeSettings:
    try:
        loaded = ClerkBridgeSettings()
    except ValidationError as e:
        missing = ", ".join(
            str(error["loc"][0]).upper() for error in e.errors() if error.get("loc")
        )
        raise ConfigurationError(
            f"Invalid or missing configuration: {missing}. "
            "Add WEBHOOK_SECRET from Clerk Dashboard to the environment or .env"
        ) from e
    loaded.ensure_data_directories()
    return loaded


def get_settings() -> ClerkBridgeSettings:
    """
    Get the global settings instance, creating it if necessary.

    Returns:
        ClerkBridgeSettings: The global settings instance

    Raises:
        ConfigurationError: If required environment variables are missing or invalid
    """
    global settings
    if settings is None:
        settings = _load_settings()
    return settings


def reload_settings() -> ClerkBridgeSettings:
    """
    Force reload settings from environment variables.

    This is useful for testing or when environment variables change.

    Returns:
        ClerkBridgeSettings: New settings instance
    """
    global settings
    settings = _load_settings()
    return settings
