"""Configuration management for Email Assistant.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the EMAIL_ASSISTANT_ prefix (e.g., EMAIL_ASSISTANT_GMAIL_ACCESS_TOKEN).
    """

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_ASSISTANT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Gmail Configuration
    gmail_access_token: str | None = Field(
        default=None,
        description="OAuth bearer token for the Gmail API, issued by the sign-in provider",
    )
    gmail_token_path: Path = Field(
        default=Path("token.json"),
        description="Authorized-user token file, used when no access token is given",
    )
    gmail_scope: str = Field(
        default="https://www.googleapis.com/auth/gmail.modify",
        description=(
            "OAuth scope used when loading the token file. Reading, marking as read "
            "and sending replies all fall under gmail.modify."
        ),
    )
    gmail_max_results: int = Field(
        default=20,
        description="Number of messages fetched for a mailbox listing",
    )
    gmail_timeout: int = Field(
        default=30,
        description="Socket timeout for Gmail API requests in seconds",
    )
    gmail_api_endpoint: str | None = Field(
        default=None,
        description="Override for the Gmail API base URL, e.g. a local test server",
    )

    # Message decoding
    max_part_depth: int = Field(
        default=32,
        description="Deepest MIME nesting level inspected when extracting a message body",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
