"""Configuration loading for the IdeaHub review-access system.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Store configuration
    store_sqlite_path: str = Field(
        default="./data/ideahub.db",
        description="SQLite database file path",
    )
    store_pool_size: int = Field(
        default=5,
        description="Number of pooled SQLite connections",
    )

    # Blob storage configuration
    blob_backend: Literal["local", "http"] = Field(
        default="local",
        description="Attachment body storage backend type",
    )
    blob_local_dir: str = Field(
        default="./data/blobs",
        description="Directory for the local blob backend",
    )
    blob_container_url: str = Field(
        default="",
        description="Container URL for the HTTP blob backend",
    )
    blob_sas_token: str = Field(
        default="",
        description="Shared access signature appended to blob requests",
    )
    blob_timeout_seconds: float = Field(
        default=30.0,
        description="Request timeout for the HTTP blob backend",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["cli", "server"] = Field(
        default="cli",
        description="Run mode",
    )
    cli_acting_user: str = Field(
        default="cli",
        description="Acting user recorded for CLI grant changes without an explicit one",
    )

    # Health server configuration
    http_host: str = Field(
        default="0.0.0.0",
        description="Host to listen on for the health server",
    )
    http_port: int = Field(
        default=8080,
        description="Port to listen on for the health server",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging",
    )

    @field_validator("store_pool_size")
    @classmethod
    def validate_pool_size(cls, v: int) -> int:
        """Ensure pool size is positive."""
        if v <= 0:
            raise ValueError("store_pool_size must be positive")
        return v

    @field_validator("blob_timeout_seconds")
    @classmethod
    def validate_blob_timeout(cls, v: float) -> float:
        """Ensure blob timeout is positive."""
        if v <= 0:
            raise ValueError("blob_timeout_seconds must be positive")
        return v

    @field_validator("blob_container_url")
    @classmethod
    def validate_container_url(cls, v: str) -> str:
        """Ensure a configured container URL is an http(s) URL."""
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("blob_container_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("http_port")
    @classmethod
    def validate_http_port(cls, v: int) -> int:
        """Ensure HTTP port is in valid range."""
        if v <= 0 or v > 65535:
            raise ValueError("http_port must be between 1 and 65535")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
