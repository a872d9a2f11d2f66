"""Centralized configuration management for the image chat gateway.

This module provides a single source of truth for all configuration values,
using pydantic-settings for environment variable loading and validation.

Design Principles:
    - Environment Variables: All settings can be overridden via environment variables
    - Sensible Defaults: All settings have production-ready defaults
    - Validation: Pydantic validates all values at load time
    - Singleton Pattern: Cached settings instance via lru_cache

Configuration Sections:
    - BackendConfig: Upstream image generation service
    - GenerationConfig: Default and published model identifiers
    - RetryConfig: Whole-pipeline retry bound and delay
    - ClientConfig: Reference image download client
    - APIConfig: FastAPI server configuration

Environment Variable Prefixes:
    - BACKEND_*, GENERATION_*, RETRY_*, CLIENT_*, API_*

Usage:
    from image_chat.core.config import settings

    base_url = settings.backend.base_url
    max_retries = settings.retry.max_retries
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackendConfig(BaseSettings):
    """Upstream image generation service configuration.

    Attributes:
        base_url: Base URL of an OpenAI-images compatible upstream. Must start
            with http:// or https://. Trailing slashes are stripped.
        timeout: Generation request timeout in seconds. Generation is slow,
            so the default is generous.
    """

    model_config = SettingsConfigDict(
        env_prefix="BACKEND_",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(default="https://api.cometapi.com/v1", description="Upstream base URL")
    timeout: float = Field(default=600.0, ge=1.0, le=3600.0, description="Request timeout (seconds)")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            msg = "base_url must start with http:// or https://"
            raise ValueError(msg)
        return v.rstrip("/")


class GenerationConfig(BaseSettings):
    """Model identifiers used when interpreting completion requests."""

    model_config = SettingsConfigDict(
        env_prefix="GENERATION_",
        case_sensitive=False,
        extra="ignore",
    )

    default_model: str = Field(
        default="doubao-seedream-4-5-251128",
        min_length=1,
        description="Model used when the request names none",
    )
    supported_models: str = Field(
        default="doubao-seedream-4-5-251128,doubao-seedream-4-0-250828",
        description="Comma separated models published by /v1/models",
    )

    @property
    def model_ids(self) -> list[str]:
        return [name.strip() for name in self.supported_models.split(",") if name.strip()]


class RetryConfig(BaseSettings):
    """Whole-pipeline retry configuration.

    Attributes:
        max_retries: Additional attempts after the first failure. 0 disables
            retrying without bypassing the retry wrapper.
        delay_seconds: Fixed delay between attempts.
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRY_",
        case_sensitive=False,
        extra="ignore",
    )

    max_retries: int = Field(default=0, ge=0, le=10, description="Max retry attempts")
    delay_seconds: float = Field(default=5.0, ge=0.0, le=300.0, description="Retry delay (seconds)")


class ClientConfig(BaseSettings):
    """Reference image download client configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CLIENT_",
        case_sensitive=False,
        extra="ignore",
    )

    fetch_timeout: float = Field(
        default=30.0, ge=1.0, le=600.0, description="Reference image download timeout (seconds)"
    )
    max_connections: int = Field(default=50, ge=1, le=1000, description="Max HTTP connections")


class APIConfig(BaseSettings):
    """FastAPI server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="0.0.0.0", description="API server host")
    port: int = Field(default=8000, ge=1, le=65535, description="API server port")
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", description="Logging level"
    )
    title: str = Field(default="Image Chat Gateway", description="API title")
    version: str = Field(default="1.0.0", description="API version")
    rate_limit: str = Field(default="60/minute", description="Completion route rate limit")
    cors_origins: str = Field(default="*", description="Allowed CORS origins")


class Settings(BaseSettings):
    """Root settings class containing all configuration sections.

    Configuration is loaded from:
        1. Environment variables (with appropriate prefixes)
        2. .env file (if present in the working directory)
        3. Default values (if not set)

    Note:
        Settings are loaded once at module import and cached. Changes to
        environment variables require application restart to take effect.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    backend: BackendConfig = Field(default_factory=BackendConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    @classmethod
    @lru_cache(maxsize=1)
    def get_settings(cls) -> Settings:
        """Get cached settings instance (singleton pattern)."""
        return cls()


# Global settings instance
settings = Settings.get_settings()

__all__ = [
    "APIConfig",
    "BackendConfig",
    "ClientConfig",
    "GenerationConfig",
    "RetryConfig",
    "Settings",
    "settings",
]
