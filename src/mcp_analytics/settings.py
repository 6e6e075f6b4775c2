"""Type-safe application settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with automatic validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    # ==========================================================================
    # Analytics (PostHog)
    # ==========================================================================
    posthog_api_key: str | None = Field(None, description="PostHog project API key")
    posthog_host: str | None = Field(None, description="PostHog host (defaults to the SDK host)")
    analytics_anonymize: bool = Field(True, description="Redact tool arguments in error events")
    feature_flag_timeout_seconds: float = Field(3.0, description="Upper bound for each startup flag lookup")

    @field_validator("posthog_api_key", "posthog_host")
    @classmethod
    def blank_as_none(cls, v: str | None) -> str | None:
        """Treat empty strings from the environment as unset."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("feature_flag_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("FEATURE_FLAG_TIMEOUT_SECONDS must be positive")
        return v

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    server_name: str = Field("mcp-analytics-server", description="Name advertised to MCP clients")
    server_version: str = Field("1.0.0", description="Version advertised to MCP clients")
    environment: str = Field("development", description="Environment (development/production/test)")

    # ==========================================================================
    # Logging
    # ==========================================================================
    log_level: str = Field("INFO", description="Root log level")
    log_format: Literal["text", "json"] = Field("text", description="stderr log format")

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @property
    def analytics_enabled(self) -> bool:
        """Check if an analytics backend is configured."""
        return self.posthog_api_key is not None


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
