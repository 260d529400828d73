"""
Configuration management for MedVoice.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management.
"""

import json
import os
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AISettings(BaseSettings):
    """Azure OpenAI configuration settings and gateway retry policy."""

    model_config = SettingsConfigDict(env_prefix="AI_")

    endpoint: str = Field(default="", description="Azure OpenAI endpoint URL")
    api_key: str = Field(default="", description="Azure OpenAI API key")
    api_version: str = Field(default="2024-12-01-preview", description="Azure OpenAI API version")
    fast_deployment: str = Field(default="gpt-4o-mini", description="Deployment used for the Fast model tier")
    deep_deployment: str = Field(default="gpt-4o", description="Deployment used for the Deep model tier")
    audio_deployment: str = Field(
        default="gpt-4o-audio-preview",
        description="Deployment used for requests carrying inline audio (empty uses the tier deployment)",
    )
    temperature: float = Field(default=0.2, description="Sampling temperature")
    max_tokens: Optional[int] = Field(default=4000, description="Maximum tokens per response")
    timeout_seconds: float = Field(default=120.0, description="Per-request timeout")
    max_attempts: int = Field(default=3, description="Total attempts per call on rate limiting")
    base_delay_seconds: float = Field(default=1.0, description="Initial backoff delay")
    max_delay_seconds: float = Field(default=8.0, description="Backoff delay ceiling")

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Validate endpoint format (empty is allowed until a client is built)."""
        if v and not v.startswith("https://"):
            raise ValueError("AI endpoint must start with 'https://'")
        return v

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Validate temperature."""
        if not 0.0 <= v <= 2.0:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return v

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        """Validate attempt count."""
        if not 1 <= v <= 10:
            raise ValueError("max_attempts must be between 1 and 10")
        return v


class AudioSettings(BaseSettings):
    """Consultation audio intake settings."""

    model_config = SettingsConfigDict(env_prefix="AUDIO_")

    max_size_mb: int = Field(default=25, description="Maximum audio payload size in MB")
    allowed_mime_types: Annotated[List[str], NoDecode] = Field(
        default=["audio/wav", "audio/x-wav", "audio/wave", "audio/mpeg", "audio/mp3"],
        description="Accepted audio MIME types",
    )

    @field_validator("max_size_mb")
    @classmethod
    def validate_max_size(cls, v: int) -> int:
        """Validate max payload size."""
        if v <= 0 or v > 500:
            raise ValueError("Max audio size must be between 1 and 500 MB")
        return v

    @field_validator("allowed_mime_types", mode="before")
    @classmethod
    def parse_mime_types(cls, v):
        """Parse MIME types from a JSON list or a comma separated string."""
        if isinstance(v, str):
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v.strip()]
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


class PipelineSettings(BaseSettings):
    """Consultation pipeline behaviour."""

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    summarize: bool = Field(
        default=False,
        description="Run the compact summary alongside extraction and use it as generation source",
    )
    thorough_by_default: bool = Field(default=False, description="Use the Deep tier unless the caller says otherwise")


class ProviderSettings(BaseSettings):
    """Default healthcare provider record merged into generated documents."""

    model_config = SettingsConfigDict(env_prefix="PROVIDER_")

    name: str = Field(default="", description="Provider or physician name")
    address: str = Field(default="", description="Practice address")
    registration_id: str = Field(default="", description="Organisation identifier (IČO)")
    secondary_registration_id: str = Field(default="", description="Facility identifier (IČP)")
    specialization_code: str = Field(default="", description="Specialization code (odbornost)")
    contact: str = Field(default="", description="Phone or e-mail")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="MedVoice", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=8000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")

    # Sub-settings
    ai: AISettings = Field(default_factory=AISettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"


# Global settings instance (loaded after attempting to read .env)
_settings: Optional[Settings] = None


def _load_env_file_if_available() -> None:
    """Best-effort load of .env by searching current and parent directories.

    This helps when the working directory isn't the project root and
    pydantic's env_file doesn't get resolved as expected.
    """
    from dotenv import load_dotenv

    cwd = Path(os.getcwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / ".env"
        if candidate.exists():
            # Do not override already-set environment variables
            load_dotenv(dotenv_path=str(candidate), override=False)
            break


def get_settings() -> Settings:
    """Get application settings instance (lazy-init with .env discovery)."""
    global _settings
    if _settings is None:
        _load_env_file_if_available()
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
