"""
Configuration management for the visitflow application.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management.
"""

from typing import Optional

import os
from pathlib import Path

from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenAISettings(BaseSettings):
    """OpenAI API configuration settings."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    api_key: str = Field(default="", description="OpenAI API key")
    timeout_seconds: float = Field(default=60.0, description="Request timeout for OpenAI calls")

    @validator("api_key")
    def validate_api_key(cls, v: str) -> str:
        """Validate OpenAI API key format (optional; voice is disabled without it)."""
        if v and not v.startswith("sk-"):
            raise ValueError("OpenAI API key must start with 'sk-'")
        return v


class VoiceSettings(BaseSettings):
    """Voice capture and extraction settings."""

    model_config = SettingsConfigDict(env_prefix="VOICE_")

    enabled: bool = Field(default=True, description="Feature flag for voice-assisted intake")
    max_audio_mb: int = Field(default=25, description="Maximum uploaded audio size in MB")
    transcription_model: str = Field(default="whisper-1", description="Speech-to-text model")
    extraction_model: str = Field(default="gpt-4o", description="Model used for field extraction")
    extraction_temperature: float = Field(default=0.1, description="Temperature for extraction")
    language: str = Field(default="en", description="Transcription language")

    @validator("max_audio_mb")
    def validate_max_size(cls, v: int) -> int:
        if v <= 0 or v > 100:
            raise ValueError("Max audio size must be between 1 and 100 MB")
        return v

    @validator("extraction_temperature")
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError("Temperature must be between 0.0 and 2.0")
        return v


class QueueSettings(BaseSettings):
    """Queue listing settings."""

    model_config = SettingsConfigDict(env_prefix="QUEUE_")

    default_limit: int = Field(default=200, description="Maximum entries returned by a queue read")

    @validator("default_limit")
    def validate_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Queue limit must be positive")
        return v


class OperatorSettings(BaseSettings):
    """Per-request operator context settings."""

    model_config = SettingsConfigDict(env_prefix="OPERATOR_")

    require_header: bool = Field(default=False, description="Reject requests without X-Operator-ID")
    default_id: str = Field(default="system", description="Operator ID used when the header is absent")
    default_role: str = Field(default="NURSE", description="Operator role used when the header is absent")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")

    @validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @validator("format")
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ["json", "text"]:
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="visitflow", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=8000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")
    cors_origins: str = Field(default="*", description="Comma-separated allowed CORS origins")

    # Sub-settings
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    voice: VoiceSettings = Field(default_factory=VoiceSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    operator: OperatorSettings = Field(default_factory=OperatorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        # Override sub-settings with environment variables
        self.openai = OpenAISettings()
        self.voice = VoiceSettings()
        self.queue = QueueSettings()
        self.operator = OperatorSettings()
        self.logging = LoggingSettings()

    @validator("app_env")
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @validator("port")
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @property
    def cors_origin_list(self) -> list:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def voice_ai_available(self) -> bool:
        """Voice extraction needs both the feature flag and an API key."""
        return self.voice.enabled and bool(self.openai.api_key)

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_testing(self) -> bool:
        return self.app_env == "testing"


# Global settings instance (loaded after attempting to read .env)
_settings: Optional[Settings] = None


def _load_env_file_if_available() -> None:
    """Best-effort load of .env by searching current and parent directories.

    Already-set environment variables are never overridden.
    """
    from dotenv import load_dotenv

    cwd = Path(os.getcwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / ".env"
        if candidate.exists():
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
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
