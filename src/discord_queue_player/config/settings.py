"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.constants import AudioConstants, LimitConstants


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )


class AudioSettings(BaseModel):
    """Audio playback and track lookup configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default_volume: float = Field(default=AudioConstants.DEFAULT_VOLUME, gt=0.0, le=100.0)
    search_limit: int = Field(default=LimitConstants.SEARCH_RESULT_LIMIT, ge=1, le=25)
    selection_timeout_seconds: float = Field(
        default=LimitConstants.SELECTION_TIMEOUT_SECONDS,
        gt=0.0,
        le=300.0,
        validation_alias=AliasChoices("selection_timeout_seconds", "selection_timeout"),
    )
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": AudioConstants.FFMPEG_BEFORE_OPTIONS_DEFAULT,
            "options": AudioConstants.FFMPEG_OPTIONS_DEFAULT,
        }
    )
    ffmpeg_executable: str = AudioConstants.FFMPEG_EXECUTABLE
    ytdlp_format: str = AudioConstants.YTDLP_FORMAT_DEFAULT
    connect_timeout_seconds: float = Field(
        default=AudioConstants.CONNECT_TIMEOUT_SECONDS, gt=0.0, le=60.0
    )


class LyricsSettings(BaseModel):
    """Lyrics lookup configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(
        default="https://api.lyrics.ovh",
        validation_alias=AliasChoices("base_url", "lyrics_url"),
    )
    timeout_seconds: float = Field(default=10.0, gt=0.0, le=60.0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Lyrics base URL must start with http:// or https://")
        return v.rstrip("/")


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX (nested with prefix)
    - AUDIO__DEFAULT_VOLUME, AUDIO__SEARCH_LIMIT, etc.
    - LYRICS__BASE_URL, LYRICS__TIMEOUT_SECONDS
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    lyrics: LyricsSettings = Field(default_factory=LyricsSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
