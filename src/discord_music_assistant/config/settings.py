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

from ..domain.shared.constants import ChatLimits, GenerationConstants, LogLevels
from ..domain.shared.messages import ErrorMessages
from ..domain.shared.validators import validate_discord_snowflake, validate_http_url


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    client_id: str | None = Field(
        default=None, validation_alias=AliasChoices("client_id", "application_id")
    )
    activity: str = Field(default="!help", max_length=128)
    test_guild_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("test_guild_ids", "test_guilds")
    )
    sync_on_startup: bool = False

    @field_validator("test_guild_ids", mode="before")
    @classmethod
    def validate_snowflake_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        # Convert list to tuple if needed (from JSON array in env vars)
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            validate_discord_snowflake(snowflake)
        return v

    @field_validator("client_id")
    @classmethod
    def validate_client_id(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        validate_discord_snowflake(int(v))
        return v.strip()


class AudioSettings(BaseModel):
    """Audio acquisition and playback configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    download_dir: str = Field(
        default="downloads", validation_alias=AliasChoices("download_dir", "downloads_dir")
    )
    default_volume: float = Field(default=1.0, ge=0.0, le=1.0)
    ytdlp_format: str = "bestaudio/best"
    transcode_enabled: bool = True
    opus_bitrate: str = Field(default="128k", pattern=r"^\d+k$")
    sample_rate: int = Field(default=48000, ge=8000, le=192000)
    channels: int = Field(default=2, ge=1, le=2)
    file_wait_seconds: int = Field(default=30, ge=1, le=600)
    queue_preview_size: int = Field(default=10, ge=1, le=25)


class VoiceSettings(BaseModel):
    """Voice connection retry and auto-leave configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    connect_attempts: int = Field(default=3, ge=1, le=10)
    ready_timeout: float = Field(default=15.0, gt=0.0)
    rejoin_timeout: float = Field(default=5.0, gt=0.0)
    connecting_timeout: float = Field(default=5.0, gt=0.0)
    backoff_base: float = Field(default=1.0, ge=0.0)
    backoff_cap: float = Field(default=5.0, ge=0.0)
    reconnect_window: float = Field(default=10.0, gt=0.0)
    empty_channel_timeout: float = Field(
        default=60.0,
        gt=0.0,
        validation_alias=AliasChoices("empty_channel_timeout", "idle_timeout"),
    )


class AISettings(BaseModel):
    """Generation backend (Ollama) configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    base_url: str = Field(
        default=GenerationConstants.DEFAULT_BASE_URL,
        validation_alias=AliasChoices("base_url", "ollama_url"),
    )
    model: str = Field(
        default=GenerationConstants.DEFAULT_MODEL,
        min_length=1,
        validation_alias=AliasChoices("model", "ollama_model"),
    )
    system_prompt: str = GenerationConstants.DEFAULT_SYSTEM_PROMPT
    request_timeout: float = Field(default=30.0, gt=0.0)
    max_retries: int = Field(default=3, ge=0, le=10)
    retry_backoff: float = Field(default=2.0, ge=0.0)
    success_delay: float = Field(default=2.0, ge=0.0)
    failure_delay: float = Field(default=5.0, ge=0.0)
    cache_ttl_seconds: int = Field(
        default=300, ge=0, validation_alias=AliasChoices("cache_ttl_seconds", "cache_ttl")
    )
    cache_max_size: int = Field(default=100, ge=1)
    replay_delay: float = Field(default=0.05, ge=0.0)
    message_limit: int = Field(default=ChatLimits.MESSAGE_LIMIT, ge=100, le=2000)
    update_interval: float = Field(default=0.1, ge=0.0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        return validate_http_url(v)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX, DISCORD__CLIENT_ID (nested)
    - AUDIO__DOWNLOAD_DIR, VOICE__EMPTY_CHANNEL_TIMEOUT, etc. (nested)
    - AI__BASE_URL, AI__MODEL (nested; also accepted as AI__OLLAMA_URL, AI__OLLAMA_MODEL)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        strict=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    voice: VoiceSettings = Field(default_factory=VoiceSettings)
    ai: AISettings = Field(default_factory=AISettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        v_upper = v.upper()
        if v_upper not in LogLevels.ALL:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=sorted(LogLevels.ALL))
            )
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
