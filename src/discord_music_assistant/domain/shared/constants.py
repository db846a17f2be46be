"""Centralized constants for external tools, chat limits and shared values.

This module provides reusable constants that reduce magic strings and improve maintainability.
"""

from __future__ import annotations


class ConfigKeys:
    """Environment variable key names.

    Pydantic Settings already provides type-safe access; these constants
    keep raw environment lookups consistent.
    """

    NO_COLOR = "NO_COLOR"


class AudioConstants:
    """Download and transcode tool configuration."""

    # yt-dlp (run as ``python -m yt_dlp``)
    YTDLP_MODULE = "yt_dlp"
    YTDLP_AUDIO_FORMAT = "mp3"
    YTDLP_AUDIO_QUALITY = "0"
    DOWNLOAD_EXTENSION = ".mp3"

    # ffmpeg second pass
    FFMPEG_EXECUTABLE = "ffmpeg"
    OPUS_CODEC = "libopus"
    OPUS_CONTAINER = "opus"
    TRANSCODED_SUFFIX = "_converted.opus"

    # Polling while the downloaded file appears on disk
    FILE_POLL_INTERVAL_SECONDS = 1.0


class GenerationConstants:
    """Generation backend wire format."""

    GENERATE_PATH = "/api/generate"
    DEFAULT_BASE_URL = "http://localhost:11434"
    DEFAULT_MODEL = "gemma3:4b-it-qat"
    DEFAULT_SYSTEM_PROMPT = (
        "You are a helpful Discord bot assistant. Keep all responses under 2000 "
        "characters to fit Discord message limits. Be concise but helpful."
    )


class ChatLimits:
    """Discord message limits used by the streaming reply writer."""

    MESSAGE_LIMIT = 1950
    MIN_BREAK_RATIO = 0.7
    SENTENCE_ENDINGS = (".", "?", "!")
    RATE_LIMIT_ATTEMPTS = 3
    RATE_LIMIT_BASE_DELAY = 1.0
    RATE_LIMIT_MAX_DELAY = 10.0
    HTTP_TOO_MANY_REQUESTS = 429


class DiscordEmbedLimits:
    """Discord embed size limits."""

    TITLE = 256
    DESCRIPTION = 4096
    FIELDS = 25
    FIELD_NAME = 256
    FIELD_VALUE = 1024
    FOOTER = 2048


class UIConstants:
    """Presentation constants shared by cogs."""

    QUEUE_PREVIEW_SIZE = 10
    COLOR_SUCCESS = 0x00FF00
    COLOR_INFO = 0x0099FF
    COLOR_ERROR = 0xFF0000
    COLOR_WARNING = 0xFFA500
    INVITE_PERMISSIONS = 2147483648
    INVITE_URL = (
        "https://discord.com/api/oauth2/authorize?client_id={client_id}"
        "&permissions={permissions}&scope=bot%20applications.commands"
    )


class LogLevels:
    """Valid logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    ALL = frozenset({DEBUG, INFO, WARNING, ERROR, CRITICAL})
