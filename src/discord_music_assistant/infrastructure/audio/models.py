"""Pydantic models for yt-dlp data and external tool configuration.

These are infrastructure-specific models for parsing external yt-dlp data
and building the option sets handed to yt-dlp and ffmpeg.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, field_validator

from discord_music_assistant.domain.shared.constants import AudioConstants
from discord_music_assistant.domain.shared.types import NonEmptyStr, PositiveInt

DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10


# ── Pydantic models for yt-dlp data ────────────────────────────────────


class YtDlpVideoInfo(BaseModel):
    """Trimmed yt-dlp extraction result.

    Extra fields from yt-dlp are silently ignored. Before-validators turn
    empty or non-string text fields into None; duration fields are kept raw
    and normalized later together with the other duration sources.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    title: NonEmptyStr | None = None
    webpage_url: NonEmptyStr | None = None
    url: NonEmptyStr | None = None
    thumbnail: NonEmptyStr | None = None
    duration: Any = None
    duration_string: Any = None

    @field_validator("id", "title", "webpage_url", "url", "thumbnail", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @property
    def page_url(self) -> str | None:
        return self.webpage_url or self.url

    def to_metadata(self) -> dict[str, Any]:
        """Map onto the search metadata keys songs are built from."""
        return {
            "id": self.id,
            "title": self.title,
            "url": self.page_url,
            "thumbnail": self.thumbnail,
            "duration_in_sec": self.duration,
            "duration_raw": self.duration_string,
        }


# ── Tool option models ─────────────────────────────────────────────────


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    default_search: NonEmptyStr = "ytsearch"
    forceipv4: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False


class TranscodeConfig(BaseModel):
    """ffmpeg settings for the voice-ready Opus pass."""

    model_config = ConfigDict(frozen=True)

    executable: NonEmptyStr = AudioConstants.FFMPEG_EXECUTABLE
    codec: NonEmptyStr = AudioConstants.OPUS_CODEC
    bitrate: NonEmptyStr = "128k"
    sample_rate: PositiveInt = 48000
    channels: PositiveInt = 2
    container: NonEmptyStr = AudioConstants.OPUS_CONTAINER

    def build_args(self, source: str, destination: str) -> list[str]:
        return [
            "-i",
            source,
            "-c:a",
            self.codec,
            "-b:a",
            self.bitrate,
            "-ar",
            str(self.sample_rate),
            "-ac",
            str(self.channels),
            "-f",
            self.container,
            "-y",
            destination,
        ]
