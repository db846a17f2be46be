"""Core domain entities for the music bounded context."""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from discord_music_assistant.domain.music.normalization import format_duration, normalize_duration
from discord_music_assistant.domain.shared.messages import ErrorMessages
from discord_music_assistant.domain.shared.types import (
    DurationSeconds,
    NonEmptyStr,
    SongTitleStr,
)

UNKNOWN_TITLE = "Unknown Title"


class Song(BaseModel):
    """Immutable value object representing a playable song."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: NonEmptyStr
    title: SongTitleStr
    url: NonEmptyStr
    duration: DurationSeconds = 0
    thumbnail: str | None = None
    requested_by: NonEmptyStr

    @field_validator("id", "url")
    @classmethod
    def _reject_blank(cls, v: str, info: ValidationInfo) -> str:
        if not v.strip():
            if info.field_name == "url":
                raise ValueError(ErrorMessages.EMPTY_SONG_URL)
            raise ValueError(ErrorMessages.EMPTY_SONG_ID)
        return v

    @property
    def duration_formatted(self) -> str:
        return format_duration(self.duration)

    @property
    def download_key(self) -> str:
        """File-system safe key for the download cache."""
        return "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in self.id)

    @classmethod
    def from_metadata(cls, metadata: dict[str, Any], requested_by: str) -> Song:
        """Build the canonical song record from raw search metadata.

        This is the single place where loosely-typed upstream fields are mapped
        onto the song model; everything downstream relies on its guarantees.
        """
        title = metadata.get("title")
        if not isinstance(title, str) or not title.strip():
            title = UNKNOWN_TITLE

        song_id = metadata.get("id")
        if not isinstance(song_id, str) or not song_id.strip():
            song_id = str(int(time.time() * 1000))

        thumbnail = metadata.get("thumbnail")
        if not isinstance(thumbnail, str) or not thumbnail.strip():
            thumbnail = None

        return cls(
            id=song_id,
            title=title[:500],
            url=str(metadata.get("url") or ""),
            duration=normalize_duration(
                duration_in_sec=metadata.get("duration_in_sec"),
                duration_raw=metadata.get("duration_raw"),
                duration=metadata.get("duration"),
            ),
            thumbnail=thumbnail,
            requested_by=requested_by,
        )
