"""Command object for queuing a song in a guild."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from discord_music_assistant.application.interfaces.notice_channel import NoticeChannel
from discord_music_assistant.domain.shared.types import (
    DiscordSnowflake,
    NonEmptyStr,
    NonNegativeInt,
)


class VoiceChannelSnapshot(BaseModel):
    """The requesting member's voice channel and the permissions that matter for joining it."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: DiscordSnowflake
    name: str = ""
    member_count: NonNegativeInt = 0
    user_limit: NonNegativeInt = 0
    member_can_connect: bool = True
    bot_can_connect: bool = True
    bot_can_speak: bool = True

    @property
    def is_full(self) -> bool:
        return self.user_limit > 0 and self.member_count >= self.user_limit


class EnqueueRequest(BaseModel):
    """Request to resolve a query and append the song to the guild's queue."""

    model_config = ConfigDict(frozen=True, strict=True, arbitrary_types_allowed=True)

    guild_id: DiscordSnowflake
    voice_channel: VoiceChannelSnapshot | None
    requested_by: NonEmptyStr
    query: NonEmptyStr
    notice_channel: NoticeChannel | None = None

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v
