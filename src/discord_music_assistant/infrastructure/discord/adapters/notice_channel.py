"""Discord text channel adapter for playback notices."""

from __future__ import annotations

import discord

from discord_music_assistant.application.interfaces.notice_channel import NoticeChannel
from discord_music_assistant.domain.shared.content import MessageContent
from discord_music_assistant.infrastructure.discord.adapters.embeds import render_kwargs


class DiscordNoticeChannel(NoticeChannel):
    def __init__(self, channel: discord.abc.Messageable) -> None:
        self._channel = channel

    @property
    def channel(self) -> discord.abc.Messageable:
        return self._channel

    async def send(self, content: str | MessageContent) -> None:
        await self._channel.send(**render_kwargs(content))  # type: ignore[arg-type]
