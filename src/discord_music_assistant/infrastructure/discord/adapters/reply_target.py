"""Discord message adapter for streamed answers."""

from __future__ import annotations

import logging

import discord

from discord_music_assistant.application.interfaces.reply_target import ReplyTarget
from discord_music_assistant.domain.shared.constants import ChatLimits
from discord_music_assistant.domain.shared.exceptions import RateLimitedError

logger = logging.getLogger(__name__)


def _retry_after(error: discord.HTTPException) -> float | None:
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) or {}
    value = headers.get("Retry-After")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class DiscordReplyTarget(ReplyTarget):
    """Edits the latest message of an answer and continues it in the same channel.

    Discord's 429 responses surface as :class:`RateLimitedError`; everything
    else propagates unchanged.
    """

    def __init__(self, message: discord.Message) -> None:
        self._message = message

    @property
    def message(self) -> discord.Message:
        return self._message

    async def edit(self, content: str) -> None:
        try:
            self._message = await self._message.edit(content=content)
        except discord.HTTPException as exc:
            if exc.status == ChatLimits.HTTP_TOO_MANY_REQUESTS:
                raise RateLimitedError(_retry_after(exc)) from exc
            raise

    async def follow_up(self, content: str) -> None:
        try:
            self._message = await self._message.channel.send(content)
        except discord.HTTPException as exc:
            if exc.status == ChatLimits.HTTP_TOO_MANY_REQUESTS:
                raise RateLimitedError(_retry_after(exc)) from exc
            raise
