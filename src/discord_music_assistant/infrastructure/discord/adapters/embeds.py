"""Rendering of presentation-neutral message content as Discord embeds."""

from __future__ import annotations

import discord

from discord_music_assistant.domain.shared.constants import DiscordEmbedLimits, UIConstants
from discord_music_assistant.domain.shared.content import MessageContent


def _clip(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def content_to_embed(content: MessageContent) -> discord.Embed:
    embed = discord.Embed(
        title=_clip(content.title, DiscordEmbedLimits.TITLE),
        description=_clip(content.description, DiscordEmbedLimits.DESCRIPTION) or None,
        color=content.color if content.color is not None else UIConstants.COLOR_INFO,
    )
    for item in content.fields[: DiscordEmbedLimits.FIELDS]:
        embed.add_field(
            name=_clip(item.name, DiscordEmbedLimits.FIELD_NAME),
            value=_clip(item.value, DiscordEmbedLimits.FIELD_VALUE),
            inline=item.inline,
        )
    if content.thumbnail:
        embed.set_thumbnail(url=content.thumbnail)
    if content.footer:
        embed.set_footer(text=_clip(content.footer, DiscordEmbedLimits.FOOTER))
    return embed


def render_kwargs(message: str | MessageContent) -> dict[str, object]:
    """Keyword arguments for ``send``/``edit`` carrying either text or an embed."""
    if isinstance(message, MessageContent):
        return {"embed": content_to_embed(message)}
    return {"content": message}
