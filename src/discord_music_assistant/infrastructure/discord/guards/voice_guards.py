"""Reusable guard functions for Discord music commands.

These are free functions over discord.py objects so any cog can use them
without depending on a specific cog instance.
"""

from __future__ import annotations

import discord
from discord.ext import commands

from discord_music_assistant.application.commands.enqueue import VoiceChannelSnapshot
from discord_music_assistant.domain.shared.messages import DiscordUIMessages


def get_member(ctx: commands.Context) -> discord.Member | None:
    """Return the invoking guild member, or None outside a guild."""
    if ctx.guild is None:
        return None
    author = ctx.author
    return author if isinstance(author, discord.Member) else None


def build_voice_snapshot(
    member: discord.Member, bot_member: discord.Member | None
) -> VoiceChannelSnapshot | None:
    """Capture the member's voice channel and the permissions relevant to joining it.

    Returns None when the member is not in a voice channel.
    """
    if member.voice is None or member.voice.channel is None:
        return None

    channel = member.voice.channel
    member_perms = channel.permissions_for(member)
    if bot_member is not None:
        bot_perms = channel.permissions_for(bot_member)
        bot_can_connect, bot_can_speak = bot_perms.connect, bot_perms.speak
    else:
        bot_can_connect = bot_can_speak = False

    return VoiceChannelSnapshot(
        id=channel.id,
        name=channel.name,
        member_count=len(channel.members),
        user_limit=channel.user_limit or 0,
        member_can_connect=member_perms.connect,
        bot_can_connect=bot_can_connect,
        bot_can_speak=bot_can_speak,
    )


async def send_reply(ctx: commands.Context, message: str, *, ephemeral: bool = False) -> None:
    """Reply to a prefix or slash invocation; ``ephemeral`` only applies to slash."""
    await ctx.send(message, ephemeral=ephemeral)


async def require_guild(ctx: commands.Context) -> int | None:
    """Return the guild id, or send the server-only notice and return None."""
    if ctx.guild is None:
        await send_reply(ctx, DiscordUIMessages.ERROR_SERVER_ONLY, ephemeral=True)
        return None
    return ctx.guild.id
