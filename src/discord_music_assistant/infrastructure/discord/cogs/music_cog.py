"""Music commands: queueing, transport controls and the queue listing."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from discord import app_commands
from discord.ext import commands

from discord_music_assistant.application.commands.enqueue import EnqueueRequest
from discord_music_assistant.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)
from discord_music_assistant.infrastructure.discord.adapters.embeds import render_kwargs
from discord_music_assistant.infrastructure.discord.adapters.notice_channel import (
    DiscordNoticeChannel,
)
from discord_music_assistant.infrastructure.discord.guards.voice_guards import (
    build_voice_snapshot,
    get_member,
    require_guild,
)

if TYPE_CHECKING:
    from ....application.commands.results import CommandResult
    from ....application.services.playback_engine import PlaybackEngine
    from ....config.container import Container

logger = logging.getLogger(__name__)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def cog_load(self) -> None:
        logger.info(LogTemplates.COG_LOADED, type(self).__name__)

    async def cog_unload(self) -> None:
        logger.info(LogTemplates.COG_UNLOADED, type(self).__name__)

    @property
    def engine(self) -> PlaybackEngine:
        return self.container.playback_engine

    async def _send_result(self, ctx: commands.Context, result: CommandResult) -> None:
        # Failures stay private for slash invocations.
        await ctx.send(**render_kwargs(result.message), ephemeral=not result.success)  # type: ignore[arg-type]

    # ─────────────────────────────────────────────────────────────────
    # Queueing
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(
        name="play", aliases=["p", "music"], description="Play a song from YouTube"
    )
    @app_commands.describe(query="YouTube URL or search query")
    @commands.cooldown(1, 5, commands.BucketType.user)
    async def play(self, ctx: commands.Context, *, query: str = "") -> None:
        guild_id = await require_guild(ctx)
        if guild_id is None:
            return

        if not query.strip():
            await ctx.send(DiscordUIMessages.ERROR_MISSING_QUERY, ephemeral=True)
            return

        member = get_member(ctx)
        if member is None:
            await ctx.send(DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE, ephemeral=True)
            return

        # Resolution and the voice handshake can exceed the interaction deadline.
        await ctx.defer()

        request = EnqueueRequest(
            guild_id=guild_id,
            voice_channel=build_voice_snapshot(member, ctx.guild.me if ctx.guild else None),
            requested_by=member.display_name,
            query=query,
            notice_channel=DiscordNoticeChannel(ctx.channel),
        )
        result = await self.engine.enqueue(request)
        await self._send_result(ctx, result)

    @commands.hybrid_command(name="queue", aliases=["q", "list"], description="Show the music queue")
    @commands.cooldown(1, 5, commands.BucketType.user)
    async def queue(self, ctx: commands.Context) -> None:
        guild_id = await require_guild(ctx)
        if guild_id is None:
            return
        await self._send_result(ctx, self.engine.queue(guild_id))

    # ─────────────────────────────────────────────────────────────────
    # Transport Controls
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="skip", aliases=["s", "next"], description="Skip the current song")
    @commands.cooldown(1, 3, commands.BucketType.user)
    async def skip(self, ctx: commands.Context) -> None:
        guild_id = await require_guild(ctx)
        if guild_id is None:
            return
        await self._send_result(ctx, self.engine.skip(guild_id))

    @commands.hybrid_command(
        name="stop", aliases=["leave", "disconnect"], description="Stop music and clear the queue"
    )
    @commands.cooldown(1, 3, commands.BucketType.user)
    async def stop(self, ctx: commands.Context) -> None:
        guild_id = await require_guild(ctx)
        if guild_id is None:
            return
        await self._send_result(ctx, await self.engine.stop(guild_id))

    @commands.hybrid_command(name="pause", description="Pause the current song")
    @commands.cooldown(1, 3, commands.BucketType.user)
    async def pause(self, ctx: commands.Context) -> None:
        guild_id = await require_guild(ctx)
        if guild_id is None:
            return
        await self._send_result(ctx, self.engine.pause(guild_id))

    @commands.hybrid_command(
        name="resume", aliases=["r", "unpause"], description="Resume the current song"
    )
    @commands.cooldown(1, 3, commands.BucketType.user)
    async def resume(self, ctx: commands.Context) -> None:
        guild_id = await require_guild(ctx)
        if guild_id is None:
            return
        await self._send_result(ctx, self.engine.resume(guild_id))

    @commands.hybrid_command(name="volume", aliases=["vol", "v"], description="Set the music volume")
    @app_commands.describe(level="Volume level (0-100)")
    @commands.cooldown(1, 3, commands.BucketType.user)
    async def volume(self, ctx: commands.Context, level: int) -> None:
        guild_id = await require_guild(ctx)
        if guild_id is None:
            return
        await self._send_result(ctx, self.engine.set_volume(guild_id, level))

    @commands.hybrid_command(name="loop", aliases=["repeat"], description="Toggle loop mode")
    @commands.cooldown(1, 3, commands.BucketType.user)
    async def loop(self, ctx: commands.Context) -> None:
        guild_id = await require_guild(ctx)
        if guild_id is None:
            return
        await self._send_result(ctx, self.engine.toggle_loop(guild_id))


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
