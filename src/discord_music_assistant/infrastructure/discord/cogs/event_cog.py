"""Discord event listeners for lifecycle, voice state and command outcomes."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_music_assistant.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


def _channel_id(state: discord.VoiceState) -> int | None:
    return state.channel.id if state.channel is not None else None


class EventCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self._resumed_logged_once = False
        self._command_started: dict[int, float] = {}

    async def cog_load(self) -> None:
        logger.info(LogTemplates.COG_LOADED, type(self).__name__)

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_connect(self) -> None:
        logger.info(LogTemplates.GATEWAY_CONNECTED)

    @commands.Cog.listener()
    async def on_disconnect(self) -> None:
        logger.warning(LogTemplates.GATEWAY_DISCONNECTED)

    @commands.Cog.listener()
    async def on_resumed(self) -> None:
        if not self._resumed_logged_once:
            logger.info(LogTemplates.GATEWAY_RESUMED)
            self._resumed_logged_once = True

    @commands.Cog.listener()
    async def on_guild_join(self, guild: discord.Guild) -> None:
        logger.info(LogTemplates.GUILD_JOINED, guild.name, guild.id)

    @commands.Cog.listener()
    async def on_guild_remove(self, guild: discord.Guild) -> None:
        logger.info(LogTemplates.GUILD_LEFT, guild.name, guild.id)
        try:
            await self.container.playback_engine.stop(guild.id)
        except Exception as e:
            logger.warning(LogTemplates.GUILD_LEFT_CLEANUP_FAILED, guild.id, e)

    # ─────────────────────────────────────────────────────────────────
    # Voice Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        guild_id = member.guild.id
        before_id, after_id = _channel_id(before), _channel_id(after)

        if self.bot.user is not None and member.id == self.bot.user.id:
            if before_id != after_id:
                logger.debug(LogTemplates.BOT_VOICE_MOVED, guild_id, before_id, after_id)
            self.container.voice_transport.handle_bot_voice_update(guild_id, after_id)
            return

        if member.bot or before_id == after_id:
            return

        engine = self.container.playback_engine
        if before_id is not None:
            engine.handle_member_left(guild_id, before_id)
        if after_id is not None:
            engine.handle_member_joined(guild_id, after_id)

    # ─────────────────────────────────────────────────────────────────
    # Command Outcomes
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_command(self, ctx: commands.Context) -> None:
        self._command_started[id(ctx)] = time.perf_counter()

    @commands.Cog.listener()
    async def on_command_completion(self, ctx: commands.Context) -> None:
        started = self._command_started.pop(id(ctx), None)
        monitor = self.container.performance_monitor
        monitor.track_command_execution()
        if started is not None:
            elapsed_ms = (time.perf_counter() - started) * 1000
            monitor.track_response_time(elapsed_ms)
            logger.info(LogTemplates.COMMAND_EXECUTED, ctx.command, ctx.author, elapsed_ms)

    @commands.Cog.listener()
    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        self._command_started.pop(id(ctx), None)

        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, commands.CommandOnCooldown):
            logger.debug(LogTemplates.COMMAND_COOLDOWN, ctx.command, ctx.author, error.retry_after)
            await self._reply_error(
                ctx,
                DiscordUIMessages.ERROR_COOLDOWN.format(
                    seconds=error.retry_after, command=ctx.command
                ),
            )
            return

        if isinstance(error, commands.MissingRequiredArgument):
            await self._reply_error(
                ctx, DiscordUIMessages.ERROR_MISSING_ARGUMENT.format(name=error.param.name)
            )
            return

        if isinstance(error, commands.NoPrivateMessage):
            await self._reply_error(ctx, DiscordUIMessages.ERROR_SERVER_ONLY)
            return

        original = getattr(error, "original", error)
        self.container.performance_monitor.track_error()
        logger.error(
            LogTemplates.BOT_COMMAND_ERROR,
            ctx.command,
            original,
            exc_info=(type(original), original, original.__traceback__),
        )
        await self._reply_error(ctx, DiscordUIMessages.ERROR_COMMAND_FAILED)

    async def _reply_error(self, ctx: commands.Context, message: str) -> None:
        try:
            await ctx.send(message, ephemeral=True)
        except discord.HTTPException:
            logger.warning(LogTemplates.BOT_ERROR_MESSAGE_SEND_FAILED)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(EventCog(bot, container))
