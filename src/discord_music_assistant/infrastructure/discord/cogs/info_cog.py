"""Help, latency, invite and statistics commands."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_music_assistant.application.services.performance_monitor import format_uptime
from discord_music_assistant.domain.shared.constants import UIConstants
from discord_music_assistant.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)

MUSIC_COG_NAME = "MusicCog"


def _command_line(command: commands.Command) -> str:
    return f"`{command.name}` - {command.description or DiscordUIMessages.HELP_NO_DESCRIPTION}"


class InfoCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def cog_load(self) -> None:
        logger.info(LogTemplates.COG_LOADED, type(self).__name__)

    async def cog_unload(self) -> None:
        logger.info(LogTemplates.COG_UNLOADED, type(self).__name__)

    @property
    def prefix(self) -> str:
        return self.container.settings.discord.command_prefix

    # ─────────────────────────────────────────────────────────────────
    # Help
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(
        name="help", aliases=["h", "commands"], description="Show all available commands"
    )
    @app_commands.describe(command="Command to show details for")
    @commands.cooldown(1, 3, commands.BucketType.user)
    async def help(self, ctx: commands.Context, command: str | None = None) -> None:
        if command:
            target = self.bot.get_command(command.lower())
            if target is None or target.hidden:
                await ctx.send(
                    DiscordUIMessages.HELP_UNKNOWN_COMMAND.format(name=command), ephemeral=True
                )
                return
            await ctx.send(embed=self._build_command_embed(target))
            return

        await ctx.send(embed=self._build_overview_embed())

    def _build_overview_embed(self) -> discord.Embed:
        embed = discord.Embed(
            title=DiscordUIMessages.TITLE_HELP,
            description=DiscordUIMessages.HELP_DESCRIPTION.format(prefix=self.prefix),
            color=UIConstants.COLOR_INFO,
        )
        embed.timestamp = datetime.now(UTC)

        visible = sorted(
            (c for c in self.bot.commands if not c.hidden), key=lambda c: c.name
        )
        general = [_command_line(c) for c in visible if c.cog_name != MUSIC_COG_NAME]
        music = [_command_line(c) for c in visible if c.cog_name == MUSIC_COG_NAME]

        if general:
            embed.add_field(
                name=DiscordUIMessages.FIELD_AVAILABLE_COMMANDS, value="\n".join(general), inline=False
            )
        if music:
            embed.add_field(
                name=DiscordUIMessages.FIELD_MUSIC_COMMANDS, value="\n".join(music), inline=False
            )
        return embed

    def _build_command_embed(self, command: commands.Command) -> discord.Embed:
        embed = discord.Embed(
            title=DiscordUIMessages.HELP_COMMAND_TITLE.format(name=command.name),
            description=command.description or DiscordUIMessages.HELP_NO_DESCRIPTION,
            color=UIConstants.COLOR_INFO,
        )
        embed.timestamp = datetime.now(UTC)

        usage = f"{self.prefix}{command.name} {command.signature}".strip()
        embed.add_field(name=DiscordUIMessages.FIELD_USAGE, value=f"`{usage}`", inline=True)
        if command.cooldown is not None:
            embed.add_field(
                name=DiscordUIMessages.FIELD_COOLDOWN, value=f"{command.cooldown.per:.0f}s", inline=True
            )
        if command.aliases:
            embed.add_field(
                name=DiscordUIMessages.FIELD_ALIASES,
                value=", ".join(f"`{alias}`" for alias in command.aliases),
                inline=False,
            )
        return embed

    # ─────────────────────────────────────────────────────────────────
    # Diagnostics
    # ─────────────────────────────────────────────────────────────────

    @commands.hybrid_command(name="ping", description="Ping the bot to check latency")
    @commands.cooldown(1, 5, commands.BucketType.user)
    async def ping(self, ctx: commands.Context) -> None:
        sent = await ctx.send(DiscordUIMessages.PING_PENDING)
        latency_ms = round((sent.created_at - ctx.message.created_at).total_seconds() * 1000)
        await sent.edit(
            content=DiscordUIMessages.PING_RESULT.format(
                latency_ms=latency_ms,
                api_latency_ms=round(self.bot.latency * 1000),
            )
        )

    @commands.hybrid_command(name="invite", aliases=["inv", "link"], description="Get the bot invite link")
    @commands.cooldown(1, 5, commands.BucketType.user)
    async def invite(self, ctx: commands.Context) -> None:
        client_id = self.container.settings.discord.client_id
        if not client_id:
            await ctx.send(DiscordUIMessages.INVITE_NOT_CONFIGURED, ephemeral=True)
            return

        url = UIConstants.INVITE_URL.format(
            client_id=client_id, permissions=UIConstants.INVITE_PERMISSIONS
        )
        embed = discord.Embed(
            title=DiscordUIMessages.TITLE_INVITE,
            description=DiscordUIMessages.INVITE_DESCRIPTION.format(url=url),
            color=UIConstants.COLOR_INFO,
        )
        await ctx.send(embed=embed)

    @commands.hybrid_command(
        name="stats",
        aliases=["statistics", "metrics", "performance"],
        description="Show bot performance statistics",
    )
    @commands.cooldown(1, 30, commands.BucketType.user)
    async def stats(self, ctx: commands.Context) -> None:
        try:
            embed = self._build_stats_embed()
        except Exception:
            logger.exception(LogTemplates.STATS_FAILED)
            await ctx.send(DiscordUIMessages.STATS_FAILED, ephemeral=True)
            return
        await ctx.send(embed=embed)

    def _build_stats_embed(self) -> discord.Embed:
        metrics = self.container.performance_monitor.get_metrics()

        embed = discord.Embed(
            title=DiscordUIMessages.TITLE_STATS,
            description=DiscordUIMessages.STATS_DESCRIPTION,
            color=UIConstants.COLOR_SUCCESS,
        )
        embed.timestamp = datetime.now(UTC)

        embed.add_field(
            name=DiscordUIMessages.FIELD_UPTIME,
            value=format_uptime(metrics["uptime_seconds"]),
            inline=True,
        )
        embed.add_field(
            name=DiscordUIMessages.FIELD_COMMANDS_EXECUTED,
            value=str(metrics["command_executions"]),
            inline=True,
        )
        embed.add_field(
            name=DiscordUIMessages.FIELD_AVG_RESPONSE,
            value=f"{metrics['average_response_time_ms']:.2f}ms",
            inline=True,
        )
        embed.add_field(name=DiscordUIMessages.FIELD_ERRORS, value=str(metrics["errors"]), inline=True)
        embed.add_field(
            name=DiscordUIMessages.FIELD_CACHE_HIT_RATE,
            value=f"{metrics['cache_hit_rate'] * 100:.2f}%",
            inline=True,
        )
        embed.add_field(
            name=DiscordUIMessages.FIELD_CACHE_HITS,
            value=f"{metrics['cache_hits']} hits / {metrics['cache_misses']} misses",
            inline=True,
        )
        embed.add_field(
            name=DiscordUIMessages.FIELD_MEMORY,
            value=f"{metrics['memory_rss_mb']:.1f} MB",
            inline=True,
        )
        embed.add_field(
            name=DiscordUIMessages.FIELD_SESSIONS,
            value=str(self.container.playback_engine.session_count),
            inline=True,
        )
        embed.set_footer(text=DiscordUIMessages.STATS_FOOTER)
        return embed


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(InfoCog(bot, container))
