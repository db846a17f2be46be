"""AI question answering streamed into chat messages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from discord import app_commands
from discord.ext import commands

from discord_music_assistant.application.services.streaming_reply import StreamingReply
from discord_music_assistant.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)
from discord_music_assistant.infrastructure.discord.adapters.reply_target import (
    DiscordReplyTarget,
)

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class AskCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    async def cog_load(self) -> None:
        logger.info(LogTemplates.COG_LOADED, type(self).__name__)

    async def cog_unload(self) -> None:
        logger.info(LogTemplates.COG_UNLOADED, type(self).__name__)

    @commands.hybrid_command(
        name="tanya", aliases=["ask", "ai"], description="Ask a question to the AI assistant"
    )
    @app_commands.describe(question="Your question for the AI")
    @commands.cooldown(1, 10, commands.BucketType.user)
    async def tanya(self, ctx: commands.Context, *, question: str = "") -> None:
        question = question.strip()
        if not question:
            await ctx.send(DiscordUIMessages.ASK_MISSING_QUESTION, ephemeral=True)
            return

        ai = self.container.settings.ai
        try:
            async with ctx.typing():
                message = await ctx.send(DiscordUIMessages.ASK_THINKING)
            reply = StreamingReply(
                DiscordReplyTarget(message),
                limit=ai.message_limit,
                update_interval=ai.update_interval,
            )
            await reply.run(self.container.generation_pipeline.ask_stream(question))
        except Exception:
            logger.exception(LogTemplates.ASK_FAILED, ctx.author)
            await ctx.send(DiscordUIMessages.ASK_FAILED)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(AskCog(bot, container))
