"""Discord cogs - command handlers."""

from discord_music_assistant.infrastructure.discord.cogs.ask_cog import AskCog
from discord_music_assistant.infrastructure.discord.cogs.event_cog import EventCog
from discord_music_assistant.infrastructure.discord.cogs.info_cog import InfoCog
from discord_music_assistant.infrastructure.discord.cogs.music_cog import MusicCog

__all__ = [
    "MusicCog",
    "AskCog",
    "InfoCog",
    "EventCog",
]
