"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, voice transport, chat adapters)
- Audio (yt-dlp search and download, ffmpeg transcoding)
- AI (streaming Ollama client over httpx)
"""

from discord_music_assistant.infrastructure.discord.adapters.voice_transport import (
    DiscordVoiceTransport,
)
from discord_music_assistant.infrastructure.discord.bot import create_bot

__all__ = [
    "create_bot",
    "DiscordVoiceTransport",
]
