"""Voice channel guard functions for Discord cogs."""

from discord_music_assistant.infrastructure.discord.guards.voice_guards import (
    build_voice_snapshot,
    get_member,
    require_guild,
    send_reply,
)

__all__ = [
    "build_voice_snapshot",
    "get_member",
    "require_guild",
    "send_reply",
]
