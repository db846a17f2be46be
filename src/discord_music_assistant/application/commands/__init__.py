"""
Application Commands

Command objects and results for write operations on playback sessions.
"""

from discord_music_assistant.application.commands.enqueue import EnqueueRequest, VoiceChannelSnapshot
from discord_music_assistant.application.commands.results import CommandResult

__all__ = [
    "CommandResult",
    "EnqueueRequest",
    "VoiceChannelSnapshot",
]
