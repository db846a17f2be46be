"""
Music Bounded Context

Domain logic for songs, duration normalization and playback state.
"""

from discord_music_assistant.domain.music.entities import Song
from discord_music_assistant.domain.music.normalization import format_duration, normalize_duration
from discord_music_assistant.domain.music.value_objects import PlaybackState

__all__ = [
    # Entities
    "Song",
    # Value Objects
    "PlaybackState",
    # Normalization
    "normalize_duration",
    "format_duration",
]
