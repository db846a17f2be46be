"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_music_assistant.application.interfaces.audio_tools import (
    AudioDownloader,
    AudioTranscoder,
)
from discord_music_assistant.application.interfaces.generation_backend import GenerationBackend
from discord_music_assistant.application.interfaces.notice_channel import NoticeChannel
from discord_music_assistant.application.interfaces.reply_target import ReplyTarget
from discord_music_assistant.application.interfaces.song_searcher import SongMetadata, SongSearcher
from discord_music_assistant.application.interfaces.voice_transport import (
    AudioPlayer,
    AudioPlayerStatus,
    AudioResource,
    Subscription,
    VoiceConnection,
    VoiceConnectionStatus,
    VoiceTransport,
)

__all__ = [
    # Voice
    "VoiceTransport",
    "VoiceConnection",
    "VoiceConnectionStatus",
    "AudioPlayer",
    "AudioPlayerStatus",
    "AudioResource",
    "Subscription",
    # Music
    "SongSearcher",
    "SongMetadata",
    "AudioDownloader",
    "AudioTranscoder",
    "NoticeChannel",
    # Generation
    "GenerationBackend",
    "ReplyTarget",
]
