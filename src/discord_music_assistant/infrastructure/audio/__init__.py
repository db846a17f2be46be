"""Audio infrastructure - yt-dlp search/download and ffmpeg transcoding."""

from discord_music_assistant.infrastructure.audio.ffmpeg_transcoder import FFmpegTranscoder
from discord_music_assistant.infrastructure.audio.models import (
    TranscodeConfig,
    YtDlpOpts,
    YtDlpVideoInfo,
)
from discord_music_assistant.infrastructure.audio.ytdlp_downloader import YtDlpDownloader
from discord_music_assistant.infrastructure.audio.ytdlp_searcher import YtDlpSongSearcher

__all__ = [
    "FFmpegTranscoder",
    "TranscodeConfig",
    "YtDlpDownloader",
    "YtDlpOpts",
    "YtDlpSongSearcher",
    "YtDlpVideoInfo",
]
