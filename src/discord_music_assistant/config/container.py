"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the playback engine, the generation pipeline
and the adapters they run on. Components are created on-demand and cached
for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.audio_tools import AudioDownloader, AudioTranscoder
    from ..application.interfaces.generation_backend import GenerationBackend
    from ..application.interfaces.song_searcher import SongSearcher
    from ..application.services.audio_pipeline import AudioPipeline
    from ..application.services.generation_pipeline import GenerationPipeline
    from ..application.services.performance_monitor import PerformanceMonitor
    from ..application.services.playback_engine import PlaybackEngine
    from ..application.services.response_cache import ResponseCache
    from ..application.services.song_resolver import SongResolver
    from ..infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed. The voice
    transport needs the bot, so ``set_bot`` must be called before the
    playback engine is requested.
    """

    settings: Settings
    _bot: Bot | None = None

    # Infrastructure adapters
    _voice_transport: DiscordVoiceTransport | None = None
    _song_searcher: SongSearcher | None = None
    _downloader: AudioDownloader | None = None
    _transcoder: AudioTranscoder | None = None
    _generation_backend: GenerationBackend | None = None

    # Application services
    _song_resolver: SongResolver | None = None
    _audio_pipeline: AudioPipeline | None = None
    _playback_engine: PlaybackEngine | None = None
    _response_cache: ResponseCache | None = None
    _generation_pipeline: GenerationPipeline | None = None
    _performance_monitor: PerformanceMonitor | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Voice & Audio ===

    @property
    def voice_transport(self) -> DiscordVoiceTransport:
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport

            self._voice_transport = DiscordVoiceTransport(self.bot)
        return self._voice_transport

    @property
    def song_searcher(self) -> SongSearcher:
        if self._song_searcher is None:
            from ..infrastructure.audio.ytdlp_searcher import YtDlpSongSearcher

            self._song_searcher = YtDlpSongSearcher(self.settings.audio)
        return self._song_searcher

    @property
    def downloader(self) -> AudioDownloader:
        if self._downloader is None:
            from ..infrastructure.audio.ytdlp_downloader import YtDlpDownloader

            self._downloader = YtDlpDownloader()
        return self._downloader

    @property
    def transcoder(self) -> AudioTranscoder:
        if self._transcoder is None:
            from ..infrastructure.audio.ffmpeg_transcoder import FFmpegTranscoder

            self._transcoder = FFmpegTranscoder(self.settings.audio)
        return self._transcoder

    @property
    def song_resolver(self) -> SongResolver:
        if self._song_resolver is None:
            from ..application.services.song_resolver import SongResolver

            self._song_resolver = SongResolver(self.song_searcher)
        return self._song_resolver

    @property
    def audio_pipeline(self) -> AudioPipeline:
        if self._audio_pipeline is None:
            from ..application.services.audio_pipeline import AudioPipeline

            audio = self.settings.audio
            self._audio_pipeline = AudioPipeline(
                downloader=self.downloader,
                transcoder=self.transcoder,
                download_dir=Path(audio.download_dir),
                file_wait_seconds=audio.file_wait_seconds,
                transcode_enabled=audio.transcode_enabled,
            )
        return self._audio_pipeline

    @property
    def playback_engine(self) -> PlaybackEngine:
        if self._playback_engine is None:
            from ..application.services.playback_engine import ConnectPolicy, PlaybackEngine

            voice = self.settings.voice
            self._playback_engine = PlaybackEngine(
                transport=self.voice_transport,
                resolver=self.song_resolver,
                pipeline=self.audio_pipeline,
                connect_policy=ConnectPolicy(
                    attempts=voice.connect_attempts,
                    ready_timeout=voice.ready_timeout,
                    rejoin_timeout=voice.rejoin_timeout,
                    connecting_timeout=voice.connecting_timeout,
                    backoff_base=voice.backoff_base,
                    backoff_cap=voice.backoff_cap,
                    reconnect_window=voice.reconnect_window,
                ),
                empty_channel_timeout=voice.empty_channel_timeout,
                default_volume=self.settings.audio.default_volume,
                queue_preview_size=self.settings.audio.queue_preview_size,
            )
        return self._playback_engine

    # === Generation ===

    @property
    def generation_backend(self) -> GenerationBackend:
        if self._generation_backend is None:
            from ..infrastructure.ai.ollama_client import OllamaClient

            self._generation_backend = OllamaClient(self.settings.ai)
        return self._generation_backend

    @property
    def response_cache(self) -> ResponseCache:
        if self._response_cache is None:
            from ..application.services.response_cache import ResponseCache

            self._response_cache = ResponseCache(
                ttl_seconds=self.settings.ai.cache_ttl_seconds,
                max_size=self.settings.ai.cache_max_size,
            )
        return self._response_cache

    @property
    def generation_pipeline(self) -> GenerationPipeline:
        if self._generation_pipeline is None:
            from ..application.services.generation_pipeline import GenerationPipeline

            ai = self.settings.ai
            self._generation_pipeline = GenerationPipeline(
                backend=self.generation_backend,
                cache=self.response_cache,
                success_delay=ai.success_delay,
                failure_delay=ai.failure_delay,
                replay_delay=ai.replay_delay,
            )
        return self._generation_pipeline

    @property
    def performance_monitor(self) -> PerformanceMonitor:
        if self._performance_monitor is None:
            from ..application.services.performance_monitor import PerformanceMonitor

            self._performance_monitor = PerformanceMonitor(self.response_cache)
        return self._performance_monitor

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Prepare on-disk resources before the bot connects."""
        Path(self.settings.audio.download_dir).mkdir(parents=True, exist_ok=True)

    async def shutdown(self) -> None:
        """Stop every playback session and close the generation client."""
        if self._playback_engine is not None:
            try:
                await self._playback_engine.shutdown()
            except Exception as exc:
                logger.warning("Failed stopping playback sessions: %r", exc)

        if self._generation_backend is not None:
            try:
                await self._generation_backend.aclose()
            except Exception as exc:
                logger.warning("Failed closing generation backend: %r", exc)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
