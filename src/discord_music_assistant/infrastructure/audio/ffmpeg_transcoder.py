"""AudioTranscoder implementation running ffmpeg."""

from __future__ import annotations

import logging
from pathlib import Path

from discord_music_assistant.application.interfaces.audio_tools import AudioTranscoder
from discord_music_assistant.config.settings import AudioSettings
from discord_music_assistant.domain.shared.messages import ErrorMessages
from discord_music_assistant.infrastructure.audio.models import TranscodeConfig
from discord_music_assistant.infrastructure.audio.process import run_process

logger = logging.getLogger(__name__)


class FFmpegTranscoder(AudioTranscoder):
    def __init__(
        self, settings: AudioSettings | None = None, config: TranscodeConfig | None = None
    ) -> None:
        self._settings = settings or AudioSettings()
        self._config = config or TranscodeConfig(
            bitrate=self._settings.opus_bitrate,
            sample_rate=self._settings.sample_rate,
            channels=self._settings.channels,
        )

    @property
    def config(self) -> TranscodeConfig:
        return self._config

    async def transcode(self, source: Path, destination: Path) -> None:
        logger.debug("ffmpeg transcode %s -> %s", source, destination)
        args = self._config.build_args(str(source), str(destination))
        result = await run_process(self._config.executable, *args)
        if not result.ok:
            raise RuntimeError(
                ErrorMessages.TRANSCODE_FAILED.format(code=result.returncode, stderr=result.stderr)
            )
