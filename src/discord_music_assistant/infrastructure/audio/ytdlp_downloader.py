"""AudioDownloader implementation running the yt-dlp CLI."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from discord_music_assistant.application.interfaces.audio_tools import AudioDownloader
from discord_music_assistant.domain.shared.constants import AudioConstants
from discord_music_assistant.domain.shared.exceptions import AudioAcquisitionError
from discord_music_assistant.domain.shared.messages import ErrorMessages
from discord_music_assistant.infrastructure.audio.process import run_process

logger = logging.getLogger(__name__)


class YtDlpDownloader(AudioDownloader):
    """Extracts best-quality mp3 audio with ``python -m yt_dlp``."""

    def __init__(self, python_executable: str | None = None) -> None:
        self._python = python_executable or sys.executable

    def build_args(self, url: str, destination: Path) -> list[str]:
        return [
            self._python,
            "-m",
            AudioConstants.YTDLP_MODULE,
            "-x",
            "--audio-format",
            AudioConstants.YTDLP_AUDIO_FORMAT,
            "--audio-quality",
            AudioConstants.YTDLP_AUDIO_QUALITY,
            "--no-playlist",
            "-o",
            f"{destination.with_suffix('')}.%(ext)s",
            url,
        ]

    async def download(self, url: str, destination: Path) -> None:
        logger.debug("yt-dlp download %s -> %s", url, destination)
        result = await run_process(*self.build_args(url, destination))
        if not result.ok:
            raise AudioAcquisitionError(
                destination.stem,
                ErrorMessages.DOWNLOAD_FAILED.format(code=result.returncode, stderr=result.stderr),
            )
