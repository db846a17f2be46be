"""Audio acquisition: download, verify and transcode a song to a local file."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ...domain.shared.constants import AudioConstants
from ...domain.shared.exceptions import AudioAcquisitionError
from ...domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...domain.music.entities import Song
    from ..interfaces.audio_tools import AudioDownloader, AudioTranscoder

logger = logging.getLogger(__name__)


def _is_non_empty(path: Path) -> bool:
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False


class AudioPipeline:
    """Produces a playable local file for a song.

    Downloads land in ``{download_dir}/{id}.mp3`` and are reused when already
    present. A second pass transcodes to ``{id}_converted.opus``; if it fails
    the original download is played instead.
    """

    def __init__(
        self,
        *,
        downloader: AudioDownloader,
        transcoder: AudioTranscoder,
        download_dir: Path,
        file_wait_seconds: int = 30,
        poll_interval: float = AudioConstants.FILE_POLL_INTERVAL_SECONDS,
        transcode_enabled: bool = True,
    ) -> None:
        self._downloader = downloader
        self._transcoder = transcoder
        self._download_dir = download_dir
        self._file_wait_seconds = file_wait_seconds
        self._poll_interval = poll_interval
        self._transcode_enabled = transcode_enabled

    @property
    def download_dir(self) -> Path:
        return self._download_dir

    def download_path(self, song: Song) -> Path:
        return self._download_dir / f"{song.download_key}{AudioConstants.DOWNLOAD_EXTENSION}"

    def transcoded_path(self, source: Path) -> Path:
        return source.with_name(f"{source.stem}{AudioConstants.TRANSCODED_SUFFIX}")

    async def acquire(self, song: Song) -> Path:
        """Return the path of a non-empty audio file for ``song``.

        Raises:
            AudioAcquisitionError: If the download fails or never yields a
                non-empty file.
        """
        self._download_dir.mkdir(parents=True, exist_ok=True)
        source = self.download_path(song)

        if _is_non_empty(source):
            logger.info(LogTemplates.AUDIO_CACHE_HIT, source)
        else:
            logger.info(LogTemplates.AUDIO_DOWNLOADING, song.title, source)
            await self._downloader.download(song.url, source)
            await self._wait_for_file(song, source)

        if not self._transcode_enabled:
            return source
        return await self._transcode(source)

    async def _wait_for_file(self, song: Song, path: Path) -> None:
        for _ in range(self._file_wait_seconds):
            if path.exists():
                break
            await asyncio.sleep(self._poll_interval)

        if not path.exists():
            raise AudioAcquisitionError(song.id, ErrorMessages.DOWNLOADED_FILE_MISSING.format(path=path))

        size = path.stat().st_size
        if size == 0:
            raise AudioAcquisitionError(song.id, ErrorMessages.DOWNLOADED_FILE_EMPTY.format(path=path))

        logger.info(LogTemplates.AUDIO_DOWNLOADED, song.title, size)

    async def _transcode(self, source: Path) -> Path:
        target = self.transcoded_path(source)
        if _is_non_empty(target):
            logger.info(LogTemplates.AUDIO_TRANSCODE_CACHE_HIT, target)
            return target

        logger.info(LogTemplates.AUDIO_TRANSCODING, source, target)
        try:
            await self._transcoder.transcode(source, target)
        except Exception as exc:
            logger.warning(LogTemplates.AUDIO_TRANSCODE_FAILED, source, exc)
            return source

        if not _is_non_empty(target):
            logger.warning(LogTemplates.AUDIO_TRANSCODE_FAILED, source, "empty output")
            return source
        return target
