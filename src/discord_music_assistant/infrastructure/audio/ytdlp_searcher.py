"""SongSearcher implementation using the yt-dlp library for lookup and search."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_music_assistant.application.interfaces.song_searcher import SongMetadata, SongSearcher
from discord_music_assistant.config.settings import AudioSettings
from discord_music_assistant.domain.shared.messages import LogTemplates
from discord_music_assistant.infrastructure.audio.models import YtDlpOpts, YtDlpVideoInfo

logger = logging.getLogger(__name__)

URL_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"^https?://"),
    re.compile(r"^www\."),
]


class YtDlpSongSearcher(SongSearcher):
    """Runs yt-dlp extraction in a worker thread; failures are logged and reported as misses."""

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(format=self._settings.ytdlp_format)

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def is_url(self, query: str) -> bool:
        query = query.strip()
        return any(pattern.search(query) for pattern in URL_PATTERNS)

    async def lookup(self, url: str) -> SongMetadata | None:
        info = await asyncio.to_thread(self._extract_info_sync, url)
        return info.to_metadata() if info is not None else None

    async def search(self, query: str, limit: int = 1) -> list[SongMetadata]:
        results = await asyncio.to_thread(self._search_sync, query, limit)
        return [info.to_metadata() for info in results if info.page_url]

    def _extract_info_sync(self, url: str) -> YtDlpVideoInfo | None:
        try:
            with YoutubeDL(params=cast(Any, self._get_opts().model_dump())) as ydl:
                data = ydl.extract_info(url, download=False)
                if not isinstance(data, dict):
                    return None
                return YtDlpVideoInfo.model_validate(dict(data))
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url)
            return None

    def _search_sync(self, query: str, limit: int = 1) -> list[YtDlpVideoInfo]:
        try:
            search_query = f"ytsearch{limit}:{query}"
            opts = self._get_opts(extract_flat="in_playlist")
            with YoutubeDL(params=cast(Any, opts.model_dump())) as ydl:
                data = ydl.extract_info(search_query, download=False)

                if not isinstance(data, dict):
                    return []

                entries = data.get("entries", [])
                if not isinstance(entries, list):
                    return []

                return [YtDlpVideoInfo.model_validate(dict(e)) for e in entries if e]
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            return []
