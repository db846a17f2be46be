"""Resolve user queries into canonical songs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.music.entities import Song
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.song_searcher import SongMetadata, SongSearcher

logger = logging.getLogger(__name__)


class SongResolver:
    """Turns a URL or free-text query into a :class:`Song`.

    An exact URL is looked up directly. Other queries take the top search
    result and re-resolve it by URL for authoritative details, keeping the
    search result when that lookup fails.
    """

    def __init__(self, searcher: SongSearcher) -> None:
        self._searcher = searcher

    async def resolve(self, query: str, requested_by: str) -> Song | None:
        query = query.strip()
        if not query:
            return None

        if self._searcher.is_url(query):
            logger.info(LogTemplates.RESOLVE_URL, query)
            metadata = await self._searcher.lookup(query)
            if metadata is not None and not metadata.get("url"):
                metadata = {**metadata, "url": query}
        else:
            logger.info(LogTemplates.RESOLVE_SEARCH, query)
            metadata = await self._search_with_details(query)

        if not metadata or not metadata.get("url"):
            logger.info(LogTemplates.RESOLVE_NO_RESULTS, query)
            return None

        return Song.from_metadata(metadata, requested_by)

    async def _search_with_details(self, query: str) -> SongMetadata | None:
        results = await self._searcher.search(query, limit=1)
        if not results:
            return None

        top = results[0]
        url = top.get("url")
        if not url:
            return top

        try:
            details = await self._searcher.lookup(str(url))
        except Exception:
            logger.warning(LogTemplates.RESOLVE_DETAILS_FAILED, query, exc_info=True)
            return top

        if not details:
            logger.warning(LogTemplates.RESOLVE_DETAILS_FAILED, query)
            return top

        merged = dict(top)
        merged.update({key: value for key, value in details.items() if value is not None})
        return merged
