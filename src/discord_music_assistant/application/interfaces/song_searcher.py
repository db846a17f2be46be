"""Port interface for looking up songs by URL or free-text query."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from discord_music_assistant.domain.shared.types import NonEmptyStr, PositiveInt

SongMetadata = dict[str, Any]
"""Raw search metadata.

Recognized keys: ``id``, ``title``, ``url``, ``thumbnail``,
``duration_in_sec``, ``duration_raw`` and ``duration``. Values are whatever
the backend reported; ``Song.from_metadata`` normalizes them.
"""


class SongSearcher(ABC):
    """Interface for the search backend behind song resolution."""

    @abstractmethod
    def is_url(self, query: NonEmptyStr) -> bool:
        ...

    @abstractmethod
    async def lookup(self, url: NonEmptyStr) -> SongMetadata | None:
        """Fetch metadata for an exact URL, or None when it cannot be resolved."""
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr, limit: PositiveInt = 1) -> list[SongMetadata]:
        """Search by free text, best match first."""
        ...
