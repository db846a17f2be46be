"""Time-bounded cache of complete generation responses."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str]


@dataclass
class CacheEntry:
    text: str
    created_at: float

    def is_expired(self, ttl_seconds: float, now: float) -> bool:
        return (now - self.created_at) > ttl_seconds


def _preview(prompt: str, limit: int = 50) -> str:
    return prompt if len(prompt) <= limit else f"{prompt[:limit]}..."


class ResponseCache:
    """Response cache keyed by ``(model, normalized prompt)``.

    Entries expire ``ttl_seconds`` after insertion and are evicted lazily on
    lookup. A full cache evicts the oldest insertion; lookups do not refresh
    an entry's position.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = 300,
        max_size: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._max_size = max_size
        self._clock = clock

        self._entries: dict[CacheKey, CacheEntry] = {}
        self._hits: int = 0
        self._misses: int = 0

    @staticmethod
    def make_key(model: str, prompt: str) -> CacheKey:
        return (model, prompt.strip().lower())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, model: str, prompt: str) -> str | None:
        key = self.make_key(model, prompt)
        entry = self._entries.get(key)

        if entry is not None and entry.is_expired(self._ttl_seconds, self._clock()):
            del self._entries[key]
            logger.debug(LogTemplates.CACHE_EXPIRED, _preview(key[1]))
            entry = None

        if entry is None:
            self._misses += 1
            logger.debug(LogTemplates.CACHE_MISS, _preview(key[1]))
            return None

        self._hits += 1
        logger.debug(LogTemplates.CACHE_HIT, _preview(key[1]))
        return entry.text

    def put(self, model: str, prompt: str, text: str) -> None:
        key = self.make_key(model, prompt)
        if key not in self._entries and len(self._entries) >= self._max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug(LogTemplates.CACHE_EVICTED, self._max_size)

        self._entries[key] = CacheEntry(text=text, created_at=self._clock())
        logger.debug(LogTemplates.CACHE_STORED, _preview(key[1]), len(text))

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        logger.info(LogTemplates.CACHE_CLEARED, count)
        return count

    def get_stats(self) -> dict[str, int | float]:
        lookups = self._hits + self._misses
        return {
            "size": len(self._entries),
            "max_size": self._max_size,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": (self._hits / lookups) if lookups else 0.0,
        }
