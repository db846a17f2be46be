"""In-process performance counters for the stats command."""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import TYPE_CHECKING, Any

import psutil

if TYPE_CHECKING:
    from .response_cache import ResponseCache

logger = logging.getLogger(__name__)

RESPONSE_TIME_WINDOW = 100


class PerformanceMonitor:
    """Counts command executions and errors and keeps a rolling response-time average."""

    def __init__(self, cache: ResponseCache | None = None) -> None:
        self._cache = cache
        self._started_at = time.monotonic()
        self._command_executions = 0
        self._errors = 0
        self._response_times: deque[float] = deque(maxlen=RESPONSE_TIME_WINDOW)

    def track_command_execution(self) -> None:
        self._command_executions += 1

    def track_response_time(self, milliseconds: float) -> None:
        self._response_times.append(milliseconds)

    def track_error(self) -> None:
        self._errors += 1

    @property
    def average_response_time(self) -> float:
        if not self._response_times:
            return 0.0
        return sum(self._response_times) / len(self._response_times)

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self._started_at

    def get_metrics(self) -> dict[str, Any]:
        cache_stats = self._cache.get_stats() if self._cache is not None else {}
        hits = int(cache_stats.get("hits", 0))
        misses = int(cache_stats.get("misses", 0))
        return {
            "command_executions": self._command_executions,
            "average_response_time_ms": self.average_response_time,
            "errors": self._errors,
            "cache_hits": hits,
            "cache_misses": misses,
            "cache_hit_rate": (hits / (hits + misses)) if hits + misses else 0.0,
            "cache_size": int(cache_stats.get("size", 0)),
            "uptime_seconds": self.uptime_seconds,
            "memory_rss_mb": psutil.Process().memory_info().rss / (1024 * 1024),
        }

    def reset(self) -> None:
        self._started_at = time.monotonic()
        self._command_executions = 0
        self._errors = 0
        self._response_times.clear()
        logger.info("Performance metrics reset")


def format_uptime(seconds: float) -> str:
    total = int(seconds)
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{days}d {hours}h {minutes}m {secs}s"
