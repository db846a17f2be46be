"""Normalization of loosely-typed search metadata into canonical song fields.

Search backends report durations in several shapes: whole seconds, a
clock string such as ``"4:23"`` or ``"1:02:03"``, or a bare number that
may arrive as a string. :func:`normalize_duration` resolves them in a
fixed precedence so the rest of the system only ever sees seconds.
"""

from __future__ import annotations

import re
from typing import Any, Final

_CLOCK_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s*(\d+):(\d{1,2})(?::(\d{1,2}))?\s*$")


def _coerce_seconds(value: Any) -> int | None:
    """Return a non-negative whole number of seconds, or None for garbage."""
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = int(float(value))
    except (TypeError, ValueError):
        return None
    return seconds if seconds > 0 else None


def parse_clock(value: Any) -> int | None:
    """Parse ``m:ss`` or ``h:mm:ss`` into seconds."""
    if not isinstance(value, str):
        return None

    match = _CLOCK_PATTERN.match(value)
    if match is None:
        return None

    first, second, third = match.groups()
    if third is None:
        return int(first) * 60 + int(second)
    return int(first) * 3600 + int(second) * 60 + int(third)


def normalize_duration(
    duration_in_sec: Any = None,
    duration_raw: Any = None,
    duration: Any = None,
) -> int:
    """Pick the first usable duration source, falling back to 0.

    Precedence: ``duration_in_sec`` > ``duration_raw`` (clock string) > ``duration``.
    """
    seconds = _coerce_seconds(duration_in_sec)
    if seconds is not None:
        return seconds

    seconds = parse_clock(duration_raw)
    if seconds is not None:
        return seconds

    seconds = _coerce_seconds(duration)
    if seconds is not None:
        return seconds

    return 0


def format_duration(seconds: int) -> str:
    """Format seconds as ``m:ss`` (minutes are not wrapped into hours)."""
    minutes, remaining = divmod(max(seconds, 0), 60)
    return f"{minutes}:{remaining:02d}"
