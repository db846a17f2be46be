"""Console log formatting with per-level ANSI colors."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, TextIO

from discord_music_assistant.domain.shared.constants import ConfigKeys

RESET = "\033[0m"
DIM = "\033[2m"

LEVEL_COLORS: dict[int, str] = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}


def colors_enabled(stream: TextIO | None = None) -> bool:
    """Colors are on for TTY streams unless ``NO_COLOR`` is set."""
    if os.environ.get(ConfigKeys.NO_COLOR) is not None:
        return False
    target = stream if stream is not None else sys.stderr
    isatty = getattr(target, "isatty", None)
    return bool(isatty and isatty())


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name and dims the logger name.

    The record passed to handlers is never mutated; a copy is formatted so
    file handlers sharing the record still see plain text.
    """

    def __init__(self, *args: Any, stream: TextIO | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._stream = stream

    def format(self, record: logging.LogRecord) -> str:
        if not colors_enabled(self._stream):
            return super().format(record)

        colored = logging.makeLogRecord(record.__dict__)
        color = LEVEL_COLORS.get(record.levelno, "")
        colored.levelname = f"{color}{record.levelname}{RESET}"
        colored.name = f"{DIM}{record.name}{RESET}"
        return super().format(colored)
