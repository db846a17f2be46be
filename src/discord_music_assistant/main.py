#!/usr/bin/env python3
"""Main entry point for the Discord Music Assistant."""

from __future__ import annotations

import json
import logging
import logging.config
import shutil
import sys
from pathlib import Path

from discord_music_assistant.domain.shared.constants import AudioConstants
from discord_music_assistant.domain.shared.messages import ErrorMessages, LogTemplates

LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"
FALLBACK_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(log_level: str = "INFO", config_path: Path = LOGGING_CONFIG_PATH) -> None:
    """Load the JSON logging config, falling back to a basic console handler.

    ``log_level`` always wins over the root level in the file.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(config_path) as f:
            logging.config.dictConfig(json.load(f))
    except (FileNotFoundError, json.JSONDecodeError, ValueError) as exc:
        logging.basicConfig(level=level, format=FALLBACK_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        logging.getLogger(__name__).warning(
            "Could not load %s (%s), using basic logging", config_path, exc
        )

    logging.getLogger().setLevel(level)


def check_external_tools() -> list[str]:
    """Return the external executables playback needs that are not on PATH."""
    missing = [
        tool for tool in (AudioConstants.FFMPEG_EXECUTABLE,) if shutil.which(tool) is None
    ]
    for tool in missing:
        logging.getLogger(__name__).warning(
            "%s not found on PATH; music playback will fail", tool
        )
    return missing


def main() -> int:
    from discord_music_assistant.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    token = settings.discord.token.get_secret_value()
    if not token:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    check_external_tools()

    from discord_music_assistant.config.container import create_container
    from discord_music_assistant.infrastructure.discord.bot import create_bot

    bot = create_bot(create_container(settings), settings)

    try:
        logger.info(LogTemplates.BOT_STARTING_RUN)
        bot.run_with_graceful_shutdown(token)
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1

    logger.info(LogTemplates.BOT_STOPPED)
    return 0


def cli() -> None:
    """Console script entry point (``discord-music-assistant``)."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
