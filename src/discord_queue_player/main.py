#!/usr/bin/env python3
"""Main entry point for the Discord queue player bot."""

from __future__ import annotations

import json
import logging
import logging.config
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from discord_queue_player.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_queue_player.config.settings import Settings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.warning("Could not load %s, using basic config", _LOGGING_CONFIG_PATH)

    logging.getLogger().setLevel(resolved_level)


def check_ffmpeg(settings: Settings) -> bool:
    """Report whether the configured FFmpeg executable can be found."""
    executable = settings.audio.ffmpeg_executable
    if shutil.which(executable) is None:
        logging.getLogger(__name__).warning(LogTemplates.BOT_FFMPEG_MISSING, executable)
        return False
    return True


def main() -> int:
    from discord_queue_player.config.settings import get_settings

    settings = get_settings()
    setup_logging("DEBUG" if settings.debug else settings.log_level)

    logger = logging.getLogger(__name__)

    token_value = settings.discord.token.get_secret_value()
    if not token_value:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    # Streaming shells out to FFmpeg; only production refuses to start without it
    if not check_ffmpeg(settings) and settings.environment == "production":
        logger.error(ErrorMessages.FFMPEG_REQUIRED)
        return 1

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    logger.info(
        LogTemplates.BOT_AUDIO_DEFAULTS,
        settings.audio.default_volume,
        settings.audio.search_limit,
        settings.audio.selection_timeout_seconds,
    )

    from discord_queue_player.config.container import create_container
    from discord_queue_player.infrastructure.discord.bot import create_bot

    container = create_container(settings)
    bot = create_bot(container, settings)

    try:
        bot.run(token_value, log_handler=None)
        logger.info(LogTemplates.BOT_STOPPED)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
