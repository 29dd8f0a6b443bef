"""Logging configuration module."""

from __future__ import annotations

import logging

from imagecache.config.settings import Settings, get_settings

# Every module of the package logs below this channel via logging.getLogger(__name__).
CHANNEL = "imagecache"


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logger according to project conventions."""

    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger(CHANNEL).setLevel(level)
