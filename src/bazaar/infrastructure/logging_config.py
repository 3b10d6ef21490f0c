"""Process-wide logging set-up for the CLI."""

from __future__ import annotations

import logging

from bazaar.infrastructure.config import LoggingConfig


def configure_logging(config: LoggingConfig) -> None:
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=config.log_format)
