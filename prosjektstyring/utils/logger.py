"""Logging setup shared by the API, services and scripts."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from prosjektstyring.utils.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
# Loggers created under these names get the stdout handler.
APP_LOGGER_NAMES = ("prosjektstyring", "app")

_configured_level: Optional[str] = None


def configure_logging(level: Optional[str] = None) -> None:
    """Attach one stdout handler to the application loggers.

    Calling again with a different level only changes the level.
    """
    global _configured_level
    resolved_level = (level or get_settings().log_level).upper()
    if _configured_level == resolved_level:
        return

    if _configured_level is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        for name in APP_LOGGER_NAMES:
            logging.getLogger(name).addHandler(handler)

    for name in APP_LOGGER_NAMES:
        logging.getLogger(name).setLevel(resolved_level)
    _configured_level = resolved_level


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring handlers on first use."""
    if _configured_level is None:
        configure_logging()
    return logging.getLogger(name)
