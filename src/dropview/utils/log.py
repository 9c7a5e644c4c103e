"""Logging setup. Textual owns the terminal, so logs go to a file."""

from __future__ import annotations

import logging
from pathlib import Path

from dropview.utils.config import Settings, config_dir, env_flag

LOG_FILENAME = "dropview.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEBUG_ENV = "DROPVIEW_DEBUG_LOG"


def setup_logging(settings: Settings | None = None, log_file: Path | None = None) -> Path | None:
    """Configure the ``dropview`` logger.

    Logs to ``<config dir>/dropview.log`` when $DROPVIEW_DEBUG_LOG is set
    or ``debug_log = true``; otherwise stays silent. Returns the log path,
    or None when file logging is off.
    """
    logger = logging.getLogger("dropview")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    enabled = env_flag(DEBUG_ENV) or (settings is not None and settings.debug_log)
    if not enabled:
        logger.addHandler(logging.NullHandler())
        logger.propagate = False
        return None

    path = log_file or config_dir() / LOG_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return path
