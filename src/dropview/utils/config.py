"""Config directory resolution and user settings."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.toml"
DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024  # 100 MB

_TRUTHY = {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def config_dir() -> Path:
    """Return the dropview config directory.

    Resolution order:
        1. $DROPVIEW_CONFIG_DIR  (explicit override)
        2. $XDG_CONFIG_HOME/dropview  (XDG standard)
        3. ~/.config/dropview  (default)
    """
    if env := os.environ.get("DROPVIEW_CONFIG_DIR"):
        return Path(env)
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "dropview"
    return Path.home() / ".config" / "dropview"


@dataclass
class Settings:
    """User settings read from ``config.toml``.

    Example::

        max_file_size = 52428800
        debug_log = true

        [viewers]
        video = false
    """

    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    debug_log: bool = False
    viewers: dict[str, bool] = field(default_factory=dict)

    def viewer_enabled(self, name: str) -> bool:
        return self.viewers.get(name, True)


def env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def load_settings(path: Path | None = None) -> Settings:
    """Read settings, falling back to defaults for anything missing or invalid."""
    path = path or config_dir() / CONFIG_FILENAME
    settings = Settings()
    if not path.is_file():
        return settings
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return settings

    size = data.get("max_file_size")
    if isinstance(size, int) and not isinstance(size, bool) and size > 0:
        settings.max_file_size = size
    elif size is not None:
        logger.warning("Invalid max_file_size %r, using default", size)

    debug = data.get("debug_log")
    if isinstance(debug, bool):
        settings.debug_log = debug

    viewers = data.get("viewers")
    if isinstance(viewers, dict):
        settings.viewers = {str(k): bool(v) for k, v in viewers.items()}
    return settings
