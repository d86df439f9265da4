"""
Cross-platform utilities for Burner Sync.

Centralises OS detection so the config and log locations are decided
in one place.

  - Windows : ``%APPDATA%\\BurnerSync``
  - macOS   : ``~/Library/Application Support/BurnerSync``
  - Linux   : ``$XDG_CONFIG_HOME/BurnerSync`` (default ``~/.config``)
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

# ---- platform flags ----------------------------------------------------

IS_WINDOWS: bool = sys.platform == "win32"
IS_MACOS: bool = sys.platform == "darwin"

APP_DIR_NAME = "BurnerSync"

# ---- directories -------------------------------------------------------


def get_config_dir() -> Path:
    """Return the application config directory, created if needed."""
    if IS_WINDOWS:
        base = os.environ.get("APPDATA", str(Path.home()))
    elif IS_MACOS:
        base = str(Path.home() / "Library" / "Application Support")
    else:
        base = os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))

    config_dir = Path(base) / APP_DIR_NAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_log_path() -> Path:
    """Return the path to the log file (inside the config directory)."""
    return get_config_dir() / "burner_sync.log"
