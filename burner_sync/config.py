"""Configuration management for Burner Sync.

Settings live in a JSON config file in the platform-appropriate
application data directory.  Credentials for the game's remote file
API (HOST, PORT, TOKEN) come from a ``.env`` file layered under the
process environment, and are required at startup.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from burner_sync.paths import ALLOWED_EXTENSIONS
from burner_sync.platform_utils import (
    get_config_dir as _platform_config_dir,
)
from burner_sync.platform_utils import (
    get_log_path as _platform_log_path,
)
from burner_sync.transform import DEFAULT_TRANSPILER_COMMAND

logger = logging.getLogger(__name__)

# Debounce scopes (see burner_sync.coordinator)
SCOPE_GLOBAL = "global"
SCOPE_PATH = "path"

REQUIRED_CREDENTIALS = ("HOST", "PORT", "TOKEN")

DEFAULT_CONFIG: dict[str, Any] = {
    "home_folder": "",  # Empty = ./home under the working directory
    "debounce_ms": 100,
    "debounce_scope": SCOPE_GLOBAL,  # global | path
    "allowed_extensions": sorted(ALLOWED_EXTENSIONS),
    "transpiler_command": list(DEFAULT_TRANSPILER_COMMAND),
    "request_timeout_seconds": 0,  # 0 = wait forever
    "log_level": "INFO",
    # ---- log rotation ----
    "max_log_size_mb": 10,  # rotate log when it exceeds this size
    "log_backup_count": 3,  # number of rotated log files to keep
}


class ConfigError(Exception):
    """Required configuration is missing or unusable."""


@dataclass(frozen=True)
class Credentials:
    """Connection details for the game's remote file API."""
    host: str
    port: str
    token: str


def load_credentials(env_file: Path | None = None) -> Credentials:
    """
    Read HOST, PORT and TOKEN from *env_file* and the environment.

    Process environment variables win over values in the file.  Raises
    ConfigError naming every missing key.
    """
    env_path = Path(env_file) if env_file else Path.cwd() / ".env"
    values: dict[str, str | None] = {}
    if env_path.is_file():
        values.update(dotenv_values(env_path))
        logger.debug("Loaded credentials file %s", env_path)
    for key in REQUIRED_CREDENTIALS:
        if os.environ.get(key):
            values[key] = os.environ[key]

    missing = [key for key in REQUIRED_CREDENTIALS if not values.get(key)]
    if missing:
        raise ConfigError(
            f"Missing required setting(s): {', '.join(missing)} "
            f"(set them in {env_path} or the environment)"
        )
    return Credentials(
        host=str(values["HOST"]),
        port=str(values["PORT"]),
        token=str(values["TOKEN"]),
    )


def get_config_dir() -> Path:
    """Return the platform-appropriate application config directory."""
    return _platform_config_dir()


def get_config_path() -> Path:
    """Return the path to the configuration file."""
    return get_config_dir() / "config.json"


def get_log_path() -> Path:
    """Return the path to the log file."""
    return _platform_log_path()


class Config:
    """Configuration manager backed by a JSON file."""

    def __init__(self, path: Path | None = None):
        """Load config from *path*, falling back to the platform default."""
        self._path = path or get_config_path()
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        self.load()

    # ---- persistence ----

    def load(self) -> None:
        """Load configuration from disk, applying defaults for missing keys."""
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as fh:
                    stored = json.load(fh)
                # Merge stored values over defaults so new keys get defaults
                self._data = {**DEFAULT_CONFIG, **stored}
                logger.info("Configuration loaded from %s", self._path)
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Could not read config (%s); using defaults.", exc)
                self._data = dict(DEFAULT_CONFIG)
        else:
            self._data = dict(DEFAULT_CONFIG)
            self.save()
            logger.info("Created default configuration at %s", self._path)

    def save(self) -> None:
        """Persist the current configuration to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2)
            logger.info("Configuration saved.")
        except OSError as exc:
            logger.error("Failed to save configuration: %s", exc)

    # ---- accessors ----

    @property
    def home_folder(self) -> str:
        """Return the watched home folder, defaulting to ./home."""
        return self._data["home_folder"] or str(Path.cwd() / "home")

    @home_folder.setter
    def home_folder(self, value: str) -> None:
        """Set the watched home folder."""
        self._data["home_folder"] = value

    @property
    def debounce_seconds(self) -> float:
        """Return the debounce window in seconds."""
        return max(0, int(self._data["debounce_ms"])) / 1000.0

    @property
    def debounce_ms(self) -> int:
        """Return the debounce window in milliseconds."""
        return int(self._data["debounce_ms"])

    @debounce_ms.setter
    def debounce_ms(self, value: int) -> None:
        """Set the debounce window (minimum 0 ms)."""
        self._data["debounce_ms"] = max(0, int(value))

    @property
    def debounce_scope(self) -> str:
        """Return the debounce scope: 'global' or 'path'."""
        value = self._data.get("debounce_scope", SCOPE_GLOBAL)
        if value not in (SCOPE_GLOBAL, SCOPE_PATH):
            logger.warning("Unknown debounce_scope %r; using %r.", value, SCOPE_GLOBAL)
            return SCOPE_GLOBAL
        return value

    @debounce_scope.setter
    def debounce_scope(self, value: str) -> None:
        """Set the debounce scope."""
        if value not in (SCOPE_GLOBAL, SCOPE_PATH):
            value = SCOPE_GLOBAL
        self._data["debounce_scope"] = value

    @property
    def allowed_extensions(self) -> list[str]:
        """Return the remote extensions eligible for upload."""
        return self._data["allowed_extensions"]

    @allowed_extensions.setter
    def allowed_extensions(self, value: list[str]) -> None:
        """Set allowed extensions, normalising to a leading dot."""
        self._data["allowed_extensions"] = [
            "." + ext.strip().lstrip(".") for ext in value if ext.strip()
        ]

    @property
    def transpiler_command(self) -> list[str]:
        """Return the transpiler command line."""
        return list(self._data.get("transpiler_command") or DEFAULT_TRANSPILER_COMMAND)

    @transpiler_command.setter
    def transpiler_command(self, value: list[str]) -> None:
        """Set the transpiler command line."""
        self._data["transpiler_command"] = list(value)

    @property
    def request_timeout(self) -> float | None:
        """Return the HTTP timeout in seconds, or None for no timeout."""
        value = float(self._data.get("request_timeout_seconds") or 0)
        return value if value > 0 else None

    @request_timeout.setter
    def request_timeout(self, value: float | None) -> None:
        """Set the HTTP timeout (None or 0 = wait forever)."""
        self._data["request_timeout_seconds"] = max(0.0, float(value or 0))

    @property
    def log_level(self) -> str:
        """Return the current logging level name."""
        return self._data.get("log_level", "INFO")

    @log_level.setter
    def log_level(self, value: str) -> None:
        """Set the logging level name."""
        self._data["log_level"] = value

    # ---- log rotation ----

    @property
    def max_log_size_mb(self) -> int:
        """Return the maximum log file size in MB before rotation."""
        return int(self._data.get("max_log_size_mb", 10))

    @max_log_size_mb.setter
    def max_log_size_mb(self, value: int) -> None:
        """Set the maximum log file size in MB (minimum 1)."""
        self._data["max_log_size_mb"] = max(1, int(value))

    @property
    def log_backup_count(self) -> int:
        """Return the number of rotated log backups to keep."""
        return int(self._data.get("log_backup_count", 3))

    @log_backup_count.setter
    def log_backup_count(self, value: int) -> None:
        """Set the number of rotated log backups to keep."""
        self._data["log_backup_count"] = max(0, int(value))
