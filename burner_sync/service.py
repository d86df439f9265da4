"""
Headless runner for Burner Sync.

Wires configuration, the upload client, the sync coordinator and the
folder watcher together, then blocks until SIGINT/SIGTERM.
"""

import logging
import logging.handlers
import signal
import sys
import time
from pathlib import Path

from burner_sync.config import Config, Credentials, get_log_path
from burner_sync.coordinator import SyncCoordinator
from burner_sync.transform import SourceTransformer
from burner_sync.uploader import Uploader
from burner_sync.watcher import FolderWatcher

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(cfg: Config, level_name: str | None = None, log_path: Path | None = None) -> None:
    """Configure rotating file log and stderr handler."""
    level = getattr(logging, (level_name or cfg.log_level).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    fmt = logging.Formatter(LOG_FORMAT)

    # Rotating file handler
    max_bytes = cfg.max_log_size_mb * 1024 * 1024
    fh = logging.handlers.RotatingFileHandler(
        str(log_path or get_log_path()),
        maxBytes=max_bytes,
        backupCount=cfg.log_backup_count,
        encoding="utf-8",
    )
    fh.setLevel(level)
    fh.setFormatter(fmt)
    root_logger.addHandler(fh)

    # Stderr handler, the user-facing console output
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(fmt)
    root_logger.addHandler(sh)


def build_coordinator(cfg: Config, creds: Credentials) -> SyncCoordinator:
    """Create the upload client and coordinator described by *cfg*."""
    uploader = Uploader(
        host=creds.host,
        port=creds.port,
        token=creds.token,
        timeout=cfg.request_timeout,
    )
    return SyncCoordinator(
        home_folder=cfg.home_folder,
        uploader=uploader,
        transformer=SourceTransformer(command=cfg.transpiler_command),
        debounce_seconds=cfg.debounce_seconds,
        scope=cfg.debounce_scope,
        allowed_extensions=cfg.allowed_extensions,
    )


def start_sync(
    cfg: Config, creds: Credentials, push_all: bool = False
) -> tuple[FolderWatcher, SyncCoordinator]:
    """
    Start the sync engine (coordinator + watcher).

    With *push_all*, every eligible file is uploaded once before the
    watcher starts.  Returns the (watcher, coordinator) so the caller
    can stop them.
    """
    coordinator = build_coordinator(cfg, creds)
    if push_all:
        pushed = coordinator.sync_all_now()
        logger.info("Pushed %d file(s) from %s", pushed, cfg.home_folder)

    watcher = FolderWatcher(
        home_folder=cfg.home_folder,
        on_change=coordinator.submit,
        recursive=True,
    )
    watcher.start()
    logger.info(
        "Syncing to http://%s:%s/ (debounce=%dms, scope=%s)",
        creds.host,
        creds.port,
        cfg.debounce_ms,
        cfg.debounce_scope,
    )
    return watcher, coordinator


def run_foreground(cfg: Config, creds: Credentials, push_all: bool = False) -> None:
    """Run the sync engine in the foreground until SIGINT/SIGTERM."""
    watcher, coordinator = start_sync(cfg, creds, push_all=push_all)
    stop = False

    def _handler(sig, frame):
        nonlocal stop
        stop = True
        watcher.stop()
        coordinator.close()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)

    print("Burner Sync running (press Ctrl-C to stop)…")
    while not stop:
        time.sleep(1)
    print("Burner Sync stopped.")
