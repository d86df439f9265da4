"""File system watcher for Burner Sync.

Uses the watchdog library to monitor the home folder and forwards
every file event, as a ChangeEvent, to a callback (normally the
SyncCoordinator).  Filtering by event kind is left to the receiver.
"""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class ChangeKind(enum.Enum):
    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"
    OTHER = "other"


_KIND_BY_EVENT_TYPE = {
    "created": ChangeKind.CREATE,
    "modified": ChangeKind.MODIFY,
    # Atomic saves (temp file renamed over the target) only show up as moves.
    "moved": ChangeKind.MODIFY,
    "deleted": ChangeKind.DELETE,
}


@dataclass(frozen=True)
class ChangeEvent:
    """One file system notification: affected paths plus what happened."""
    paths: tuple[str, ...]
    kind: ChangeKind


def to_change_event(event: FileSystemEvent) -> ChangeEvent:
    """Convert a watchdog event into a ChangeEvent."""
    paths = [os.fsdecode(event.src_path)]
    dest = getattr(event, "dest_path", "")
    if dest:
        paths.append(os.fsdecode(dest))
    kind = _KIND_BY_EVENT_TYPE.get(event.event_type, ChangeKind.OTHER)
    return ChangeEvent(paths=tuple(paths), kind=kind)


class ChangeHandler(FileSystemEventHandler):
    """Watchdog handler that turns file events into ChangeEvents."""

    def __init__(self, on_change: Callable[[ChangeEvent], None]):
        super().__init__()
        self._on_change = on_change

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        change = to_change_event(event)
        logger.debug("> %s %s", change.kind.value, ", ".join(change.paths))
        try:
            self._on_change(change)
        except Exception:
            logger.exception("Error handling change event for %s", change.paths)


class FolderWatcher:
    """Watches the home folder and reports every file change.

    Usage:
        watcher = FolderWatcher(home, coordinator.submit)
        watcher.start()
        ...
        watcher.stop()
    """

    def __init__(
        self,
        home_folder: str,
        on_change: Callable[[ChangeEvent], None],
        recursive: bool = True,
    ):
        self.home_folder = str(home_folder)
        self._recursive = recursive
        self._handler = ChangeHandler(on_change)
        self._observer: Any | None = None

    # ---- lifecycle ----

    def start(self) -> None:
        """Start watching the home folder."""
        if not os.path.isdir(self.home_folder):
            logger.error("Home folder does not exist: %s", self.home_folder)
            raise FileNotFoundError(f"Home folder does not exist: {self.home_folder}")

        observer = Observer()
        self._observer = observer
        observer.schedule(self._handler, self.home_folder, recursive=self._recursive)
        observer.start()
        logger.info("Watching '%s' (recursive=%s)", self.home_folder, self._recursive)

    def stop(self) -> None:
        """Stop watching and release resources."""
        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        logger.info("Watcher stopped.")

    @property
    def is_running(self) -> bool:
        """Return whether the watcher is currently active."""
        return self._observer is not None and self._observer.is_alive()
