"""
Sync coordinator for Burner Sync.

Receives change events from the watcher, coalesces bursts behind a
short debounce window, then pushes the surviving file through the
pipeline: name mapping, transpilation, import rewriting, upload, and
finally the RAM-usage header update.  Each stage that fails ends that
attempt only; the watcher keeps running and the next save tries again.

Debounce scope
--------------
``global`` (default): all paths share one timer, so a burst touching
several files syncs only the last one.  ``path``: one timer per file,
so every distinct file in a burst is synced once.
"""

import enum
import logging
import os
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from burner_sync.config import SCOPE_GLOBAL, SCOPE_PATH
from burner_sync.header import annotate
from burner_sync.paths import (
    ALLOWED_EXTENSIONS,
    format_usage,
    is_syncable,
    map_name,
    rewrite_imports,
)
from burner_sync.transform import SourceTransformer, TranspileError
from burner_sync.uploader import (
    UploadHttpError,
    UploadRejected,
    UploadTransportError,
    Uploader,
)
from burner_sync.watcher import ChangeEvent, ChangeKind

logger = logging.getLogger(__name__)

_GLOBAL_KEY = "*"

DEFAULT_DEBOUNCE_SECONDS = 0.1


class SyncOutcome(enum.Enum):
    SYNCED = "synced"
    INVALID_NAME = "invalid_name"
    SKIPPED = "skipped"
    READ_FAILED = "read_failed"
    TRANSPILE_FAILED = "transpile_failed"
    UPLOAD_FAILED = "upload_failed"
    REJECTED = "rejected"
    ANNOTATE_FAILED = "annotate_failed"


@dataclass(frozen=True)
class SyncTask:
    source_path: Path
    relative_path: str


@dataclass
class SyncRecord:
    """Record of a single sync attempt."""
    source: str
    filename: str = ""
    outcome: SyncOutcome | None = None
    ram_usage: float | None = None
    error: str = ""
    started: float = 0.0
    finished: float = 0.0

    @property
    def success(self) -> bool:
        return self.outcome is SyncOutcome.SYNCED

    @property
    def duration(self) -> float:
        if self.finished and self.started:
            return self.finished - self.started
        return 0.0


@dataclass
class SyncStats:
    """Aggregated sync statistics."""
    total_synced: int = 0
    total_failed: int = 0
    total_skipped: int = 0
    last_synced_file: str = ""
    history: list[SyncRecord] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record(self, rec: SyncRecord) -> None:
        with self._lock:
            self.history.append(rec)
            if rec.outcome is SyncOutcome.SKIPPED:
                self.total_skipped += 1
            elif rec.success:
                self.total_synced += 1
                self.last_synced_file = rec.filename
            else:
                self.total_failed += 1
            # Keep last 1000 records
            if len(self.history) > 1000:
                self.history = self.history[-1000:]


class SyncCoordinator:
    """
    Debounces change events and runs the per-file sync pipeline.

    Parameters
    ----------
    home_folder : str
        Root of the watched tree; remote names are relative to it.
    uploader : Uploader
        Client for the remote file API.
    transformer : SourceTransformer, optional
        Transpiler front-end; a default esbuild-backed one if omitted.
    debounce_seconds : float
        Quiescence window before a pending sync fires.
    scope : str
        ``"global"`` or ``"path"``; see the module docstring.
    allowed_extensions : iterable of str, optional
        Remote extensions eligible for upload.
    on_sync_complete : callable, optional
        Invoked with the SyncRecord after every attempt.
    """

    def __init__(
        self,
        home_folder: str,
        uploader: Uploader,
        transformer: SourceTransformer | None = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        scope: str = SCOPE_GLOBAL,
        allowed_extensions=None,
        on_sync_complete: Callable[[SyncRecord], None] | None = None,
    ):
        if scope not in (SCOPE_GLOBAL, SCOPE_PATH):
            raise ValueError(f"Unknown debounce scope: {scope!r}")
        self.home_folder = Path(home_folder)
        self._uploader = uploader
        self._transformer = transformer or SourceTransformer()
        self._debounce = max(0.0, float(debounce_seconds))
        self._scope = scope
        self._allowed = frozenset(allowed_extensions or ALLOWED_EXTENSIONS)
        self._on_sync_complete = on_sync_complete
        self.stats = SyncStats()

        # key -> (timer, latest path)
        self._timers: dict[str, tuple[threading.Timer, str]] = {}
        # One lock per key ever seen; under "path" scope this grows with the
        # number of distinct files, which stays small for a script folder.
        self._run_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    @property
    def scope(self) -> str:
        return self._scope

    @property
    def pending(self) -> dict[str, str]:
        """Return a snapshot of debounce key -> path awaiting sync."""
        with self._lock:
            return {key: path for key, (_, path) in self._timers.items()}

    # ---- event intake ----

    def _key_for(self, path: str) -> str:
        return _GLOBAL_KEY if self._scope == SCOPE_GLOBAL else path

    def submit(self, event: ChangeEvent) -> None:
        """Schedule a sync for the last path of a modify event."""
        if event.kind is not ChangeKind.MODIFY or not event.paths:
            return
        path = event.paths[-1]
        key = self._key_for(path)

        timer = threading.Timer(self._debounce, self._fire, args=(key,))
        timer.daemon = True
        with self._lock:
            previous = self._timers.get(key)
            if previous is not None:
                previous[0].cancel()
            self._timers[key] = (timer, path)
        timer.start()

    def _fire(self, key: str) -> None:
        with self._lock:
            entry = self._timers.get(key)
            if entry is None or entry[0] is not threading.current_thread():
                # Superseded by a newer event or flushed already.
                return
            del self._timers[key]
            path = entry[1]
        self._run(key, path)

    def _run(self, key: str, path: str) -> None:
        with self._lock:
            run_lock = self._run_locks.setdefault(key, threading.Lock())
        with run_lock:
            try:
                self.sync_file(Path(path))
            except Exception:
                logger.exception("Unexpected error syncing %s", path)

    def flush(self) -> int:
        """Run every pending sync now, in the calling thread.

        Returns the number of syncs run.
        """
        with self._lock:
            entries = list(self._timers.items())
            self._timers.clear()
        for key, (timer, path) in entries:
            timer.cancel()
            self._run(key, path)
        return len(entries)

    def cancel_all(self) -> None:
        """Drop all pending syncs without running them."""
        with self._lock:
            for timer, _ in self._timers.values():
                timer.cancel()
            self._timers.clear()

    def close(self) -> None:
        """Drop pending syncs and release the upload session."""
        self.cancel_all()
        self._uploader.close()

    def sync_all_now(self) -> int:
        """
        Sync every eligible file under the home folder once.

        Returns the number of files synced successfully.
        """
        count = 0
        if not self.home_folder.is_dir():
            return 0
        for item in sorted(self.home_folder.rglob("*")):
            if item.is_file() and self.sync_file(item).success:
                count += 1
        return count

    # ---- pipeline ----

    def _task_for(self, source_path: Path) -> SyncTask:
        return SyncTask(
            source_path=source_path,
            relative_path=os.path.relpath(source_path, self.home_folder),
        )

    def sync_file(self, source_path: Path) -> SyncRecord:
        """Push one file through the pipeline and return what happened."""
        task = self._task_for(Path(source_path))
        rec = SyncRecord(source=str(task.source_path), started=time.time())
        try:
            self._sync(task, rec)
        finally:
            rec.finished = time.time()
            self.stats.record(rec)
            if self._on_sync_complete:
                try:
                    self._on_sync_complete(rec)
                except Exception:
                    logger.exception("Error in on_sync_complete callback")
        return rec

    def _sync(self, task: SyncTask, rec: SyncRecord) -> None:
        filename = map_name(task.relative_path)
        if filename is None:
            rec.outcome = SyncOutcome.INVALID_NAME
            logger.warning('Failed to copy "%s" please check file name.', task.relative_path)
            return
        rec.filename = filename

        if not is_syncable(filename, self._allowed):
            rec.outcome = SyncOutcome.SKIPPED
            logger.info("%s not allowed to sync to Bitburner", filename)
            return

        try:
            with open(task.source_path, encoding="utf-8") as fh:
                source = fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            rec.outcome = SyncOutcome.READ_FAILED
            rec.error = str(exc)
            logger.error("Failed to copy %s, could not read file: %s", task.relative_path, exc)
            return

        try:
            code = rewrite_imports(self._transformer.transform(source))
        except TranspileError as exc:
            rec.outcome = SyncOutcome.TRANSPILE_FAILED
            rec.error = str(exc)
            logger.error("Failed to transpile %s: %s", task.relative_path, exc)
            return

        result = self._uploader.upload(filename, code)
        if isinstance(result, UploadRejected):
            rec.outcome = SyncOutcome.REJECTED
            rec.error = "Rejected by game"
            return
        if isinstance(result, UploadHttpError):
            rec.outcome = SyncOutcome.UPLOAD_FAILED
            rec.error = f"HTTP {result.status} {result.reason}".strip()
            return
        if isinstance(result, UploadTransportError):
            rec.outcome = SyncOutcome.UPLOAD_FAILED
            rec.error = result.error
            return

        rec.ram_usage = result.ram_usage
        logger.info(
            "File saved in Bitburner %s (%sGB Ram)", filename, format_usage(result.ram_usage)
        )

        try:
            annotate(task.source_path, result.ram_usage)
        except OSError as exc:
            rec.outcome = SyncOutcome.ANNOTATE_FAILED
            rec.error = str(exc)
            logger.error("Could not update header of %s: %s", task.relative_path, exc)
            return
        rec.outcome = SyncOutcome.SYNCED
