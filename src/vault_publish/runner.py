"""Serialized sync runs with a persisted status record.

``SyncRunner`` wraps ``SyncEngine`` for long-lived callers (a watcher, a
scheduler, a dashboard).  It guarantees that at most one run is in flight,
records the outcome of every run in a ``RunStatus`` and keeps a short task
log, newest first.

The status is an immutable value: every transition returns a new
``RunStatus`` built by ``start_task()`` or ``finish_task()``, so callers can
hold on to a snapshot without it changing under them.

``Debouncer`` coalesces bursts of change notifications (e.g. an editor
saving several files) into a single call.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError

from .config import Config
from .file_handler import write_json_atomic
from .sync.engine import SyncEngine
from .sync.models import SyncReport
from .sync.state import ManifestStore

logger = logging.getLogger(__name__)

MAX_TASK_LOGS = 50
DEFAULT_DEBOUNCE_SECONDS = 2.0
ALREADY_RUNNING = "A sync is already running"

TaskResult = Literal["running", "success", "fail"]


# ---------------------------------------------------------------------------
# Status models
# ---------------------------------------------------------------------------


class TaskLog(BaseModel):
    """One entry of the task log.

    Attributes:
        type: Task kind, e.g. ``"sync"``.
        at: ISO 8601 timestamp when the task started.
        result: ``running`` until the task finishes.
        error: Failure message, if the task failed.
    """

    type: str
    at: str
    result: TaskResult
    error: str | None = None

    model_config = {"frozen": True}


class RunStatus(BaseModel):
    """Outcome of the most recent run plus the task log.

    Attributes:
        last_sync_at: ISO 8601 timestamp of the last run start.
        last_sync_success: Whether the last run succeeded (``None`` before
            the first run).
        last_sync_error: Error message of the last failed run.
        is_running: Whether a run is in progress.  Never persisted.
        logs: Task log, newest first, at most ``MAX_TASK_LOGS`` entries.
    """

    last_sync_at: str | None = None
    last_sync_success: bool | None = None
    last_sync_error: str | None = None
    is_running: bool = False
    logs: list[TaskLog] = []

    model_config = {"frozen": True}


class RunOutcome(BaseModel):
    """Result of a ``SyncRunner.run_sync()`` call."""

    ok: bool
    error: str | None = None
    report: SyncReport | None = None
    status: RunStatus

    model_config = {"frozen": True}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def start_task(status: RunStatus, task_type: str, at: str) -> RunStatus:
    """Return *status* marked as running, with a new ``running`` log entry."""
    entry = TaskLog(type=task_type, at=at, result="running")
    return status.model_copy(
        update={
            "is_running": True,
            "last_sync_at": at,
            "logs": [entry, *status.logs][:MAX_TASK_LOGS],
        }
    )


def finish_task(
    status: RunStatus, task_type: str, error: str | None = None
) -> RunStatus:
    """Return *status* marked as finished.

    The newest ``running`` log entry of *task_type* is closed with
    ``success`` or ``fail``.
    """
    logs = list(status.logs)
    for index, entry in enumerate(logs):
        if entry.type == task_type and entry.result == "running":
            logs[index] = entry.model_copy(
                update={
                    "result": "fail" if error else "success",
                    "error": error,
                }
            )
            break
    return status.model_copy(
        update={
            "is_running": False,
            "last_sync_success": error is None,
            "last_sync_error": error,
            "logs": logs,
        }
    )


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class SyncRunner:
    """Run publish syncs one at a time and track their status.

    Args:
        config: Resolved configuration.
        status_path: Optional JSON file the status is persisted to after
            every run, and restored from on construction.
    """

    def __init__(self, config: Config, status_path: Path | None = None) -> None:
        self._config = config
        self._status_path = status_path
        self._lock = threading.Lock()
        self._status = self._load_status()

    @property
    def status(self) -> RunStatus:
        """Current status snapshot."""
        return self._status

    def run_sync(self, dry_run: bool = False) -> RunOutcome:
        """Run one sync, unless another is already in progress.

        File system and configuration errors are reported in the outcome
        rather than raised.

        Args:
            dry_run: Preview only; nothing is written.

        Returns:
            ``RunOutcome`` with the report on success.
        """
        if not self._lock.acquire(blocking=False):
            logger.warning("Sync request rejected: already running")
            return RunOutcome(ok=False, error=ALREADY_RUNNING, status=self._status)

        try:
            self._status = start_task(self._status, "sync", _now())
            try:
                report = self._build_engine().run(dry_run=dry_run)
            except (OSError, ValueError) as exc:
                logger.error("Sync failed: %s", exc)
                self._status = finish_task(self._status, "sync", str(exc))
                self._save_status()
                return RunOutcome(ok=False, error=str(exc), status=self._status)

            self._status = finish_task(self._status, "sync")
            self._save_status()
            return RunOutcome(ok=True, report=report, status=self._status)
        finally:
            self._lock.release()

    def _build_engine(self) -> SyncEngine:
        return SyncEngine(
            source_root=self._config.source_dir,
            content_root=self._config.content_dir,
            manifest_store=ManifestStore(self._config.manifest_path),
            images_dir=self._config.images_dir,
            publish_keys=self._config.publish_keys,
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load_status(self) -> RunStatus:
        if self._status_path is None:
            return RunStatus()
        try:
            with open(self._status_path, encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return RunStatus()
        except (OSError, ValueError) as exc:
            logger.warning(
                "Ignoring unreadable status file %s: %s", self._status_path, exc
            )
            return RunStatus()

        if not isinstance(data, dict):
            logger.warning("Ignoring status file %s: not an object", self._status_path)
            return RunStatus()
        data.pop("is_running", None)
        try:
            return RunStatus.model_validate(data)
        except ValidationError as exc:
            logger.warning(
                "Ignoring status file %s: %d invalid field(s)",
                self._status_path,
                exc.error_count(),
            )
            return RunStatus()

    def _save_status(self) -> None:
        if self._status_path is None:
            return
        data = self._status.model_dump(exclude={"is_running"})
        try:
            write_json_atomic(self._status_path, data)
        except OSError:
            # The sync itself already completed; keep the in-memory status.
            logger.exception("Failed to save status to %s", self._status_path)


# ---------------------------------------------------------------------------
# Debouncer
# ---------------------------------------------------------------------------


class Debouncer:
    """Call *callback* once, *delay* seconds after the last ``trigger()``.

    Args:
        delay: Quiet period in seconds.
        callback: Zero-argument callable, run on a timer thread.
    """

    def __init__(self, delay: float, callback: Callable[[], object]) -> None:
        self._callback = callback
        self._delay = delay
        self._guard = threading.Lock()
        self._timer: threading.Timer | None = None

    @property
    def pending(self) -> bool:
        """``True`` while a call is scheduled."""
        with self._guard:
            return self._timer is not None

    def trigger(self) -> None:
        """(Re)start the quiet period."""
        with self._guard:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        """Drop the scheduled call, if any."""
        with self._guard:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self) -> bool:
        """Run the scheduled call now instead of waiting.

        Returns:
            ``True`` if a call was pending and has been run.
        """
        with self._guard:
            timer, self._timer = self._timer, None
        if timer is None:
            return False
        timer.cancel()
        self._callback()
        return True

    def _fire(self) -> None:
        with self._guard:
            if self._timer is None or self._timer is not threading.current_thread():
                return
            self._timer = None
        self._callback()
