# managers/autosave.py
"""Periodic autosave of layout records.

:class:`AutosaveManager` asks a callback for the current layout record on a
``QTimer`` tick and writes it to a timestamped JSON file on a Qt thread
pool.  Failed writes are retried with exponential backoff; a write that
keeps failing surfaces as :class:`AutosaveError`.  Every attempt logs
through a ``LoggerAdapter`` carrying a correlation id (``cid``) and is
counted in ``autosave_metrics``.
"""

from __future__ import annotations

import glob
import logging
import os
import threading
import time
import uuid
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from PySide6.QtCore import (
    QCoreApplication,
    QDateTime,
    QThreadPool,
    QTimer,
)

from .. import config
from ..errors import PhotoGridError
from ..serialization.store import load_layout_from_file, save_layout_to_file
from ..workers import Worker


AUTOSAVE_PATTERN = "photogrid_autosave_*.json"


class AutosaveError(PhotoGridError, RuntimeError):
    """Raised when an autosave operation ultimately fails."""


class _AutosaveMetrics:
    """In-memory counters and durations for autosave attempts."""

    def __init__(self) -> None:
        self.counters: Counter[str] = Counter()
        self.durations: list[float] = []

    def record(self, name: str, duration: float | None = None) -> None:
        self.counters[name] += 1
        if duration is not None:
            self.durations.append(duration)

    def reset(self) -> None:
        self.counters.clear()
        self.durations.clear()


autosave_metrics = _AutosaveMetrics()


@dataclass(slots=True)
class _AutosaveContext:
    cid: str
    path: str
    record: Mapping[str, Any]
    log: logging.LoggerAdapter


class AutosaveManager:
    """Write the editor's layout record to disk at a fixed interval."""

    def __init__(
        self,
        parent,
        save_callback: Callable[[], Mapping[str, Any]],
        timer: Optional[QTimer] = None,
        retry_scheduler: Optional[Callable[[int, Callable[[], None]], None]] = None,
        thread_pool: Optional[QThreadPool] = None,
        path: str = config.AUTOSAVE_PATH,
    ):
        self.parent = parent
        self.save_callback = save_callback
        self.timer = timer or QTimer(parent)
        self.timer.timeout.connect(self.perform_autosave)
        self.timer.start(config.AUTOSAVE_INTERVAL_MS)
        self.path = path
        os.makedirs(self.path, exist_ok=True)

        self._thread_pool = thread_pool or QThreadPool.globalInstance()
        self._max_retries = 3
        self._initial_backoff_ms = 100
        self._is_running = False
        self._retry_scheduled = False
        self._pending_exception: AutosaveError | None = None
        self._idle_event = threading.Event()
        self._idle_event.set()
        self._retry_scheduler = retry_scheduler or (
            lambda ms, cb: QTimer.singleShot(ms, cb)
        )

    def wait_for_idle(self, timeout: float | None = None) -> None:
        """Block until the running autosave, retries included, has finished."""

        app = QCoreApplication.instance()
        deadline = None if timeout is None else time.perf_counter() + timeout
        step = 0.01 if app is not None else timeout
        while True:
            if self._idle_event.wait(0 if app is None else step):
                break
            if app is not None:
                app.processEvents()
            if deadline is not None and time.perf_counter() >= deadline:
                raise TimeoutError("Autosave task did not complete in time")
        if self._pending_exception is not None:
            exc = self._pending_exception
            self._pending_exception = None
            raise exc

    def perform_autosave(self) -> None:
        """Snapshot the layout and start writing it in the background."""

        if self._is_running or self._retry_scheduled:
            return

        cid = uuid.uuid4().hex
        log = logging.LoggerAdapter(logging.getLogger(__name__), {"cid": cid})
        try:
            record = dict(self.save_callback())
        except Exception as exc:  # noqa: BLE001 - surfaced as AutosaveError
            log.error("autosave snapshot failed", extra={"error": str(exc)})
            autosave_metrics.record("failure")
            raise AutosaveError("Failed to capture layout for autosave") from exc

        timestamp = QDateTime.currentDateTime().toString(config.AUTOSAVE_TIMESTAMP_FORMAT)
        fname = AUTOSAVE_PATTERN.replace("*", f"{timestamp}_{cid[:8]}")
        context = _AutosaveContext(
            cid=cid, path=os.path.join(self.path, fname), record=record, log=log
        )
        self._start_attempt(context, attempt=1, backoff_ms=self._initial_backoff_ms)

    def _start_attempt(
        self,
        context: _AutosaveContext,
        *,
        attempt: int,
        backoff_ms: int,
    ) -> None:
        self._is_running = True
        self._idle_event.clear()
        start = time.perf_counter()

        worker = Worker(save_layout_to_file, context.record, context.path)

        def _on_success(_: Any) -> None:
            duration = (time.perf_counter() - start) * 1000
            autosave_metrics.record("success", duration)
            context.log.info(
                "autosave complete",
                extra={"path": context.path, "duration_ms": duration},
            )
            self._cleanup_old(context.log)
            self._pending_exception = None

        def _on_error(message: str) -> None:
            self._handle_worker_error(
                context,
                attempt=attempt,
                backoff_ms=backoff_ms,
                start=start,
                error_message=message,
            )

        worker.signals.result.connect(_on_success)
        worker.signals.error.connect(_on_error)
        worker.signals.finished.connect(self._mark_idle)
        self._thread_pool.start(worker)

    def _mark_idle(self) -> None:
        if not self._retry_scheduled:
            self._is_running = False
            self._idle_event.set()

    def _cleanup_old(self, log: Optional[logging.LoggerAdapter] = None) -> None:
        files = sorted(
            glob.glob(os.path.join(self.path, AUTOSAVE_PATTERN)),
            key=os.path.getmtime,
            reverse=True,
        )
        for old in files[config.MAX_AUTOSAVE_FILES:]:
            try:
                os.remove(old)
            except OSError as exc:
                (log or logging.getLogger(__name__)).warning(
                    "cleanup failed",
                    extra={"file": old, "error": str(exc)},
                )

    def get_latest(self) -> Optional[str]:
        files = glob.glob(os.path.join(self.path, AUTOSAVE_PATTERN))
        if not files:
            return None
        return max(files, key=os.path.getmtime)

    def load_latest(self) -> Optional[Dict[str, Any]]:
        """Return the newest autosaved record, or ``None`` if there is none."""
        latest = self.get_latest()
        if latest is None:
            return None
        return load_layout_from_file(latest)

    def _handle_worker_error(
        self,
        context: _AutosaveContext,
        *,
        attempt: int,
        backoff_ms: int,
        start: float,
        error_message: str,
    ) -> None:
        context.log.warning(
            "autosave attempt failed",
            extra={"attempt": attempt, "path": context.path, "error": error_message},
        )

        if attempt >= self._max_retries:
            self._finalize_failure(context, attempt, error_message)
            return

        self._retry_scheduled = True

        def _retry() -> None:
            self._retry_scheduled = False
            self._start_attempt(
                context,
                attempt=attempt + 1,
                backoff_ms=int(min(backoff_ms * 2, 2000)),
            )

        autosave_metrics.record("retry", (time.perf_counter() - start) * 1000)
        self._retry_scheduler(backoff_ms, _retry)

    def _finalize_failure(
        self,
        context: _AutosaveContext,
        attempt: int,
        error_message: str,
    ) -> None:
        autosave_metrics.record("failure")
        context.log.error(
            "autosave failed after retries",
            extra={"attempt": attempt, "path": context.path, "error": error_message},
        )
        self._pending_exception = AutosaveError(
            f"Failed to autosave to {context.path}: {error_message}"
        )
        self._is_running = False
        self._retry_scheduled = False
        self._idle_event.set()
