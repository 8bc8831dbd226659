# workers.py
"""
Background task execution for the photo grid editor.
Defines a Worker wrapping any callable as a QRunnable so slow work such as
image decoding runs on a QThreadPool and reports back through signals.
"""
import logging
from typing import Any, Callable

from PySide6.QtCore import QObject, QRunnable, Signal


LOGGER = logging.getLogger(__name__)


class WorkerSignals(QObject):
    started = Signal()
    finished = Signal()
    error = Signal(str)
    result = Signal(object)


class Worker(QRunnable):
    """Wraps any function to run in a QThreadPool."""
    def __init__(self, fn: Callable[..., Any], *args, **kwargs):
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = WorkerSignals()

    def run(self) -> None:
        try:
            self.signals.started.emit()
            result = self.fn(*self.args, **self.kwargs)
        except Exception as e:  # noqa: BLE001 - reported through the error signal
            LOGGER.error("Worker error: %s", e)
            self.signals.error.emit(str(e))
        else:
            self.signals.result.emit(result)
        finally:
            self.signals.finished.emit()
