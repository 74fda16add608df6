# sync/workers.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from PySide6.QtCore import QObject, QThread, Signal, Slot

from core.errors import LyricSyncError
from core.models import TrackMeta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveRequest:
    meta: TrackMeta
    cache_path: Optional[Path]
    force_refetch: bool
    serial: int   # engine-side lyric serial at issue time
    query_text: Optional[str] = None


ResolveJob = Callable[[ResolveRequest], object]


class ResolveWorker(QThread):
    resolved = Signal(object, object)   # request, job result
    failed = Signal(object, str)        # request, message

    def __init__(self, request: ResolveRequest, job: ResolveJob, parent=None):
        super().__init__(parent)
        self.request = request
        self.job = job

    def run(self):
        try:
            result = self.job(self.request)
        except LyricSyncError as e:
            logger.warning("lyric resolve failed for %r: %s", self.request.meta.title, e)
            self.failed.emit(self.request, str(e))
            return
        except Exception as e:
            logger.exception("lyric resolve failed for %r", self.request.meta.title)
            self.failed.emit(self.request, f"{type(e).__name__}: {e}")
            return
        self.resolved.emit(self.request, result)


class ThreadedDispatcher(QObject):
    """
    Runs resolve jobs off the GUI thread. Results come back through
    `resolved`/`failed`, delivered on the thread that owns the dispatcher.
    """
    resolved = Signal(object, object)
    failed = Signal(object, str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._workers: set[ResolveWorker] = set()

    def submit(self, request: ResolveRequest, job: ResolveJob) -> None:
        worker = ResolveWorker(request, job)
        worker.resolved.connect(self._on_resolved)
        worker.failed.connect(self._on_failed)
        worker.finished.connect(self._reap)
        # keep a reference until the thread is done, Qt would abort it otherwise
        self._workers.add(worker)
        worker.start()

    @Slot(object, object)
    def _on_resolved(self, request: ResolveRequest, result):
        self.resolved.emit(request, result)

    @Slot(object, str)
    def _on_failed(self, request: ResolveRequest, message: str):
        self.failed.emit(request, message)

    @Slot()
    def _reap(self):
        worker = self.sender()
        if worker in self._workers:
            self._workers.discard(worker)
            worker.deleteLater()

    def pending(self) -> int:
        return len(self._workers)

    def wait_all(self, msecs: int = 5000) -> None:
        for worker in list(self._workers):
            worker.wait(msecs)
