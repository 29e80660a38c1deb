"""Qt bridge for batch conversion.

The pipeline itself knows nothing about Qt; here its sink is a signal, so a
widget can connect to `progress` and receive `ProgressEvent` objects.
"""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QObject, QThread, Signal
from PySide6.QtWidgets import QFileDialog, QWidget

from image_converter.batch import BatchJob, BatchPipeline
from image_converter.logger import get_logger

_logger = get_logger("ui_batch")


class BatchConvertWorker(QThread):
    """Worker thread running one BatchPipeline."""

    progress = Signal(object)  # ProgressEvent
    finished_job = Signal()

    def __init__(self, job: BatchJob):
        super().__init__()
        self.job = job

    def run(self) -> None:
        try:
            BatchPipeline(self.progress.emit).run(self.job)
        finally:
            self.finished_job.emit()


class BatchConvertController(QObject):
    """Starts batch workers and forwards their events."""

    progress = Signal(object)
    finished = Signal()

    def __init__(self):
        super().__init__()
        self._worker: BatchConvertWorker | None = None

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.isRunning()

    def start(self, job: BatchJob) -> None:
        """Start a batch; returns once the worker thread is launched."""
        if self.is_running:
            raise RuntimeError("a batch conversion is already running")

        worker = BatchConvertWorker(job)
        worker.progress.connect(self.progress.emit)
        # QThread.finished is emitted after run() returns
        worker.finished.connect(self.finished.emit)
        worker.finished.connect(self._on_worker_finished)

        self._worker = worker
        _logger.debug("starting batch of %d file(s)", len(job))
        worker.start()

    def wait(self, msecs: int = -1) -> bool:
        if self._worker is None:
            return True
        return self._worker.wait(msecs) if msecs >= 0 else self._worker.wait()

    def _on_worker_finished(self) -> None:
        if self._worker is not None:
            self._worker.wait()
            self._worker = None


def pick_folder(parent: QWidget | None = None, start_dir: str = "") -> Path | None:
    """Ask the user for a folder; None when the dialog is cancelled."""
    chosen = QFileDialog.getExistingDirectory(parent, "Select a folder", start_dir)
    return Path(chosen) if chosen else None
