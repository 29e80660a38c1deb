"""Batch conversion pipeline.

A `BatchPipeline` runs one `BatchJob` on a worker thread and reports through a
sink callable given at construction. Files are converted strictly in input
order. For N files the sink receives, per file, one `processing` event followed
by one `success` or `error` event, then a single `complete` event at 100%.

A failing file never stops the batch, and neither does a sink that raises:
the delivery failure is logged and the pipeline moves on.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from image_converter.color import BackgroundColor
from image_converter.converter import ConversionOutcome, convert_image_from_path
from image_converter.image_engine.formats import TargetFormat
from image_converter.logger import get_logger

_logger = get_logger("batch")


class ProgressStatus(str, Enum):
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ProgressEvent:
    status: ProgressStatus
    message: str
    progress: int

    def to_dict(self) -> dict[str, object]:
        return {"status": self.status.value, "message": self.message, "progress": self.progress}


@dataclass(frozen=True)
class BatchJob:
    files: tuple[Path, ...]
    target: TargetFormat
    background: BackgroundColor | None = None

    @classmethod
    def create(cls, files: Iterable[str | Path], fmt: str | TargetFormat, bg_color: str | None = None) -> BatchJob:
        """Build a job; raises on an unknown format or malformed color."""
        return cls(
            files=tuple(Path(f) for f in files),
            target=TargetFormat.from_tag(fmt),
            background=BackgroundColor.parse_optional(bg_color),
        )

    def __len__(self) -> int:
        return len(self.files)


class BatchState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


ProgressSink = Callable[[ProgressEvent], None]
PathConverter = Callable[[Path, TargetFormat, BackgroundColor | None], ConversionOutcome]


def progress_percent(index: int, total: int) -> int:
    """Percent after finishing entry `index` (0-based) of `total`, halves rounded up."""
    if total <= 0:
        return 100
    return int((index + 1) * 100 / total + 0.5)


class BatchPipeline:
    """Runs a single batch job and reports progress to `sink`."""

    def __init__(self, sink: ProgressSink, converter: PathConverter = convert_image_from_path):
        self._sink = sink
        self._converter = converter
        self._state = BatchState.IDLE
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> BatchState:
        return self._state

    def start(self, job: BatchJob) -> threading.Thread:
        """Hand the job to a worker thread and return without waiting."""
        self._claim()
        thread = threading.Thread(target=self._execute, args=(job,), name="batch-convert", daemon=True)
        self._thread = thread
        thread.start()
        return thread

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the worker finishes; True when the job has completed."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self._state is BatchState.COMPLETED

    def run(self, job: BatchJob) -> None:
        """Execute the job on the calling thread."""
        self._claim()
        self._execute(job)

    def _claim(self) -> None:
        with self._lock:
            if self._state is not BatchState.IDLE:
                raise RuntimeError(f"batch pipeline already {self._state.value}")
            self._state = BatchState.RUNNING

    def _execute(self, job: BatchJob) -> None:
        total = len(job.files)
        failed = 0
        _logger.info("batch started: %d file(s) -> %s", total, job.target.extension)
        try:
            for idx, path in enumerate(job.files):
                progress = progress_percent(idx, total)
                name = path.name
                self._emit(ProgressStatus.PROCESSING, f"Converting {name}...", progress)
                try:
                    outcome = self._converter(path, job.target, job.background)
                except Exception as ex:  # keep worker resilient
                    _logger.exception("unexpected failure converting %s", path)
                    outcome = ConversionOutcome(error=str(ex) or ex.__class__.__name__)
                if outcome.ok:
                    self._emit(ProgressStatus.SUCCESS, f"{name} -> {outcome.output_path}", progress)
                else:
                    failed += 1
                    self._emit(ProgressStatus.ERROR, f"{name} - {outcome.error}", progress)
        finally:
            self._emit(ProgressStatus.COMPLETE, "All conversions finished.", 100)
            self._state = BatchState.COMPLETED
            _logger.info("batch finished: %d of %d failed", failed, total)

    def _emit(self, status: ProgressStatus, message: str, progress: int) -> None:
        event = ProgressEvent(status, message, progress)
        try:
            self._sink(event)
        except Exception as ex:
            _logger.warning("progress delivery failed (%s): %s", status.value, ex)
