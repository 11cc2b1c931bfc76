from __future__ import annotations

import concurrent.futures
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Sequence

from .analyzer import AudioResult
from .audio_engine import FileProcessor
from .errors import MonoCatcherError

LOG = logging.getLogger(__name__)


@dataclass
class FileOutcome:
    """Per-file status: one of the AudioResult values, or failed with a reason."""

    source_path: str
    result: AudioResult | None = None
    destination: str | None = None
    error_kind: str | None = None
    message: str = ""

    @property
    def failed(self) -> bool:
        return self.result is None

    @property
    def status(self) -> str:
        if self.result is None:
            return f"Failed({self.error_kind})"
        return self.result.label

    def to_dict(self) -> dict:
        return {
            "source": self.source_path,
            "status": self.status,
            "destination": self.destination,
            "error": self.message or None,
        }


@dataclass
class BatchOutcome:
    outcomes: list[FileOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def fake_stereo_count(self) -> int:
        return sum(1 for o in self.outcomes if o.result is AudioResult.FAKE_STEREO)

    @property
    def failures(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def results(self) -> list[AudioResult | None]:
        return [o.result for o in self.outcomes]

    def summary(self) -> str:
        line = f"{self.fake_stereo_count} fake stereo files converted to mono."
        if self.failures:
            line += f" {len(self.failures)} failed."
        if self.cancelled:
            line += " Batch cancelled."
        return line


@dataclass
class RunBatchRequest:
    files: Sequence[str]
    destination_dir: str


ProgressCallback = Callable[[int, int, FileOutcome], None]


class _Progress:
    """Completed-file counter for one run_all call."""

    def __init__(self, total: int):
        self.total = total
        self._done = 0
        self._lock = threading.Lock()

    def tick(self) -> int:
        with self._lock:
            self._done += 1
            return self._done


class BatchRunner:
    """Runs a FileProcessor over many files and collects the outcomes.

    A failing file is recorded and the batch moves on. With ``workers > 1``
    files are processed on a thread pool, but outcomes are still reported
    in input order.
    """

    def __init__(
        self,
        processor: FileProcessor | None = None,
        workers: int = 1,
        on_progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ):
        self.processor = processor or FileProcessor()
        self.workers = max(1, int(workers))
        self.on_progress = on_progress
        self.cancel_event = cancel_event or threading.Event()
        self._executor: concurrent.futures.ThreadPoolExecutor | None = None

    def cancel(self) -> None:
        self.cancel_event.set()

    def _run_one(self, source_path: str, destination_dir: str) -> FileOutcome:
        try:
            processed = self.processor.process_file(source_path, destination_dir)
        except MonoCatcherError as exc:
            LOG.error("FAILED %s [%s]: %s", source_path, exc.kind, exc.message)
            return FileOutcome(source_path=source_path, error_kind=exc.kind, message=exc.message)
        return FileOutcome(source_path=source_path, result=processed.result, destination=processed.destination)

    def _job(self, source_path: str, destination_dir: str, progress: _Progress) -> FileOutcome | None:
        if self.cancel_event.is_set():
            return None
        outcome = self._run_one(source_path, destination_dir)
        done = progress.tick()
        if self.on_progress is not None:
            self.on_progress(done, progress.total, outcome)
        return outcome

    def run_all(self, source_paths: Sequence[str], destination_dir: str) -> BatchOutcome:
        paths = [str(p) for p in source_paths]
        total = len(paths)
        progress = _Progress(total)
        LOG.info("Batch: %d files -> %s (workers=%d)", total, destination_dir, self.workers)

        slots: list[FileOutcome | None] = [None] * total
        if self.workers <= 1:
            for i, path in enumerate(paths):
                slots[i] = self._job(path, destination_dir, progress)
                if slots[i] is None:
                    break
        else:
            with concurrent.futures.ThreadPoolExecutor(max_workers=self.workers) as ex:
                futs = {ex.submit(self._job, path, destination_dir, progress): i for i, path in enumerate(paths)}
                for fut in concurrent.futures.as_completed(futs):
                    slots[futs[fut]] = fut.result()

        outcomes = [o for o in slots if o is not None]
        batch = BatchOutcome(outcomes=outcomes, cancelled=len(outcomes) < total)
        LOG.info("Batch complete: %s", batch.summary())
        return batch

    def submit(self, request: RunBatchRequest) -> concurrent.futures.Future:
        """Run a batch in the background; the future resolves to a BatchOutcome."""
        if self._executor is None:
            self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="monocatcher")
        return self._executor.submit(self.run_all, request.files, request.destination_dir)

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
