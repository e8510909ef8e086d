from __future__ import annotations

import itertools
import os
import threading
from collections import deque
from collections.abc import Callable, Iterable

from file_jobs.logger import get_logger
from file_jobs.metrics import metrics
from file_jobs.path_utils import abs_path_str
from file_jobs.settings_manager import SettingsManager

from .executor import Executor, JobCanceled
from .trace import dbg
from .types import Job, JobKind, JobSnapshot, JobStatus

_logger = get_logger("manager")

Subscriber = Callable[[], None]


class JobManager:
    """Serialized copy/move queue with a single worker thread.

    Owns the pending queue, the current job slot, a bounded history of
    finished jobs and the subscriber list; all four are guarded by `_cond`.
    Subscribers are called after the lock is released, from whichever thread
    made the transition (the worker, or the caller of enqueue/cancel).
    """

    def __init__(
        self,
        history_max: int | None = None,
        settings: SettingsManager | None = None,
        executor: Executor | None = None,
        start: bool = True,
    ) -> None:
        self._settings = settings or SettingsManager()
        if history_max is None:
            history_max = self._settings.history_max
        if history_max <= 0:
            raise ValueError("history_max must be positive")
        self.history_max = int(history_max)
        self._executor = executor or Executor(
            buffer_size=self._settings.copy_buffer_size,
            temp_suffix=self._settings.temp_suffix,
        )

        self._cond = threading.Condition(threading.Lock())
        self._queue: deque[Job] = deque()
        self._current: Job | None = None
        self._history: deque[Job] = deque(maxlen=self.history_max)
        self._subscribers: list[Subscriber] = []
        self._ids = itertools.count(1)
        self._closed = False
        self._started = False

        self._thread = threading.Thread(target=self._worker, name="file-jobs-worker", daemon=True)
        if start:
            self.start()

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._thread.start()
        dbg("manager created; worker started")

    # -- subscribers --------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register `callback`; returns a function that unregisters it."""
        with self._cond:
            self._subscribers.append(callback)
            n = len(self._subscribers)
        dbg("subscriber added (total=%d)", n)

        def unsubscribe() -> None:
            with self._cond:
                try:
                    self._subscribers.remove(callback)
                except ValueError:
                    return
            dbg("subscriber removed")

        return unsubscribe

    def _notify(self) -> None:
        with self._cond:
            subs = list(self._subscribers)
        for cb in subs:
            try:
                cb()
            except Exception:
                metrics.inc("jobs.subscriber_errors")
                _logger.exception("job subscriber %r failed", cb)

    # -- public API ---------------------------------------------------------

    def enqueue_copy(self, sources: Iterable[str], dest_dir: str) -> Job:
        return self.enqueue(JobKind.COPY, sources, dest_dir)

    def enqueue_move(self, sources: Iterable[str], dest_dir: str) -> Job:
        return self.enqueue(JobKind.MOVE, sources, dest_dir)

    def enqueue(self, kind: JobKind, sources: Iterable[str], dest_dir: str) -> Job:
        """Queue a job. Paths are not checked here; errors surface when it runs."""
        if isinstance(sources, (str, bytes, os.PathLike)):
            raise TypeError("sources must be a sequence of paths, not a single path")
        kind = JobKind(kind)
        srcs = tuple(abs_path_str(s) for s in sources)
        dest = abs_path_str(dest_dir)
        with self._cond:
            if self._closed:
                raise RuntimeError("job manager is shut down")
            job = Job(id=next(self._ids), kind=kind, sources=srcs, dest_dir=dest)
            self._queue.append(job)
            self._cond.notify_all()
        metrics.inc("jobs.enqueued")
        dbg("enqueue id=%d type=%s n=%d -> %s", job.id, kind.value, len(srcs), dest)
        self._notify()
        return job

    def cancel(self, job_id: int) -> bool:
        """Cancel a pending or running job.

        A pending job is finished as canceled right here. A running job only
        gets its signal raised; the worker finishes it at the next checkpoint.
        Returns False when no pending or running job has this id, including
        a job that has already reached a terminal status.
        """
        with self._cond:
            for job in self._queue:
                if job.id == job_id:
                    self._queue.remove(job)
                    job.cancel()
                    job.mark_finished(JobStatus.CANCELED)
                    self._history.append(job)
                    self._cond.notify_all()
                    break
            else:
                job = None
            running = None
            current = self._current
            # the worker marks a job terminal just before moving it to history
            if job is None and current is not None and current.id == job_id and not current.is_finished():
                running = current

        if job is not None:
            metrics.inc("jobs.canceled")
            dbg("cancel pending id=%d", job_id)
            self._notify()
            return True
        if running is not None:
            running.cancel()
            dbg("cancel running id=%d", job_id)
            self._notify()
            return True
        dbg("cancel id=%d: not found", job_id)
        return False

    def list(self) -> list[JobSnapshot]:
        """Current job first, then pending in queue order, then newest history first."""
        with self._cond:
            out: list[JobSnapshot] = []
            if self._current is not None:
                out.append(self._current.snapshot())
            out.extend(j.snapshot() for j in self._queue)
            out.extend(j.snapshot() for j in reversed(self._history))
            return out

    def get(self, job_id: int) -> JobSnapshot | None:
        with self._cond:
            candidates = [self._current] if self._current is not None else []
            candidates.extend(self._queue)
            candidates.extend(self._history)
            for job in candidates:
                if job.id == job_id:
                    return job.snapshot()
        return None

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until nothing is pending or running. Returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: not self._queue and self._current is None, timeout)

    def shutdown(self, wait: bool = True, timeout: float = 5.0) -> None:
        """Stop the worker once the current job (if any) finishes.

        Jobs still pending stay pending; enqueueing afterwards raises.
        """
        with self._cond:
            self._closed = True
            self._cond.notify_all()
        dbg("shutdown requested")
        if wait and self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout=timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    # -- worker -------------------------------------------------------------

    def _worker(self) -> None:
        while True:
            with self._cond:
                while not self._queue and not self._closed:
                    dbg("worker waiting (queue=0, closed=%s)", self._closed)
                    self._cond.wait()
                if self._closed:
                    dbg("worker exiting (pending=%d)", len(self._queue))
                    return
                job = self._queue.popleft()
                self._current = job
                remaining = len(self._queue)
            dbg("worker popped id=%d type=%s (remaining=%d)", job.id, job.kind.value, remaining)

            job.mark_running()
            dbg("start job id=%d", job.id)
            self._notify()

            status, error = self._execute(job)
            job.mark_finished(status, error)

            with self._cond:
                self._current = None
                self._history.append(job)
                self._cond.notify_all()
            self._notify()

    def _execute(self, job: Job) -> tuple[JobStatus, str]:
        with metrics.timed("jobs.duration"):
            try:
                self._executor.run(job, notify=self._notify)
            except JobCanceled:
                snap = job.snapshot()
                metrics.inc("jobs.canceled")
                dbg("job canceled id=%d after %d/%d", job.id, snap.done_files, snap.total_files)
                return JobStatus.CANCELED, ""
            except Exception as exc:
                metrics.inc("jobs.failed")
                _logger.warning("job %d failed: %s", job.id, exc)
                return JobStatus.FAILED, str(exc) or type(exc).__name__
        metrics.inc("jobs.completed")
        dbg("job completed id=%d done=%d", job.id, job.total_files)
        return JobStatus.COMPLETED, ""


_default_manager: JobManager | None = None
_default_lock = threading.Lock()


def get_manager() -> JobManager:
    """Process-wide manager, created (and its worker started) on first use."""
    global _default_manager
    if _default_manager is None:
        with _default_lock:
            if _default_manager is None:
                _default_manager = JobManager()
    return _default_manager
