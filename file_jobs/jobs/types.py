from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum


class JobKind(str, Enum):
    COPY = "copy"
    MOVE = "move"


class JobStatus(str, Enum):
    """Job lifecycle status.

    PENDING -> RUNNING -> {COMPLETED | FAILED | CANCELED}; PENDING may also go
    straight to CANCELED when the job is removed from the queue.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELED})

_ALLOWED: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.RUNNING, JobStatus.CANCELED}),
    JobStatus.RUNNING: _TERMINAL,
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
    JobStatus.CANCELED: frozenset(),
}


@dataclass(frozen=True, slots=True)
class JobFailure:
    top_source: str  # top-level source being processed when the failure occurred
    path: str  # specific failing path, possibly a descendant of top_source
    error: str


@dataclass(frozen=True, slots=True)
class JobSnapshot:
    """Read-only copy of a job's observable state."""

    id: int
    kind: JobKind
    status: JobStatus
    sources: tuple[str, ...]
    dest_dir: str
    total_files: int
    done_files: int
    current_source: str
    message: str
    error: str
    failures: tuple[JobFailure, ...]
    enqueued_at: float
    started_at: float
    completed_at: float


@dataclass(eq=False)
class Job:
    """One queued copy/move request.

    `id`, `kind`, `sources` and `dest_dir` never change. Everything else is
    written by the worker thread under `_lock`; read it through `snapshot()`.
    """

    id: int
    kind: JobKind
    sources: tuple[str, ...]
    dest_dir: str

    status: JobStatus = JobStatus.PENDING
    total_files: int = 0
    done_files: int = 0
    current_source: str = ""
    message: str = ""
    error: str = ""
    failures: list[JobFailure] = field(default_factory=list)
    enqueued_at: float = 0.0
    started_at: float = 0.0
    completed_at: float = 0.0

    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)

    def __post_init__(self) -> None:
        self.sources = tuple(self.sources)
        self.total_files = len(self.sources)
        if not self.enqueued_at:
            self.enqueued_at = time.time()

    # -- cancellation -------------------------------------------------------

    def cancel(self) -> None:
        self._cancel_event.set()

    def is_canceled(self) -> bool:
        return self._cancel_event.is_set()

    def is_finished(self) -> bool:
        with self._lock:
            return self.status.is_terminal

    # -- state transitions (worker / manager only) --------------------------

    def _transition(self, new_status: JobStatus) -> None:
        # caller holds _lock
        if new_status not in _ALLOWED[self.status]:
            raise ValueError(f"job {self.id}: illegal transition {self.status.value} -> {new_status.value}")
        self.status = new_status

    def mark_running(self) -> None:
        with self._lock:
            self._transition(JobStatus.RUNNING)
            self.started_at = time.time()

    def mark_finished(self, status: JobStatus, error: str = "") -> None:
        with self._lock:
            self._transition(status)
            if error:
                self.error = error
            self.completed_at = time.time()

    def set_current(self, src: str) -> None:
        with self._lock:
            self.current_source = src
            self.message = ""

    def set_done(self, done: int) -> None:
        with self._lock:
            if done < self.done_files or done > self.total_files:
                raise ValueError(f"job {self.id}: done_files {done} outside {self.done_files}..{self.total_files}")
            self.done_files = done

    def add_failure(self, failure: JobFailure) -> None:
        with self._lock:
            self.failures.append(failure)

    def snapshot(self) -> JobSnapshot:
        with self._lock:
            return JobSnapshot(
                id=self.id,
                kind=self.kind,
                status=self.status,
                sources=tuple(self.sources),
                dest_dir=self.dest_dir,
                total_files=self.total_files,
                done_files=self.done_files,
                current_source=self.current_source,
                message=self.message,
                error=self.error,
                failures=tuple(self.failures),
                enqueued_at=self.enqueued_at,
                started_at=self.started_at,
                completed_at=self.completed_at,
            )
