from __future__ import annotations

from PySide6.QtCore import Property, QObject, Signal, Slot

from file_jobs.jobs.manager import JobManager, get_manager
from file_jobs.jobs.types import JobSnapshot, JobStatus
from file_jobs.logger import get_logger

_logger = get_logger("jobs_state")


class JobsState(QObject):
    """Bindable view of the job queue.

    Manager callbacks arrive on the worker thread. They only emit
    `_changedFromManager`; Qt queues that onto this object's thread, where
    `refresh()` takes a fresh listing and updates the counters.
    """

    jobsChanged = Signal()
    runningCountChanged = Signal(int)
    pendingCountChanged = Signal(int)
    _changedFromManager = Signal()

    def __init__(self, manager: JobManager | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._manager = manager or get_manager()
        self._snapshots: list[JobSnapshot] = []
        self._running = 0
        self._pending = 0
        self._changedFromManager.connect(self.refresh)
        self._unsubscribe = self._manager.subscribe(self._changedFromManager.emit)
        self.refresh()

    def _get_running(self) -> int:
        return int(self._running)

    runningCount = Property(int, _get_running, notify=runningCountChanged)  # type: ignore[arg-type]

    def _get_pending(self) -> int:
        return int(self._pending)

    pendingCount = Property(int, _get_pending, notify=pendingCountChanged)  # type: ignore[arg-type]

    @Slot()
    def refresh(self) -> None:
        snaps = self._manager.list()
        self._snapshots = snaps
        self._set_running(sum(1 for s in snaps if s.status is JobStatus.RUNNING))
        self._set_pending(sum(1 for s in snaps if s.status is JobStatus.PENDING))
        self.jobsChanged.emit()

    def snapshots(self) -> list[JobSnapshot]:
        return list(self._snapshots)

    @Slot(int, result=bool)
    def cancel(self, job_id: int) -> bool:
        ok = self._manager.cancel(int(job_id))
        if not ok:
            _logger.debug("cancel ignored, no active job %s", job_id)
        return ok

    def detach(self) -> None:
        """Stop listening to the manager (call before dropping this object)."""
        self._unsubscribe()

    def _set_running(self, n: int) -> None:
        if n == self._running:
            return
        self._running = n
        self.runningCountChanged.emit(n)

    def _set_pending(self, n: int) -> None:
        if n == self._pending:
            return
        self._pending = n
        self.pendingCountChanged.emit(n)
