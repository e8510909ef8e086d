from __future__ import annotations

from file_jobs.app.state.jobs_state import JobsState
from file_jobs.jobs.manager import JobManager
from file_jobs.jobs.types import JobStatus


def test_jobs_state_tracks_pending_jobs(idle_manager: JobManager) -> None:
    state = JobsState(manager=idle_manager)
    changes: list[int] = []
    state.pendingCountChanged.connect(changes.append)

    job = idle_manager.enqueue_copy([], "/tmp")
    assert state.pendingCount == 1
    assert state.runningCount == 0
    assert [s.id for s in state.snapshots()] == [job.id]

    assert state.cancel(job.id) is True
    assert state.pendingCount == 0
    assert changes == [1, 0]
    assert state.snapshots()[0].status is JobStatus.CANCELED

    assert state.cancel(job.id) is False
    state.detach()


def test_detached_state_stops_refreshing(idle_manager: JobManager) -> None:
    state = JobsState(manager=idle_manager)
    emitted: list[bool] = []
    state.jobsChanged.connect(lambda: emitted.append(True))
    state.detach()

    idle_manager.enqueue_copy([], "/tmp")
    assert emitted == []
    assert state.pendingCount == 0
