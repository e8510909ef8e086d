from __future__ import annotations

import pytest

from file_jobs.jobs.types import Job, JobFailure, JobKind, JobStatus


def _job() -> Job:
    return Job(id=7, kind=JobKind.COPY, sources=["/a/x", "/a/y"], dest_dir="/b")


def test_new_job_is_pending_with_fixed_total() -> None:
    job = _job()
    assert job.status is JobStatus.PENDING
    assert job.total_files == 2
    assert job.sources == ("/a/x", "/a/y")
    assert job.enqueued_at > 0
    assert job.started_at == 0.0
    assert job.completed_at == 0.0


def test_transitions_are_monotonic() -> None:
    job = _job()
    job.mark_running()
    job.mark_finished(JobStatus.FAILED, "boom")
    assert job.status is JobStatus.FAILED
    assert job.error == "boom"
    with pytest.raises(ValueError):
        job.mark_finished(JobStatus.COMPLETED)
    with pytest.raises(ValueError):
        job.mark_running()
    assert job.status is JobStatus.FAILED


def test_pending_cannot_complete_without_running() -> None:
    with pytest.raises(ValueError):
        _job().mark_finished(JobStatus.COMPLETED)


def test_done_files_cannot_go_backwards_or_past_total() -> None:
    job = _job()
    job.set_done(1)
    with pytest.raises(ValueError):
        job.set_done(0)
    with pytest.raises(ValueError):
        job.set_done(3)
    assert job.done_files == 1


def test_snapshot_does_not_alias_job_state() -> None:
    job = _job()
    job.add_failure(JobFailure(top_source="/a/x", path="/a/x/1", error="nope"))
    snap = job.snapshot()

    job.add_failure(JobFailure(top_source="/a/y", path="/a/y", error="again"))
    job.set_current("/a/y")

    assert len(snap.failures) == 1
    assert snap.current_source == ""
    assert isinstance(snap.sources, tuple)


def test_cancel_is_idempotent() -> None:
    job = _job()
    assert not job.is_canceled()
    job.cancel()
    job.cancel()
    assert job.is_canceled()


def test_terminal_flags() -> None:
    assert not JobStatus.PENDING.is_terminal
    assert not JobStatus.RUNNING.is_terminal
    assert JobStatus.COMPLETED.is_terminal
    assert JobStatus.FAILED.is_terminal
    assert JobStatus.CANCELED.is_terminal
