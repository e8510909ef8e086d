"""Background copy/move jobs.

Usage:
    from file_jobs.jobs import get_manager

    manager = get_manager()
    manager.subscribe(refresh_view)
    job = manager.enqueue_copy(["/a/src.txt"], "/a/dst")
    manager.cancel(job.id)
"""

from .executor import Executor, JobCanceled, JobPathError
from .manager import JobManager, get_manager
from .trace import set_debug
from .types import Job, JobFailure, JobKind, JobSnapshot, JobStatus

__all__ = [
    "Executor",
    "Job",
    "JobCanceled",
    "JobFailure",
    "JobKind",
    "JobManager",
    "JobPathError",
    "JobSnapshot",
    "JobStatus",
    "get_manager",
    "set_debug",
]
