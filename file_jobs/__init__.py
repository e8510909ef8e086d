"""Background file copy/move engine for a file-browsing UI.

Usage:
    from file_jobs import get_manager

    job = get_manager().enqueue_move(["/a/dir"], "/b")
"""

from .jobs import JobKind, JobManager, JobSnapshot, JobStatus, get_manager, set_debug

__all__ = ["JobKind", "JobManager", "JobSnapshot", "JobStatus", "get_manager", "set_debug"]
