"""Recursive copy/move of filesystem paths for one job.

Runs on the manager's worker thread only. Cancellation is cooperative: the
job's signal is polled before each top-level source, before each directory
child, between copy chunks and before a source is removed on move.
"""

from __future__ import annotations

import contextlib
import errno
import os
import stat
from collections.abc import Callable

from file_jobs.metrics import metrics
from file_jobs.path_utils import dest_path, temp_path

from .trace import dbg
from .types import Job, JobFailure, JobKind

DEFAULT_BUFFER_SIZE = 1 << 20  # 1 MiB
DEFAULT_TEMP_SUFFIX = ".part"


class JobCanceled(Exception):
    """The job's cancellation signal was observed at a checkpoint."""

    def __init__(self, job_id: int) -> None:
        super().__init__("job canceled")
        self.job_id = job_id


class JobPathError(Exception):
    """A filesystem operation failed on `path`."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        reason = getattr(cause, "strerror", None) or str(cause) or type(cause).__name__
        super().__init__(f"{path}: {reason}")


def _check_canceled(job: Job) -> None:
    if job.is_canceled():
        raise JobCanceled(job.id)


def _same_entry(src_st: os.stat_result, dst: str) -> bool:
    try:
        dst_st = os.lstat(dst)
    except OSError:
        return False
    return (src_st.st_dev, src_st.st_ino) == (dst_st.st_dev, dst_st.st_ino)


def _is_inside(path: str, root: str) -> bool:
    """True when `path` lies strictly below directory `root`."""
    path = os.path.realpath(path)
    root = os.path.realpath(root)
    if path == root:
        return False
    try:
        return os.path.commonpath([path, root]) == root
    except ValueError:
        return False


class Executor:
    """Transfers a job's sources into its destination directory."""

    def __init__(
        self,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        temp_suffix: str = DEFAULT_TEMP_SUFFIX,
    ) -> None:
        self.buffer_size = int(buffer_size)
        self.temp_suffix = temp_suffix

    def run(self, job: Job, notify: Callable[[], None] = lambda: None) -> None:
        """Process every source of `job` in order.

        Raises JobCanceled when the signal is observed. Any other error is
        recorded in `job.failures` and re-raised (JobPathError for filesystem
        errors); remaining sources are not attempted after a failure.
        """
        dbg("run job id=%d total=%d dest=%s", job.id, job.total_files, job.dest_dir)
        for i, src in enumerate(job.sources):
            _check_canceled(job)
            job.set_current(src)
            dbg("job %d: process %s", job.id, src)
            notify()
            try:
                self.transfer(job, src, job.dest_dir)
            except JobCanceled:
                raise
            except Exception as exc:
                failing = exc.path if isinstance(exc, JobPathError) else ""
                job.add_failure(JobFailure(top_source=src, path=failing, error=str(exc)))
                raise
            job.set_done(i + 1)
            dbg("job %d: done %d/%d", job.id, i + 1, job.total_files)
            notify()

    def transfer(self, job: Job, src: str, dest_dir: str) -> None:
        """Copy or move `src` to `dest_dir/<basename(src)>`, recursing into directories."""
        try:
            st = os.lstat(src)
        except OSError as exc:
            raise JobPathError(src, exc) from exc
        dst = dest_path(src, dest_dir)

        if _same_entry(st, dst):
            # already in place: nothing to copy, and a move must not delete it
            dbg("job %d: %s is already at its destination", job.id, src)
            return

        if stat.S_ISDIR(st.st_mode):
            if _is_inside(dst, src):
                raise JobPathError(dst, OSError(errno.EINVAL, "destination is inside the source directory"))
            self._transfer_dir(job, src, dst, st.st_mode)
        elif stat.S_ISLNK(st.st_mode):
            self._transfer_symlink(job, src, dst)
        elif stat.S_ISREG(st.st_mode):
            self._transfer_file(job, src, dst, st.st_mode)
        else:
            # FIFOs, sockets and device nodes can block open() forever
            raise JobPathError(src, OSError(errno.EINVAL, "not a regular file"))

    def _transfer_dir(self, job: Job, src: str, dst: str, mode: int) -> None:
        dbg("job %d: mkdir %s (mode=%o)", job.id, dst, stat.S_IMODE(mode))
        try:
            os.makedirs(dst, exist_ok=True)
        except OSError as exc:
            raise JobPathError(dst, exc) from exc
        # best-effort permission inheritance
        with contextlib.suppress(OSError):
            os.chmod(dst, stat.S_IMODE(mode))

        try:
            names = sorted(os.listdir(src))
        except OSError as exc:
            raise JobPathError(src, exc) from exc

        for name in names:
            _check_canceled(job)
            child = os.path.join(src, name)
            dbg("job %d: recurse %s -> %s", job.id, child, dst)
            self.transfer(job, child, dst)

        if job.kind is JobKind.MOVE:
            _check_canceled(job)
            dbg("job %d: rmdir %s", job.id, src)
            try:
                os.rmdir(src)
            except OSError as exc:
                raise JobPathError(src, exc) from exc

    def _transfer_symlink(self, job: Job, src: str, dst: str) -> None:
        try:
            target = os.readlink(src)
        except OSError as exc:
            raise JobPathError(src, exc) from exc

        try:
            os.makedirs(os.path.dirname(dst) or ".", exist_ok=True)
        except OSError as exc:
            raise JobPathError(dst, exc) from exc
        # drop whatever is in the way; a failure shows up in os.symlink below
        with contextlib.suppress(OSError):
            os.unlink(dst)
        with contextlib.suppress(OSError):
            os.rmdir(dst)

        dbg("job %d: symlink %s -> %s", job.id, dst, target)
        try:
            os.symlink(target, dst)
        except OSError as exc:
            raise JobPathError(dst, exc) from exc

        if job.kind is JobKind.MOVE:
            dbg("job %d: unlink %s", job.id, src)
            try:
                os.unlink(src)
            except OSError as exc:
                raise JobPathError(src, exc) from exc

    def _transfer_file(self, job: Job, src: str, dst: str, mode: int) -> None:
        dbg("job %d: file %s -> %s", job.id, src, dst)
        self.copy_file(job, src, dst, stat.S_IMODE(mode))
        if job.kind is JobKind.MOVE:
            _check_canceled(job)
            dbg("job %d: remove %s", job.id, src)
            try:
                os.unlink(src)
            except OSError as exc:
                raise JobPathError(src, exc) from exc

    def copy_file(self, job: Job, src: str, dst: str, perm: int) -> None:
        """Write `src` to a sibling temp file, then rename it onto `dst`.

        The temp file is removed on every failure path, so `dst` is either the
        old content or the complete new content.
        """
        try:
            os.makedirs(os.path.dirname(dst) or ".", exist_ok=True)
        except OSError as exc:
            raise JobPathError(dst, exc) from exc

        try:
            fin = open(src, "rb")  # noqa: SIM115
        except OSError as exc:
            raise JobPathError(src, exc) from exc

        tmp = temp_path(dst, self.temp_suffix)
        with fin:
            try:
                fout = open(tmp, "wb")  # noqa: SIM115
            except OSError as exc:
                raise JobPathError(tmp, exc) from exc
            try:
                with fout:
                    self._stream(job, fin, fout, src, tmp)
                try:
                    os.chmod(tmp, perm)
                except OSError as exc:
                    raise JobPathError(tmp, exc) from exc
                dbg("job %d: rename %s -> %s", job.id, tmp, dst)
                try:
                    os.replace(tmp, dst)
                except OSError as exc:
                    raise JobPathError(dst, exc) from exc
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp)
                raise

    def _stream(self, job: Job, fin, fout, src: str, tmp: str) -> None:
        while True:
            _check_canceled(job)
            try:
                chunk = fin.read(self.buffer_size)
            except OSError as exc:
                raise JobPathError(src, exc) from exc
            if not chunk:
                break
            try:
                fout.write(chunk)
            except OSError as exc:
                raise JobPathError(tmp, exc) from exc
            metrics.inc("jobs.bytes_copied", len(chunk))
