"""Text renderings of job snapshots for queue/history views."""

from __future__ import annotations

import time

from .types import JobSnapshot, JobStatus


def _clock(ts: float) -> str:
    return time.strftime("%H:%M:%S", time.localtime(ts))


def summary_line(snap: JobSnapshot) -> str:
    """One list row: `[HH:MM:SS] copy 1/3 → /dest  (running)`."""
    when = snap.enqueued_at
    if snap.status is JobStatus.RUNNING and snap.started_at:
        when = snap.started_at
    line = (
        f"[{_clock(when)}] {snap.kind.value} {snap.done_files}/{snap.total_files}"
        f" → {snap.dest_dir}  ({snap.status.value})"
    )
    if snap.status is JobStatus.FAILED and snap.error:
        line += "  ERROR"
    return line


def details_text(snap: JobSnapshot) -> str:
    lines = [
        f"Job #{snap.id} {snap.kind.value} → {snap.dest_dir}",
        f"Status: {snap.status.value}, {snap.done_files}/{snap.total_files} completed",
    ]
    if snap.status is JobStatus.FAILED:
        if snap.failures:
            lines.append("Failures:")
            for f in snap.failures:
                if f.top_source:
                    lines.append(f"  - item: {f.top_source}")
                if f.path:
                    lines.append(f"    path: {f.path}")
                if f.error:
                    lines.append(f"    error: {f.error}")
        elif snap.error:
            lines.append(f"Error: {snap.error}")
    return "\n".join(lines) + "\n"
