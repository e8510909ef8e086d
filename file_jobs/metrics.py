"""Job engine counters and durations.

Keys written by the engine:

- ``jobs.enqueued`` / ``jobs.completed`` / ``jobs.failed`` / ``jobs.canceled``:
  one per job transition (a pending cancel and a running cancel both count).
- ``jobs.bytes_copied``: bytes written into temp files, bumped per chunk.
- ``jobs.subscriber_errors``: subscriber callbacks that raised.
- ``jobs.duration``: wall time of each job the worker ran, in seconds.

Nothing is exported; hosts and tests read ``metrics.snapshot()``.
"""

from __future__ import annotations

import time
from collections import Counter
from contextlib import contextmanager
from threading import Lock
from typing import Any


class JobMetrics:
    def __init__(self) -> None:
        self._lock = Lock()
        self._counts: Counter[str] = Counter()
        self._durations: dict[str, list[float]] = {}

    def inc(self, key: str, amount: int = 1) -> None:
        with self._lock:
            self._counts[key] += int(amount)

    def counter(self, key: str) -> int:
        with self._lock:
            return self._counts[key]

    def observe(self, key: str, seconds: float) -> None:
        with self._lock:
            self._durations.setdefault(key, []).append(float(seconds))

    @contextmanager
    def timed(self, key: str):
        """Record how long the block took under `key`, even if it raised."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe(key, time.perf_counter() - start)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": {k: v for k, v in self._counts.items() if v},
                "timings": {k: list(v) for k, v in self._durations.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
            self._durations.clear()


metrics = JobMetrics()
