"""Optional diagnostic sink for the job engine.

The host installs a printf-style callable (for example when started with a
debug flag). Messages always go to the project logger at DEBUG as well.
"""

from __future__ import annotations

from collections.abc import Callable

from file_jobs.logger import get_logger

_logger = get_logger("jobs")

_debugf: Callable[..., None] | None = None


def set_debug(fn: Callable[..., None] | None) -> None:
    """Install (or with None, remove) the debug sink."""
    global _debugf
    _debugf = fn


def dbg(fmt: str, *args: object) -> None:
    _logger.debug(fmt, *args)
    sink = _debugf
    if sink is None:
        return
    try:
        sink("jobs: " + fmt, *args)
    except Exception:
        _logger.debug("debug sink failed", exc_info=True)
