"""Pytest configuration.

`test_jobs_state.py` uses PySide6 QObjects. We create a single
`QCoreApplication` for the entire session as early as possible and shut it
down at the end. The job engine tests themselves are Qt-free.
"""

from __future__ import annotations

import os
from typing import Any

import pytest

from file_jobs.jobs.manager import JobManager

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QCoreApplication exists before collecting/running tests."""

    # Import lazily so non-Qt environments can still import this conftest.
    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError:
        return

    global _APP

    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QCoreApplication.instance()
    if app is None:
        # Keep a strong ref so it isn't GC'd mid-session.
        _APP = QCoreApplication([])
    else:
        _APP = app


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError:
        return

    app = QCoreApplication.instance()
    if app is None:
        return

    app.quit()
    app.processEvents()


@pytest.fixture()
def manager():
    """Running manager; its worker is stopped after the test."""
    m = JobManager()
    yield m
    m.shutdown(wait=True)


@pytest.fixture()
def idle_manager():
    """Manager whose worker is not started, so jobs stay pending."""
    m = JobManager(start=False)
    yield m
    m.shutdown(wait=False)
