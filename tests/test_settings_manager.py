from __future__ import annotations

import json
from pathlib import Path

from file_jobs.jobs.manager import JobManager
from file_jobs.settings_manager import SettingsManager


def test_defaults_without_file() -> None:
    sm = SettingsManager()
    assert sm.history_max == 100
    assert sm.copy_buffer_size == 1 << 20
    assert sm.temp_suffix == ".part"


def test_values_round_trip_through_file(tmp_path: Path) -> None:
    settings_path = tmp_path / "conf" / "settings.json"
    sm = SettingsManager(str(settings_path))
    sm.set("jobs_history_max", 5)
    sm.set("theme", "dark")

    reloaded = SettingsManager(str(settings_path))
    assert reloaded.history_max == 5
    # keys owned by the host application are kept
    assert reloaded.get("theme") == "dark"


def test_invalid_values_fall_back(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(
        json.dumps({"jobs_history_max": "lots", "jobs_copy_buffer_size": -1, "jobs_temp_suffix": "../x"}),
        encoding="utf-8",
    )
    sm = SettingsManager(str(settings_path))
    assert sm.history_max == 100
    assert sm.copy_buffer_size == 1 << 20
    assert sm.temp_suffix == ".part"


def test_corrupt_file_is_ignored(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("{not json", encoding="utf-8")
    assert SettingsManager(str(settings_path)).data == {}


def test_manager_reads_history_max_from_settings(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(json.dumps({"jobs_history_max": 2, "jobs_temp_suffix": ".tmp"}), encoding="utf-8")
    m = JobManager(settings=SettingsManager(str(settings_path)), start=False)
    try:
        for _ in range(4):
            job = m.enqueue_copy([], str(tmp_path))
            m.cancel(job.id)
        assert len(m.list()) == 2
        assert m._executor.temp_suffix == ".tmp"
    finally:
        m.shutdown(wait=False)
