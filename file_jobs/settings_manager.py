from __future__ import annotations

import json
import os
from typing import Any

from .logger import get_logger

_logger = get_logger("settings")


class SettingsManager:
    """JSON-backed tuning knobs for the job engine.

    The file is optional. Unknown keys are preserved so the host application
    can keep its own settings in the same document.
    """

    DEFAULTS: dict[str, Any] = {
        "jobs_history_max": 100,
        "jobs_copy_buffer_size": 1 << 20,
        "jobs_temp_suffix": ".part",
    }

    def __init__(self, settings_path: str | None = None):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        if not self.settings_path:
            self._settings = {}
            return
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except Exception as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        if not self.settings_path:
            return
        try:
            parent = os.path.dirname(self.settings_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except Exception as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    def _positive_int(self, key: str) -> int:
        fallback = int(self.DEFAULTS[key])
        raw = self.get(key)
        try:
            value = int(raw)
        except (TypeError, ValueError):
            _logger.warning("invalid %s=%r, using %d", key, raw, fallback)
            return fallback
        if value <= 0:
            _logger.warning("non-positive %s=%r, using %d", key, raw, fallback)
            return fallback
        return value

    @property
    def history_max(self) -> int:
        return self._positive_int("jobs_history_max")

    @property
    def copy_buffer_size(self) -> int:
        return self._positive_int("jobs_copy_buffer_size")

    @property
    def temp_suffix(self) -> str:
        val = self.get("jobs_temp_suffix")
        if isinstance(val, str) and val and "/" not in val and os.sep not in val:
            return val
        return str(self.DEFAULTS["jobs_temp_suffix"])
