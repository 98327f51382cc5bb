from __future__ import annotations

import json
import os
from typing import Any

from .logger import get_logger

_logger = get_logger("settings")


class SettingsManager:
    """JSON-backed UI preferences.

    Only preferences live here; the image session is never persisted.
    """

    def __init__(self, settings_path: str):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "theme": "dark",
        "default_target_width": 256,
        "default_target_height": 256,
        "keep_aspect": True,
        "zoom_step": 1.1,
        "max_preview_width": 800,
        "max_preview_height": 800,
        "jpeg_quality": 75,
    }

    def load(self) -> None:
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
        if key == "last_open_dir" and isinstance(value, str) and value:
            value = self._normalize_dir(value)
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def last_open_dir(self) -> str | None:
        val = self.get("last_open_dir")
        return val if isinstance(val, str) and os.path.isdir(val) else None

    def get_int(self, key: str, minimum: int = 1) -> int:
        """Return an integer preference, falling back to DEFAULTS when unusable."""
        try:
            value = int(self.get(key))
        except (TypeError, ValueError):
            _logger.warning("invalid %s=%r, using default", key, self.get(key))
            value = int(self.DEFAULTS[key])
        return max(minimum, value)

    def get_float(self, key: str, minimum: float) -> float:
        try:
            value = float(self.get(key))
        except (TypeError, ValueError):
            _logger.warning("invalid %s=%r, using default", key, self.get(key))
            value = float(self.DEFAULTS[key])
        if value <= minimum:
            _logger.warning("%s=%r out of range, using default", key, value)
            value = float(self.DEFAULTS[key])
        return value

    @staticmethod
    def _normalize_dir(value: str) -> str:
        path = os.path.abspath(os.path.expanduser(value))
        if os.path.isfile(path):
            path = os.path.dirname(path)
        return os.path.realpath(path)
