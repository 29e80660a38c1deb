from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from image_converter.color import BackgroundColor
from image_converter.errors import ConversionError
from image_converter.image_engine.formats import TargetFormat

from .logger import get_logger

_logger = get_logger("settings")


def default_settings_path() -> str:
    env = (os.getenv("IMAGE_CONVERTER_SETTINGS") or "").strip()
    if env:
        return env
    return str(Path.home() / ".image_converter" / "settings.json")


class SettingsManager:
    def __init__(self, settings_path: str | None = None):
        self.settings_path = settings_path or default_settings_path()
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "target_format": "png",
        "background_color": None,
        "single_output_dir": None,
        "last_batch_dir": None,
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
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        try:
            os.makedirs(os.path.dirname(self.settings_path) or ".", exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except OSError as e:
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

    @property
    def target_format(self) -> TargetFormat:
        raw = self.get("target_format")
        try:
            return TargetFormat.from_tag(raw)
        except ConversionError:
            _logger.warning("saved target_format invalid: %s", raw)
            return TargetFormat.from_tag(self.DEFAULTS["target_format"])

    @property
    def background_color(self) -> BackgroundColor | None:
        raw = self.get("background_color")
        if raw is None:
            return None
        try:
            return BackgroundColor.parse(raw)
        except ConversionError:
            _logger.warning("saved background_color invalid: %s", raw)
            return None

    @property
    def single_output_dir(self) -> str | None:
        val = self.get("single_output_dir")
        return val if isinstance(val, str) and val else None

    @property
    def last_batch_dir(self) -> str | None:
        val = self.get("last_batch_dir")
        return val if isinstance(val, str) and os.path.isdir(val) else None
