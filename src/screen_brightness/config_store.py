from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .models import BrightnessRange, DEFAULT_RANGE, normalize_mode_name


logger = logging.getLogger(__name__)

APP_FOLDER_NAME = "ScreenBrightness"
CONFIG_FILE_NAME = "config.json"
BACKEND_NAMES: tuple[str, ...] = ("sbc", "sysfs")
LOG_LEVEL_NAMES: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_default_config_path() -> Path:
    appdata = os.getenv("APPDATA")
    if appdata:
        return Path(appdata) / APP_FOLDER_NAME / CONFIG_FILE_NAME
    return Path.home() / ".config" / APP_FOLDER_NAME / CONFIG_FILE_NAME


@dataclass
class AppConfig:
    version: int = 1
    conversion_mode: str = "linear"
    backend: str = "sbc"
    display: int = 0
    backlight_directory: str | None = None
    fallback_minimum: int = DEFAULT_RANGE.minimum
    fallback_maximum: int = DEFAULT_RANGE.maximum
    poll_interval_seconds: float = 1.0
    log_level: str = "INFO"
    log_file: str | None = None

    def fallback_range(self) -> BrightnessRange:
        try:
            brightness_range = BrightnessRange(self.fallback_minimum, self.fallback_maximum)
        except ValueError:
            return DEFAULT_RANGE
        if brightness_range.is_degenerate:
            return DEFAULT_RANGE
        return brightness_range


class ConfigStore:
    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path = config_path or get_default_config_path()

    def load(self) -> AppConfig:
        if not self.config_path.exists():
            config = AppConfig()
            self.save(config)
            return config

        try:
            raw_data = json.loads(self.config_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", self.config_path, exc)
            config = AppConfig()
            self.save(config)
            return config

        if not isinstance(raw_data, dict):
            config = AppConfig()
            self.save(config)
            return config
        return self._parse(raw_data)

    def save(self, config: AppConfig) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "version": config.version,
            "conversion_mode": normalize_mode_name(config.conversion_mode),
            "backend": config.backend if config.backend in BACKEND_NAMES else "sbc",
            "display": max(0, int(config.display)),
            "backlight_directory": config.backlight_directory,
            "fallback_minimum": int(config.fallback_minimum),
            "fallback_maximum": int(config.fallback_maximum),
            "poll_interval_seconds": self._clamp_interval(config.poll_interval_seconds),
            "log_level": self._normalize_log_level(config.log_level),
            "log_file": config.log_file,
        }
        self.config_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def _parse(self, data: dict[str, Any]) -> AppConfig:
        config = AppConfig()
        config.version = self._int_or(data.get("version"), 1)
        config.conversion_mode = normalize_mode_name(data.get("conversion_mode"))

        backend = str(data.get("backend", "sbc")).strip().lower()
        config.backend = backend if backend in BACKEND_NAMES else "sbc"
        config.display = max(0, self._int_or(data.get("display"), 0))

        directory = str(data.get("backlight_directory") or "").strip()
        config.backlight_directory = directory or None

        config.fallback_minimum = self._int_or(data.get("fallback_minimum"), DEFAULT_RANGE.minimum)
        config.fallback_maximum = self._int_or(data.get("fallback_maximum"), DEFAULT_RANGE.maximum)
        if config.fallback_range() is DEFAULT_RANGE:
            config.fallback_minimum = DEFAULT_RANGE.minimum
            config.fallback_maximum = DEFAULT_RANGE.maximum

        config.poll_interval_seconds = self._clamp_interval(data.get("poll_interval_seconds", 1.0))
        config.log_level = self._normalize_log_level(data.get("log_level"))
        log_file = str(data.get("log_file") or "").strip()
        config.log_file = log_file or None
        return config

    @staticmethod
    def _int_or(value: Any, fallback: int) -> int:
        if isinstance(value, bool):
            return fallback
        try:
            return int(value)
        except (TypeError, ValueError):
            return fallback

    @staticmethod
    def _clamp_interval(value: Any) -> float:
        try:
            interval = float(value)
        except (TypeError, ValueError):
            return 1.0
        if interval != interval:
            return 1.0
        return max(0.1, min(60.0, interval))

    @staticmethod
    def _normalize_log_level(value: Any) -> str:
        text = str(value or "").strip().upper()
        if text in LOG_LEVEL_NAMES:
            return text
        return "INFO"
