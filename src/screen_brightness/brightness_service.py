from __future__ import annotations

import glob
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import screen_brightness_control as sbc

from .converter import denormalize_gamma, denormalize_linear, normalize_linear
from .errors import NoActiveSurface, SettingNotFound
from .models import DEFAULT_RANGE, BrightnessRange, ConversionMode, validate_normalized


logger = logging.getLogger(__name__)

SYSFS_BACKLIGHT_ROOT = "/sys/class/backlight"


class DisplayBackend(Protocol):
    def read_brightness_range(self) -> BrightnessRange: ...

    def read_system_brightness_raw(self) -> int | float: ...

    def write_display_brightness(self, value: float) -> bool: ...

    def restore_system_brightness(self) -> bool: ...


def load_brightness_range(
    backend: DisplayBackend, fallback: BrightnessRange = DEFAULT_RANGE
) -> BrightnessRange:
    try:
        brightness_range = backend.read_brightness_range()
    except Exception as exc:
        logger.warning(
            "Could not read brightness range (%s); using %d..%d",
            exc,
            fallback.minimum,
            fallback.maximum,
        )
        return fallback
    if brightness_range.is_degenerate:
        logger.warning(
            "Backend reported degenerate range %d..%d; using %d..%d",
            brightness_range.minimum,
            brightness_range.maximum,
            fallback.minimum,
            fallback.maximum,
        )
        return fallback
    return brightness_range


@dataclass
class MonitorHandle:
    name: str
    display_index: int
    method: str | None


class ScreenBrightnessControlBackend:
    PERCENT_RANGE = BrightnessRange(minimum=0, maximum=100)

    def __init__(self, display: int = 0, mode: ConversionMode = "linear") -> None:
        self.display = max(0, int(display))
        self.mode = mode
        self.monitor: MonitorHandle | None = None
        self._saved_level: int | None = None

    def refresh_monitor(self) -> MonitorHandle:
        try:
            raw_monitors = sbc.list_monitors_info(allow_duplicates=False)
        except Exception as exc:
            raise NoActiveSurface(f"Unable to enumerate displays: {exc}") from exc

        parsed = [
            self._parse_monitor(raw, position) for position, raw in enumerate(raw_monitors)
        ]
        for monitor in parsed:
            if monitor.display_index == self.display:
                self.monitor = monitor
                return monitor
        if self.display < len(parsed):
            self.monitor = parsed[self.display]
            return self.monitor

        self.monitor = None
        raise NoActiveSurface(f"Display {self.display + 1} is not connected")

    def read_brightness_range(self) -> BrightnessRange:
        return self.PERCENT_RANGE

    def read_system_brightness_raw(self) -> int | float:
        # The panel itself carries the override while one is active.
        level = self._saved_level if self._saved_level is not None else self._read_level()
        return _reading_for_mode(level, self.PERCENT_RANGE, self.mode)

    def write_display_brightness(self, value: float) -> bool:
        target = validate_normalized(value)
        saved_level = self._saved_level
        if saved_level is None:
            try:
                saved_level = self._read_level()
            except SettingNotFound:
                logger.warning("Could not record system brightness before override")
        level = _level_for_mode(target, self.PERCENT_RANGE, self.mode)
        if not self._write_level(level):
            return False
        self._saved_level = saved_level
        return True

    def restore_system_brightness(self) -> bool:
        if self._saved_level is None:
            return True
        if not self._write_level(self._saved_level):
            return False
        self._saved_level = None
        return True

    def _read_level(self) -> int:
        monitor = self.monitor or self.refresh_monitor()
        for call_kwargs in self._call_variants(monitor):
            try:
                value = sbc.get_brightness(**call_kwargs)
                if isinstance(value, list):
                    value = value[0]
                return max(0, min(100, int(round(value))))
            except Exception:
                continue
        raise SettingNotFound(f"Could not read brightness of {monitor.name}")

    def _write_level(self, level: int) -> bool:
        monitor = self.monitor or self.refresh_monitor()
        target = max(0, min(100, int(level)))
        for call_kwargs in self._call_variants(monitor):
            try:
                sbc.set_brightness(target, **call_kwargs)
                return True
            except Exception:
                continue
        logger.warning("Every brightness write to %s failed", monitor.name)
        return False

    @classmethod
    def _parse_monitor(cls, info: dict[str, Any], position: int) -> MonitorHandle:
        index = info.get("index")
        method = info.get("method")
        if method is not None and not isinstance(method, str):
            method = getattr(method, "__name__", None) or str(method)
        return MonitorHandle(
            name=str(info.get("name") or "").strip() or f"Display {position + 1}",
            display_index=index if isinstance(index, int) else position,
            method=cls._normalize_method(method),
        )

    @staticmethod
    def _call_variants(monitor: MonitorHandle) -> list[dict[str, Any]]:
        # Method-pinned call first, then the library default.
        generic: dict[str, Any] = {"display": monitor.display_index}
        if monitor.method is None:
            return [generic]
        return [{**generic, "method": monitor.method}, generic]

    @staticmethod
    def _normalize_method(method_name: str | None) -> str | None:
        if not method_name:
            return None
        lower_name = method_name.lower()
        for known in ("wmi", "vcp", "sysfs", "i2c", "xrandr", "ddcutil", "light"):
            if known in lower_name:
                return known
        return None


@dataclass
class BacklightInfo:
    name: str
    brightness_path: Path
    max_brightness: int


class SysfsBacklightBackend:
    _PREFERRED_PREFIXES: tuple[str, ...] = ("rpi_backlight", "panel", "DSI", "intel_backlight")

    def __init__(self, info: BacklightInfo, mode: ConversionMode = "linear") -> None:
        self.info = info
        self.mode = mode
        self._saved_raw: int | None = None

    @property
    def name(self) -> str:
        return self.info.name

    @classmethod
    def auto_detect(
        cls, root: str | Path = SYSFS_BACKLIGHT_ROOT, mode: ConversionMode = "linear"
    ) -> "SysfsBacklightBackend":
        candidates = sorted(glob.glob(os.path.join(str(root), "*")))
        candidates = sorted(
            candidates,
            key=lambda path: (
                0 if os.path.basename(path).startswith(cls._PREFERRED_PREFIXES) else 1,
                path,
            ),
        )
        for directory in candidates:
            info = cls._read_info(Path(directory))
            if info is not None:
                return cls(info, mode=mode)
        raise NoActiveSurface(f"No backlight device found under {root}")

    @classmethod
    def from_directory(
        cls, directory: str | Path, mode: ConversionMode = "linear"
    ) -> "SysfsBacklightBackend":
        info = cls._read_info(Path(directory))
        if info is None:
            raise NoActiveSurface(f"{directory} is not a readable backlight device")
        return cls(info, mode=mode)

    def read_brightness_range(self) -> BrightnessRange:
        return BrightnessRange(minimum=0, maximum=self.info.max_brightness)

    def read_system_brightness_raw(self) -> int | float:
        raw_value = self._saved_raw if self._saved_raw is not None else self._read_raw()
        return _reading_for_mode(raw_value, self.read_brightness_range(), self.mode)

    def write_display_brightness(self, value: float) -> bool:
        target = validate_normalized(value)
        saved_raw = self._saved_raw
        if saved_raw is None:
            try:
                saved_raw = self._read_raw()
            except SettingNotFound:
                logger.warning("Could not record %s brightness before override", self.name)
        raw_value = _level_for_mode(target, self.read_brightness_range(), self.mode)
        if not self._write_raw(raw_value):
            return False
        self._saved_raw = saved_raw
        return True

    def restore_system_brightness(self) -> bool:
        if self._saved_raw is None:
            return True
        if not self._write_raw(self._saved_raw):
            return False
        self._saved_raw = None
        return True

    def _read_raw(self) -> int:
        try:
            return self._read_int(self.info.brightness_path)
        except (OSError, ValueError) as exc:
            raise SettingNotFound(f"Could not read {self.info.brightness_path}: {exc}") from exc

    def _write_raw(self, raw_value: int) -> bool:
        bounded = max(0, min(self.info.max_brightness, int(raw_value)))
        try:
            self.info.brightness_path.write_text(f"{bounded}\n", encoding="utf-8")
        except PermissionError:
            logger.warning(
                "Permission denied while writing %s; grant write access to the backlight",
                self.info.brightness_path,
            )
            return False
        except OSError as exc:
            logger.warning("Could not write %s: %s", self.info.brightness_path, exc)
            return False
        return True

    @classmethod
    def _read_info(cls, directory: Path) -> BacklightInfo | None:
        brightness_path = directory / "brightness"
        max_path = directory / "max_brightness"
        if not (brightness_path.exists() and max_path.exists()):
            return None
        try:
            max_value = cls._read_int(max_path)
        except (OSError, ValueError):
            return None
        if max_value <= 0:
            return None
        return BacklightInfo(
            name=directory.name,
            brightness_path=brightness_path,
            max_brightness=max_value,
        )

    @staticmethod
    def _read_int(path: Path) -> int:
        return int(path.read_text(encoding="utf-8").strip())


def _reading_for_mode(
    raw_value: int, brightness_range: BrightnessRange, mode: ConversionMode
) -> int | float:
    # Direct mode expects the platform to hand back a float, as newer
    # Android releases do with screen_brightness_float.
    if mode == "direct":
        return normalize_linear(raw_value, brightness_range)
    return raw_value


def _level_for_mode(
    value: float, brightness_range: BrightnessRange, mode: ConversionMode
) -> int:
    if mode == "gamma":
        return denormalize_gamma(value, brightness_range)
    return denormalize_linear(value, brightness_range)
