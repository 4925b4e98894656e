from __future__ import annotations

import logging
import threading

from .brightness_service import DisplayBackend, load_brightness_range
from .converter import denormalize, normalize
from .errors import BrightnessError, DisplayWriteFailed, NoActiveSurface, SettingNotFound
from .models import DEFAULT_RANGE, BrightnessRange, ConversionMode, validate_normalized
from .session import BrightnessListener, SessionState


logger = logging.getLogger(__name__)


class ScreenBrightnessController:
    """Host-facing brightness surface.

    Wires a display backend, the converter and the session state together.
    The brightness range is read once on construction; the conversion mode is
    supplied by the caller and never guessed from the platform.
    """

    def __init__(
        self,
        backend: DisplayBackend,
        mode: ConversionMode = "linear",
        fallback_range: BrightnessRange = DEFAULT_RANGE,
        attached: bool = True,
    ) -> None:
        self.backend = backend
        self.mode = mode
        self.brightness_range = load_brightness_range(backend, fallback=fallback_range)
        self._lock = threading.RLock()
        self._attached = attached
        self.session = SessionState(self._read_system_brightness())

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> None:
        with self._lock:
            self._attached = True

    def detach(self) -> None:
        with self._lock:
            self._attached = False
            self.session.unsubscribe()

    def listen(self, callback: BrightnessListener) -> None:
        with self._lock:
            self.session.subscribe(callback)

    def cancel_listen(self) -> None:
        with self._lock:
            self.session.unsubscribe()

    def get_system_screen_brightness(self) -> float:
        with self._lock:
            return self.session.system_brightness

    def get_screen_brightness(self) -> float:
        with self._lock:
            self._require_surface()
            return self.session.current_effective_brightness()

    def get_screen_brightness_raw(self) -> int | float:
        return denormalize(self.get_screen_brightness(), self.brightness_range, self.mode)

    def set_screen_brightness(self, value: float | None) -> None:
        with self._lock:
            self._require_surface()
            target = validate_normalized(value)
            if not self.session.set_override(target, write=self.backend.write_display_brightness):
                raise DisplayWriteFailed()
            logger.info("Screen brightness overridden to %.3f", target)

    def reset_screen_brightness(self) -> None:
        with self._lock:
            self._require_surface()
            restored = self.session.reset_override(
                write=lambda _system_value: self.backend.restore_system_brightness()
            )
            if not restored:
                raise DisplayWriteFailed()
            logger.info(
                "Screen brightness reset to system value %.3f", self.session.system_brightness
            )

    def has_changed(self) -> bool:
        with self._lock:
            return self.session.has_override()

    def refresh_system_brightness(self) -> float:
        with self._lock:
            value = self._read_system_brightness()
            if value != self.session.system_brightness:
                logger.debug("System brightness changed to %.3f", value)
                self.session.report_system_brightness_changed(value)
            return value

    def _read_system_brightness(self) -> float:
        try:
            raw_value = self.backend.read_system_brightness_raw()
        except BrightnessError:
            raise
        except Exception as exc:
            raise SettingNotFound(str(exc) or None) from exc
        return normalize(raw_value, self.brightness_range, self.mode)

    def _require_surface(self) -> None:
        if not self._attached:
            raise NoActiveSurface()
