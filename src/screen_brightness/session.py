from __future__ import annotations

import logging
from typing import Callable

from .models import SessionMode, validate_normalized


logger = logging.getLogger(__name__)

BrightnessListener = Callable[[float], None]
DisplayWriter = Callable[[float], bool]


class SessionState:
    """Tracks the system brightness and an optional user override.

    The override, when present, wins over the system value for every
    "current brightness" read. Operations either fully apply (state updated,
    listener notified) or leave the state untouched.
    """

    def __init__(
        self,
        system_brightness: float,
        listener: BrightnessListener | None = None,
    ) -> None:
        self._system_brightness = validate_normalized(system_brightness)
        self._override: float | None = None
        self._listener = listener

    @property
    def system_brightness(self) -> float:
        return self._system_brightness

    @property
    def override(self) -> float | None:
        return self._override

    @property
    def state(self) -> SessionMode:
        if self._override is None:
            return SessionMode.FOLLOWING
        return SessionMode.OVERRIDDEN

    def subscribe(self, listener: BrightnessListener) -> None:
        self._listener = listener

    def unsubscribe(self) -> None:
        self._listener = None

    def has_listener(self) -> bool:
        return self._listener is not None

    def report_system_brightness_changed(self, value: float) -> None:
        self._system_brightness = validate_normalized(value)
        if self._override is not None:
            logger.debug(
                "System brightness now %.3f, masked by override %.3f",
                self._system_brightness,
                self._override,
            )
            return
        self._notify(self._system_brightness)

    def set_override(self, value: float, write: DisplayWriter | None = None) -> bool:
        target = validate_normalized(value)
        if write is not None and not write(target):
            return False
        self._override = target
        self._notify(target)
        return True

    def reset_override(self, write: DisplayWriter | None = None) -> bool:
        if write is not None and not write(self._system_brightness):
            return False
        self._override = None
        self._notify(self._system_brightness)
        return True

    def current_effective_brightness(self) -> float:
        if self._override is not None:
            return self._override
        return self._system_brightness

    def has_override(self) -> bool:
        return self._override is not None

    def _notify(self, value: float) -> None:
        listener = self._listener
        if listener is None:
            return
        try:
            listener(value)
        except Exception:
            logger.exception("Brightness listener failed for value %.3f", value)
