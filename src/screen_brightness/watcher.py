from __future__ import annotations

import logging
import threading

from .controller import ScreenBrightnessController
from .errors import BrightnessError


logger = logging.getLogger(__name__)


class SystemBrightnessWatcher:
    def __init__(
        self, controller: ScreenBrightnessController, poll_interval_seconds: float = 1.0
    ) -> None:
        self.controller = controller
        self.poll_interval_seconds = max(0.1, min(60.0, float(poll_interval_seconds)))

        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._last_error: str | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop, name="system-brightness-watcher", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=max(0.8, self.poll_interval_seconds * 2))
        self._thread = None

    def poll_once(self) -> float | None:
        try:
            value = self.controller.refresh_system_brightness()
        except BrightnessError as exc:
            logger.debug("System brightness poll failed: %s", exc)
            with self._lock:
                self._last_error = exc.message
            return None
        with self._lock:
            self._last_error = None
        return value

    def last_error(self) -> str | None:
        with self._lock:
            return self._last_error

    def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            self.poll_once()
            if self._stop_event.wait(self.poll_interval_seconds):
                break
