from __future__ import annotations

from typing import Callable

import pytest

from screen_brightness.models import BrightnessRange


class FakeBackend:
    def __init__(
        self,
        raw: int | float = 51,
        brightness_range: BrightnessRange | Exception = BrightnessRange(0, 255),
        accept_writes: bool = True,
    ) -> None:
        self.raw = raw
        self.brightness_range = brightness_range
        self.accept_writes = accept_writes
        self.read_error: Exception | None = None
        self.range_reads = 0
        self.writes: list[float] = []
        self.restores = 0

    def read_brightness_range(self) -> BrightnessRange:
        self.range_reads += 1
        if isinstance(self.brightness_range, Exception):
            raise self.brightness_range
        return self.brightness_range

    def read_system_brightness_raw(self) -> int | float:
        if self.read_error is not None:
            raise self.read_error
        return self.raw

    def write_display_brightness(self, value: float) -> bool:
        if not self.accept_writes:
            return False
        self.writes.append(value)
        return True

    def restore_system_brightness(self) -> bool:
        if not self.accept_writes:
            return False
        self.restores += 1
        return True


@pytest.fixture
def make_backend() -> Callable[..., FakeBackend]:
    return FakeBackend
