from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from .errors import InputOutOfDomain


ConversionMode = Literal["linear", "gamma", "direct"]
CONVERSION_MODES: tuple[str, ...] = ("linear", "gamma", "direct")


@dataclass(frozen=True)
class BrightnessRange:
    minimum: int
    maximum: int

    def __post_init__(self) -> None:
        if self.minimum < 0 or self.maximum < 0:
            raise ValueError(
                f"Brightness range bounds must be >= 0, got {self.minimum}..{self.maximum}"
            )
        if self.minimum > self.maximum:
            raise ValueError(
                f"Brightness range minimum {self.minimum} exceeds maximum {self.maximum}"
            )

    @property
    def is_degenerate(self) -> bool:
        return self.minimum == self.maximum

    @property
    def span(self) -> int:
        return self.maximum - self.minimum


# Android's PowerManager BRIGHTNESS_OFF / BRIGHTNESS_ON.
DEFAULT_RANGE = BrightnessRange(minimum=0, maximum=255)


class SessionMode(str, Enum):
    FOLLOWING = "following"
    OVERRIDDEN = "overridden"


def clamp_normalized(value: int | float) -> float:
    return max(0.0, min(1.0, float(value)))


def validate_normalized(value: int | float | None) -> float:
    if value is None or isinstance(value, bool):
        raise InputOutOfDomain(f"Brightness must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InputOutOfDomain(f"Brightness must be a number, got {value!r}") from None
    if not math.isfinite(number) or number < 0.0 or number > 1.0:
        raise InputOutOfDomain(f"Brightness must be within 0..1, got {value!r}")
    return number


def normalize_mode_name(value: object, fallback: str = "linear") -> str:
    text = str(value or "").strip().lower()
    if text in CONVERSION_MODES:
        return text
    return fallback
