from __future__ import annotations

import math

from .errors import DegenerateRange, InputOutOfDomain
from .models import BrightnessRange, ConversionMode, clamp_normalized, validate_normalized


GAMMA_SPACE_MAX = 1023.0
HLG_SCALE = 12.0

# Hybrid log-gamma transfer function constants (ARIB STD-B67).
_HLG_R = 0.5
_HLG_A = 0.17883277
_HLG_B = 0.28466892
_HLG_C = 0.55991073


def lerp(start: float, stop: float, fraction: float) -> float:
    return start + (stop - start) * fraction


def normalize_linear(raw: int | float, brightness_range: BrightnessRange) -> float:
    if brightness_range.is_degenerate:
        raise DegenerateRange(
            f"Cannot normalize against range {brightness_range.minimum}..{brightness_range.maximum}"
        )
    ratio = (float(raw) - brightness_range.minimum) / brightness_range.span
    # Some OEM panels report readings slightly outside their advertised range.
    return clamp_normalized(ratio)


def normalize_gamma(raw: int | float, brightness_range: BrightnessRange) -> float:
    if brightness_range.is_degenerate:
        raise DegenerateRange(
            f"Cannot normalize against range {brightness_range.minimum}..{brightness_range.maximum}"
        )
    if raw < brightness_range.minimum:
        raise InputOutOfDomain(
            f"Raw brightness {raw} is below the range floor {brightness_range.minimum}"
        )

    scaled = normalize_linear(raw, brightness_range) * HLG_SCALE
    if scaled <= 1.0:
        perceptual = math.sqrt(scaled) * _HLG_R
    else:
        log_argument = scaled - _HLG_B
        if log_argument <= 0.0:
            raise InputOutOfDomain(f"Raw brightness {raw} is outside the gamma domain")
        perceptual = _HLG_A * math.log(log_argument) + _HLG_C

    return clamp_normalized(round(lerp(0.0, GAMMA_SPACE_MAX, perceptual)) / GAMMA_SPACE_MAX)


def denormalize_linear(value: float, brightness_range: BrightnessRange) -> int:
    fraction = validate_normalized(value)
    return int(round(lerp(brightness_range.minimum, brightness_range.maximum, fraction)))


def denormalize_gamma(value: float, brightness_range: BrightnessRange) -> int:
    perceptual = validate_normalized(value)
    if perceptual <= _HLG_R:
        scaled = (perceptual / _HLG_R) ** 2
    else:
        scaled = math.exp((perceptual - _HLG_C) / _HLG_A) + _HLG_B
    fraction = clamp_normalized(scaled / HLG_SCALE)
    return int(round(lerp(brightness_range.minimum, brightness_range.maximum, fraction)))


def normalize(
    raw: int | float, brightness_range: BrightnessRange, mode: ConversionMode
) -> float:
    if mode == "linear":
        return normalize_linear(raw, brightness_range)
    if mode == "gamma":
        return normalize_gamma(raw, brightness_range)
    if mode == "direct":
        if not math.isfinite(float(raw)):
            raise InputOutOfDomain(f"Brightness reading {raw!r} is not finite")
        return clamp_normalized(raw)
    raise ValueError(f"Unknown conversion mode: {mode!r}")


def denormalize(
    value: float, brightness_range: BrightnessRange, mode: ConversionMode
) -> int | float:
    if mode == "linear":
        return denormalize_linear(value, brightness_range)
    if mode == "gamma":
        return denormalize_gamma(value, brightness_range)
    if mode == "direct":
        return validate_normalized(value)
    raise ValueError(f"Unknown conversion mode: {mode!r}")
