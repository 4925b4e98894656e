from __future__ import annotations


class BrightnessError(Exception):
    code = "-99"
    default_message = "Unexpected brightness error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class DisplayWriteFailed(BrightnessError):
    code = "-1"
    default_message = "Unable to change screen brightness"


class InputOutOfDomain(BrightnessError):
    code = "-2"
    default_message = "Brightness value outside of the valid domain"


class DegenerateRange(BrightnessError):
    code = "-3"
    default_message = "Brightness range has equal minimum and maximum"


class NoActiveSurface(BrightnessError):
    code = "-10"
    default_message = "No display surface is attached"


class SettingNotFound(BrightnessError):
    code = "-11"
    default_message = "Could not find system screen brightness value"
