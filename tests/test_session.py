from __future__ import annotations

import pytest

from screen_brightness.errors import DisplayWriteFailed, InputOutOfDomain
from screen_brightness.models import SessionMode
from screen_brightness.session import SessionState


def test_override_round_trip() -> None:
    session = SessionState(0.5)

    assert session.set_override(0.8) is True
    assert session.current_effective_brightness() == 0.8

    assert session.reset_override() is True
    assert session.current_effective_brightness() == 0.5


def test_has_override_transitions() -> None:
    session = SessionState(0.5)
    assert session.has_override() is False
    assert session.state is SessionMode.FOLLOWING

    session.set_override(0.8)
    assert session.has_override() is True
    assert session.state is SessionMode.OVERRIDDEN

    session.set_override(0.6)
    assert session.override == 0.6

    session.reset_override()
    assert session.has_override() is False
    assert session.state is SessionMode.FOLLOWING


def test_system_change_is_masked_while_overridden() -> None:
    events: list[float] = []
    session = SessionState(0.5)
    session.set_override(0.8)
    session.subscribe(events.append)

    session.report_system_brightness_changed(0.3)

    assert session.current_effective_brightness() == 0.8
    assert session.system_brightness == 0.3
    assert events == []


def test_system_change_is_reported_while_following() -> None:
    events: list[float] = []
    session = SessionState(0.5, listener=events.append)

    session.report_system_brightness_changed(0.3)

    assert session.current_effective_brightness() == 0.3
    assert events == [0.3]


def test_reset_notifies_latest_system_value() -> None:
    events: list[float] = []
    session = SessionState(0.5, listener=events.append)
    session.set_override(0.8)
    session.report_system_brightness_changed(0.3)

    session.reset_override()

    assert events == [0.8, 0.3]
    assert session.current_effective_brightness() == 0.3


def test_reset_while_following_still_notifies() -> None:
    events: list[float] = []
    session = SessionState(0.5, listener=events.append)

    assert session.reset_override() is True
    assert events == [0.5]
    assert session.has_override() is False


def test_rejected_write_leaves_state_untouched() -> None:
    events: list[float] = []
    session = SessionState(0.5, listener=events.append)

    assert session.set_override(0.8, write=lambda _value: False) is False
    assert session.has_override() is False
    assert session.current_effective_brightness() == 0.5
    assert events == []


def test_failed_reset_keeps_override() -> None:
    session = SessionState(0.5)
    session.set_override(0.8)

    assert session.reset_override(write=lambda _value: False) is False
    assert session.current_effective_brightness() == 0.8


def test_write_error_propagates_without_state_change() -> None:
    session = SessionState(0.5)

    def broken_write(_value: float) -> bool:
        raise DisplayWriteFailed("panel offline")

    with pytest.raises(DisplayWriteFailed):
        session.set_override(0.8, write=broken_write)
    assert session.has_override() is False


def test_writer_receives_target_values() -> None:
    written: list[float] = []

    def record(value: float) -> bool:
        written.append(value)
        return True

    session = SessionState(0.4)
    session.set_override(0.9, write=record)
    session.reset_override(write=record)
    assert written == [0.9, 0.4]


def test_single_listener_is_replaced_and_cleared() -> None:
    first: list[float] = []
    second: list[float] = []
    session = SessionState(0.5, listener=first.append)

    session.subscribe(second.append)
    session.set_override(0.7)
    session.unsubscribe()
    session.set_override(0.9)

    assert first == []
    assert second == [0.7]
    assert session.has_listener() is False


def test_listener_error_does_not_undo_change() -> None:
    def broken_listener(_value: float) -> None:
        raise RuntimeError("listener exploded")

    session = SessionState(0.5, listener=broken_listener)
    assert session.set_override(0.7) is True
    assert session.current_effective_brightness() == 0.7


@pytest.mark.parametrize("value", [-0.01, 1.2, float("inf"), float("nan")])
def test_out_of_range_values_are_rejected(value: float) -> None:
    session = SessionState(0.5)
    with pytest.raises(InputOutOfDomain):
        session.set_override(value)
    with pytest.raises(InputOutOfDomain):
        session.report_system_brightness_changed(value)
    assert session.current_effective_brightness() == 0.5


def test_initial_system_value_is_validated() -> None:
    with pytest.raises(InputOutOfDomain):
        SessionState(1.5)
