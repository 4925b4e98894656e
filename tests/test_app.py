from __future__ import annotations

import threading
from pathlib import Path

import pytest

from screen_brightness import app
from screen_brightness.brightness_service import (
    ScreenBrightnessControlBackend,
    SysfsBacklightBackend,
)
from screen_brightness.config_store import AppConfig


@pytest.fixture
def backend(make_backend, monkeypatch: pytest.MonkeyPatch):
    fake = make_backend(raw=51)
    monkeypatch.setattr(app, "build_backend", lambda _config: fake)
    monkeypatch.setattr(app, "setup_logging", lambda *args, **kwargs: None)
    return fake


def _run(tmp_path: Path, *args: str, **kwargs) -> int:
    return app.run(["--config", str(tmp_path / "config.json"), *args], **kwargs)


def test_system_command(backend, tmp_path: Path, capsys) -> None:
    assert _run(tmp_path, "system") == 0
    assert capsys.readouterr().out.strip() == "0.2000"


def test_get_command_raw(backend, tmp_path: Path, capsys) -> None:
    assert _run(tmp_path, "get", "--raw") == 0
    assert capsys.readouterr().out.strip() == "51"


def test_set_and_reset_commands(backend, tmp_path: Path, capsys) -> None:
    assert _run(tmp_path, "set", "0.5") == 0
    assert capsys.readouterr().out.strip() == "0.5000"
    assert backend.writes == [0.5]

    assert _run(tmp_path, "reset") == 0
    assert capsys.readouterr().out.strip() == "0.2000"
    assert backend.restores == 1


def test_invalid_value_reports_error_code(backend, tmp_path: Path, capsys) -> None:
    assert _run(tmp_path, "set", "1.5") == 1
    assert capsys.readouterr().err.startswith("error -2:")
    assert backend.writes == []


def test_rejected_write_reports_error_code(backend, tmp_path: Path, capsys) -> None:
    backend.accept_writes = False
    assert _run(tmp_path, "set", "0.3") == 1
    assert "error -1: Unable to change screen brightness" in capsys.readouterr().err


def test_mode_flag_overrides_config(backend, tmp_path: Path, capsys) -> None:
    backend.raw = 255
    assert _run(tmp_path, "--mode", "gamma", "system") == 0
    assert capsys.readouterr().out.strip() == "1.0000"


def test_watch_stops_on_event(backend, tmp_path: Path, capsys) -> None:
    stop_event = threading.Event()
    stop_event.set()

    assert _run(tmp_path, "watch", stop_event=stop_event) == 0
    assert capsys.readouterr().out.splitlines()[0] == "0.2000"


def test_build_backend_selects_implementation(tmp_path: Path) -> None:
    directory = tmp_path / "panel0"
    directory.mkdir()
    (directory / "brightness").write_text("10", encoding="utf-8")
    (directory / "max_brightness").write_text("100", encoding="utf-8")

    sysfs = app.build_backend(
        AppConfig(backend="sysfs", backlight_directory=str(directory), conversion_mode="gamma")
    )
    assert isinstance(sysfs, SysfsBacklightBackend)
    assert sysfs.mode == "gamma"

    sbc_backend = app.build_backend(AppConfig(display=2))
    assert isinstance(sbc_backend, ScreenBrightnessControlBackend)
    assert sbc_backend.display == 2
