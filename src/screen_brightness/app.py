from __future__ import annotations

import argparse
import sys
import threading
from pathlib import Path
from typing import Sequence

from .brightness_service import (
    DisplayBackend,
    ScreenBrightnessControlBackend,
    SysfsBacklightBackend,
)
from .config_store import BACKEND_NAMES, AppConfig, ConfigStore
from .controller import ScreenBrightnessController
from .errors import BrightnessError
from .logging_config import setup_logging
from .models import CONVERSION_MODES
from .watcher import SystemBrightnessWatcher


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="screen-brightness",
        description="Read and override screen brightness.",
    )
    parser.add_argument("--mode", choices=CONVERSION_MODES, help="brightness conversion mode")
    parser.add_argument("--backend", choices=BACKEND_NAMES, help="display backend")
    parser.add_argument("--display", type=int, help="monitor index for the sbc backend")
    parser.add_argument("--config", type=Path, help="path of the JSON config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    get_parser = commands.add_parser("get", help="print the effective brightness")
    get_parser.add_argument("--raw", action="store_true", help="print the raw platform level")
    commands.add_parser("system", help="print the system brightness")
    set_parser = commands.add_parser("set", help="override the brightness (0..1)")
    set_parser.add_argument("value", type=float)
    commands.add_parser("reset", help="restore the system brightness")
    commands.add_parser("watch", help="print brightness changes until interrupted")
    return parser


def build_backend(config: AppConfig) -> DisplayBackend:
    if config.backend == "sysfs":
        if config.backlight_directory:
            return SysfsBacklightBackend.from_directory(
                config.backlight_directory, mode=config.conversion_mode
            )
        return SysfsBacklightBackend.auto_detect(mode=config.conversion_mode)
    return ScreenBrightnessControlBackend(display=config.display, mode=config.conversion_mode)


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    if args.mode:
        config.conversion_mode = args.mode
    if args.backend:
        config.backend = args.backend
    if args.display is not None:
        config.display = max(0, args.display)
    return config


def run(
    argv: Sequence[str] | None = None,
    stop_event: threading.Event | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    config = apply_overrides(ConfigStore(args.config).load(), args)
    setup_logging(config.log_level, config.log_file, verbose=args.verbose)

    try:
        controller = ScreenBrightnessController(
            build_backend(config),
            mode=config.conversion_mode,
            fallback_range=config.fallback_range(),
        )
        if args.command == "get":
            if args.raw:
                print(controller.get_screen_brightness_raw())
            else:
                print(f"{controller.get_screen_brightness():.4f}")
        elif args.command == "system":
            print(f"{controller.get_system_screen_brightness():.4f}")
        elif args.command == "set":
            controller.set_screen_brightness(args.value)
            print(f"{controller.get_screen_brightness():.4f}")
        elif args.command == "reset":
            controller.reset_screen_brightness()
            print(f"{controller.get_screen_brightness():.4f}")
        elif args.command == "watch":
            _watch(controller, config, stop_event or threading.Event())
    except BrightnessError as exc:
        print(f"error {exc.code}: {exc.message}", file=sys.stderr)
        return 1
    return 0


def _watch(
    controller: ScreenBrightnessController, config: AppConfig, stop_event: threading.Event
) -> None:
    controller.listen(lambda value: print(f"{value:.4f}", flush=True))
    print(f"{controller.get_screen_brightness():.4f}", flush=True)
    watcher = SystemBrightnessWatcher(controller, config.poll_interval_seconds)
    watcher.start()
    try:
        while not stop_event.wait(0.5):
            pass
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
        controller.cancel_listen()


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
