"""Logging setup for the command-line tool."""

from __future__ import annotations

import logging
import sys
from pathlib import Path


def setup_logging(
    log_level: int | str = logging.INFO,
    log_file: str | None = None,
    verbose: bool = False,
) -> logging.Logger:
    """Configure root logging with a console handler and an optional file.

    Args:
        log_level: Level name or number used when ``verbose`` is off.
        log_file: Optional path of a UTF-8 log file, created with its parents.
        verbose: Force DEBUG and include the source location in every line.

    Returns:
        The configured root logger.
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO
    if verbose:
        log_level = logging.DEBUG

    if verbose:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    # stderr keeps stdout free for brightness values.
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as exc:
            root_logger.warning("Failed to create log file %s: %s", log_file, exc)

    return root_logger
