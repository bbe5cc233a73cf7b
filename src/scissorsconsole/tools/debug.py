"""Debug switches and application logging setup."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

DEBUG_SCISSORS = os.getenv("SCISSORS_DEBUG", "").lower() in {"1", "true", "yes", "on"}

LOGGER_NAME = "scissorsconsole"
LOG_FILENAME = "scissors_console.log"


def debug_enabled() -> bool:
    """Return True when verbose diagnostics should reach the operator log."""
    return DEBUG_SCISSORS


def default_log_dir() -> Path:
    env_dir = os.environ.get("SCISSORS_LOG_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    return Path.cwd() / "logs"


def configure_logging(
    log_dir: Optional[Path] = None,
    level: Optional[int] = None,
) -> tuple[logging.Logger, Optional[RotatingFileHandler]]:
    """
    Configure the package logger once; later calls return it unchanged.

    Returns ``(logger, file_handler)``; the file handler is ``None`` when the
    logger was already configured.
    """
    app_logger = logging.getLogger(LOGGER_NAME)
    if app_logger.handlers:
        return app_logger, None

    if level is None:
        level = logging.DEBUG if debug_enabled() else logging.INFO
    app_logger.setLevel(level)

    directory = Path(log_dir) if log_dir is not None else default_log_dir()
    directory.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_h = RotatingFileHandler(
        str(directory / LOG_FILENAME),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_h.setFormatter(formatter)
    app_logger.addHandler(file_h)

    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(formatter)
    app_logger.addHandler(console)
    return app_logger, file_h


__all__ = ["LOGGER_NAME", "configure_logging", "debug_enabled", "default_log_dir"]
