"""Logging configuration utilities for podgrab."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path


LOG_FILE_NAME = "podgrab.log"


def default_log_file(log_dir: Path | str | None = None) -> Path:
    """Return the log file inside *log_dir*, or ``./logs`` when not given."""
    return Path(log_dir if log_dir is not None else Path.cwd() / "logs") / LOG_FILE_NAME


def setup_logging(log_file: Path | str | None = None, level: int = logging.INFO) -> None:
    """Configure application logging.

    This sets up a :class:`~logging.handlers.RotatingFileHandler` that writes to
    ``logs/podgrab.log`` by default. Log files are rotated when they reach
    1 MB, keeping three backups. A console handler is added unless one is
    already installed on the root logger.
    """

    path = Path(log_file) if log_file else default_log_file()
    path.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    already_attached = any(
        isinstance(h, RotatingFileHandler) and h.baseFilename == os.path.abspath(path)
        for h in root_logger.handlers
    )
    if not already_attached:
        handler = RotatingFileHandler(path, maxBytes=1_048_576, backupCount=3)
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        )
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # RotatingFileHandler is itself a StreamHandler subclass
    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        root_logger.addHandler(console)
