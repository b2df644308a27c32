from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
PACKAGE_LOGGER = "wiki_revision_reader"


def setup_logging(
    level: str | int = logging.INFO,
    log_dir: str | Path | None = None,
    log_prefix: str = "run",
) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the package logger.

    Each handler is added at most once per process, so a later call can add
    the file handler without duplicating console output.

    Args:
        level: Level for the console handler.
        log_dir: Directory for a timestamped DEBUG log file; no file when None.
        log_prefix: Prefix for the log file name.

    Returns:
        The package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT)

    # FileHandler subclasses StreamHandler, so match the console type exactly.
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    has_file = any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    if log_dir is not None and not has_file:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        log_file = Path(log_dir) / f"{log_prefix}_{timestamp}_{os.getpid()}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info("Log file: %s", log_file)

    return logger


def is_level_name(name: str) -> bool:
    """True when ``name`` is a registered logging level such as ``INFO``."""
    return isinstance(logging.getLevelName(name.upper()), int)
