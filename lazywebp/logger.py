# =============================================================================
# File: logger.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import logging
import os
from typing import Optional

ROOT_LOGGER_NAME = "lazywebp"
FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_debug_mode = os.getenv("LAZYWEBP_DEBUG", "0").lower() in ("1", "true", "yes")


def _level() -> int:
    return logging.DEBUG if _debug_mode else logging.INFO


def set_debug_mode(enabled: bool) -> None:
    """Switch every LazyWebP logger between INFO and DEBUG."""
    global _debug_mode
    _debug_mode = bool(enabled)
    manager = logging.Logger.manager
    for name in list(manager.loggerDict):
        if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
            logging.getLogger(name).setLevel(_level())


def is_debug_mode() -> bool:
    return _debug_mode


def get_logger(
    name: str = ROOT_LOGGER_NAME,
    log_file: Optional[str] = "lazywebp.log",
    log_dir: Optional[str] = None,
) -> logging.Logger:
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(name)
    logger.setLevel(_level())
    formatter = logging.Formatter(FORMAT)

    # Console handler
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(formatter)
        logger.addHandler(ch)

    # File handler only when a log folder is given
    if log_dir and log_file:
        _add_file_handler(logger, log_dir, log_file, formatter)

    return logger


def configure_log_file(log_dir: Optional[str], log_file: str = "lazywebp.log") -> None:
    """Send every LazyWebP logger to log_dir/log_file through the package logger."""
    if not log_dir:
        return
    formatter = logging.Formatter(FORMAT)
    _add_file_handler(logging.getLogger(ROOT_LOGGER_NAME), log_dir, log_file, formatter)


def _add_file_handler(
    logger: logging.Logger, log_dir: str, log_file: str, formatter: logging.Formatter
) -> None:
    if not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, log_file)
    if not any(
        isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(log_path)
        for h in logger.handlers
    ):
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setFormatter(formatter)
        logger.addHandler(fh)
