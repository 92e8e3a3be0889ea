"""Diagnostics for the ``skillbox`` logger tree.

Command output goes through ``skillbox.output``; logging is reserved for
diagnostics on stderr and stays at WARNING unless ``SKILLBOX_LOG_LEVEL``
or ``--verbose`` raises it. ``SKILLBOX_LOG_FILE`` additionally writes a
daily file under ``<skillbox root>/logs``.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime

from skillbox.paths import get_log_dir

ROOT_LOGGER = "skillbox"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
# DEBUG output carries line numbers
LOG_FORMAT_DEBUG = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def get_log_level() -> int:
    """Level named by SKILLBOX_LOG_LEVEL; unknown names fall back to WARNING."""
    name = os.environ.get("SKILLBOX_LOG_LEVEL", "WARNING").upper()
    return LOG_LEVELS.get(name, logging.WARNING)


def is_file_logging_enabled() -> bool:
    return os.environ.get("SKILLBOX_LOG_FILE", "false").lower() in ("true", "1")


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, fmt: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, DATE_FORMAT))
    logger.addHandler(handler)


def setup_logging(level: int | None = None, log_file: bool | None = None) -> None:
    """(Re)configure the ``skillbox`` logger.

    Existing handlers are replaced, so calling this once per CLI run keeps
    a single stderr handler even when ``main`` runs repeatedly in-process.

    Args:
        level: Log level. Defaults to SKILLBOX_LOG_LEVEL.
        log_file: Also log to ``logs/skillbox_YYYYMMDD.log``. Defaults to
            SKILLBOX_LOG_FILE.
    """
    level = get_log_level() if level is None else level
    log_file = is_file_logging_enabled() if log_file is None else log_file
    fmt = LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False

    _attach(logger, logging.StreamHandler(sys.stderr), level, fmt)

    if log_file:
        log_dir = get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        path = log_dir / f"skillbox_{datetime.now().strftime('%Y%m%d')}.log"
        _attach(logger, logging.FileHandler(path, encoding="utf-8"), level, fmt)


def set_debug_mode(enabled: bool = True) -> None:
    """Switch the logger and its handlers to DEBUG, or back to WARNING."""
    level = logging.DEBUG if enabled else logging.WARNING
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
