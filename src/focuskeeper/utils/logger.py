"""Application logging.

Everything goes to a rotating ``focuskeeper.log`` in the platform log
directory. Components log through children of the ``focuskeeper`` logger
(``focuskeeper.focus``, ``focuskeeper.sqlite``, ...) so every line names its
source. ``FOCUSKEEPER_LOG_LEVEL`` overrides the default DEBUG level.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "focuskeeper"
LOG_FILE = "focuskeeper.log"
LOG_LEVEL_ENV_VAR = "FOCUSKEEPER_LOG_LEVEL"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

_logger: logging.Logger | None = None


def log_file_path() -> Path:
    """Where the application log is written."""
    return Path(user_log_dir(APP_NAME)) / LOG_FILE


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the application logger, or the child logger of *component*."""
    logger = _logger or _configure()
    return logger.getChild(component) if component else logger


def _level_from_env() -> int:
    level = logging.getLevelName(os.environ.get(LOG_LEVEL_ENV_VAR, "DEBUG").upper())
    return level if isinstance(level, int) else logging.DEBUG


def _configure() -> logging.Logger:
    global _logger

    path = log_file_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )

    logger = logging.getLogger(APP_NAME)
    logger.setLevel(_level_from_env())
    if not logger.handlers:
        logger.addHandler(handler)
    logger.propagate = False

    _logger = logger
    return _logger
