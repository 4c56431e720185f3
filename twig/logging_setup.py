"""File-only logging configuration.

The interactive session owns the terminal, so log records go to a file under
the per-user log directory and never to stdout/stderr.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "twig"
LOG_FILENAME = "twig.log"
LOG_LEVEL_ENV = "TWIG_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_PATH = Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_INSTALLED_HANDLER: logging.Handler | None = None


def level_from_name(name: str | None) -> int:
    """Return the numeric level for ``name``, falling back to WARNING."""
    if not name:
        return logging.WARNING
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: str | None = None, log_path: Path | None = None) -> Path | None:
    """Install (or replace) the single twig handler on the ``twig`` logger.

    ``level`` falls back to ``$TWIG_LOG_LEVEL`` and then WARNING. Returns the
    log path, or ``None`` when the log file cannot be opened, in which case
    logging stays silent.
    """
    global _INSTALLED_HANDLER

    resolved_level = level_from_name(level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL)
    path = Path(log_path) if log_path is not None else DEFAULT_LOG_PATH
    logger = logging.getLogger(APP_NAME)

    if _INSTALLED_HANDLER is not None:
        logger.removeHandler(_INSTALLED_HANDLER)
        _INSTALLED_HANDLER.close()
        _INSTALLED_HANDLER = None

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        _INSTALLED_HANDLER = logging.NullHandler()
        logger.addHandler(_INSTALLED_HANDLER)
        return None

    handler.setLevel(resolved_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.setLevel(resolved_level)
    logger.addHandler(handler)
    logger.propagate = False
    _INSTALLED_HANDLER = handler
    return path


def reset_logging_for_tests() -> None:
    """Detach the installed file handler."""
    global _INSTALLED_HANDLER
    logger = logging.getLogger(APP_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    _INSTALLED_HANDLER = None
