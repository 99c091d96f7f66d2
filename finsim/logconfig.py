# finsim/logconfig.py
"""
Logging setup for CLI runs.

Library modules only create module loggers (logging.getLogger(__name__)); handlers
are attached here, once, by the entry point.

- Console: WARNING by default, DEBUG with verbose=True.
- File: when FINSIM_DEBUG_LOG names a path, a rotating DEBUG log is written there.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

ROOT_LOGGER = "finsim"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "(%Y-%m-%d %H:%M:%S)"


def debug_log_path() -> str | None:
    path = os.getenv("FINSIM_DEBUG_LOG", "").strip()
    return path or None


def configure_logging(*, verbose: bool = False, log_path: str | None = None) -> logging.Logger:
    """Attach console (and optional rotating file) handlers to the package logger. Idempotent."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers if called again in REPL/tests; only the console level follows `verbose`
    if logger.handlers:
        for handler in logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
        return logger

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(formatter)
    logger.addHandler(console)

    path = log_path or debug_log_path()
    if path:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
