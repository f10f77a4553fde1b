"""Logging configuration for applications embedding the page store.

Every module logs through ``logging.getLogger(__name__)``, so all records
flow through the ``src`` namespace logger configured here. Third-party and
root loggers are never touched.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

APP_LOGGER_NAME = "src"
LOG_FILE_PREFIX = "page-store"

CONSOLE_FORMAT = "%(asctime)s [%(levelname)8s] %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def level_for_verbosity(verbosity: int) -> int:
    """0 (or less) is WARNING, 1 is INFO, anything higher is DEBUG."""
    index = min(max(verbosity, 0), len(_VERBOSITY_LEVELS) - 1)
    return _VERBOSITY_LEVELS[index]


def _make_handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def configure_logging(verbosity: int, logdir: Optional[str] = None) -> logging.Logger:
    """Send page store logs to stderr and, optionally, a log file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2 or more=DEBUG
        logdir: Directory for a timestamped ``page-store_*.log`` file

    Returns:
        The configured 'src' logger
    """
    level = level_for_verbosity(verbosity)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(level)
    for old_handler in list(app_logger.handlers):
        app_logger.removeHandler(old_handler)
        old_handler.close()

    app_logger.addHandler(_make_handler(logging.StreamHandler(sys.stderr), level, CONSOLE_FORMAT))

    if logdir:
        log_dir = Path(logdir)
        log_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"{LOG_FILE_PREFIX}_{stamp}.log"

        app_logger.addHandler(
            _make_handler(logging.FileHandler(log_file, encoding="utf-8"), level, FILE_FORMAT)
        )
        app_logger.info(f"Logging to file: {log_file}")

    return app_logger
