"""Logging setup.

The picker owns the terminal while it runs, so records go to a rotating
per-user log file instead of stderr.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME

LOG_DIR = Path(user_log_dir(APP_NAME, appauthor=False))
LOG_FILENAME = "lazytry.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_HANDLER_NAME = "lazytry-file"


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> Path | None:
    """Attach the file handler to the ``lazytry`` logger and return its path.

    Calling it again replaces the previous handler. Returns ``None`` when the
    log directory cannot be created; logging then stays unconfigured.
    """
    target_dir = LOG_DIR if log_dir is None else log_dir
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        return None

    package_logger = logging.getLogger(APP_NAME)
    for handler in package_logger.handlers[:]:
        if handler.get_name() == _HANDLER_NAME:
            package_logger.removeHandler(handler)
            handler.close()

    log_file = target_dir / LOG_FILENAME
    file_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=2, encoding="utf-8")
    file_handler.set_name(_HANDLER_NAME)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(file_handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return log_file
