"""Logging setup.

The alternate screen owns the terminal, so log records go to a file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import platformdirs

from .constants import EditorConstants


def default_log_file() -> Path:
    log_dir = Path(platformdirs.user_log_dir(EditorConstants.APP_NAME, EditorConstants.APP_AUTHOR))
    return log_dir / EditorConstants.LOG_FILENAME


def setup_logging(level: str = EditorConstants.DEFAULT_LOG_LEVEL,
                  log_file: Optional[str] = None) -> Optional[Path]:
    """Install a file handler on the package logger.

    Returns the log file path, or None if the file could not be opened
    (logging is then left unconfigured).
    """
    path = Path(log_file) if log_file else default_log_file()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding='utf-8')
    except OSError:
        return None

    handler.setFormatter(logging.Formatter(EditorConstants.LOG_FORMAT))
    package_logger = logging.getLogger('tilevi')
    for old in list(package_logger.handlers):
        package_logger.removeHandler(old)
        old.close()
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    package_logger.propagate = False
    return path
