"""User configuration loaded from a JSON file.

The file lives in the user's config directory (or wherever the
TILEVI_CONFIG environment variable points). It is read once at startup
and never written back. Missing files, unreadable files and invalid
values are logged and fall back to defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants
from .errors import ConfigError

logger = logging.getLogger(__name__)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class Settings:
    bsp_depth: int = EditorConstants.BSP_DEPTH
    line_numbers: bool = True
    log_level: str = EditorConstants.DEFAULT_LOG_LEVEL
    log_file: Optional[str] = None


def config_path() -> Path:
    """Location of the configuration file."""
    override = os.environ.get(EditorConstants.CONFIG_ENV_VAR)
    if override:
        return Path(override)
    config_dir = Path(platformdirs.user_config_dir(EditorConstants.APP_NAME, EditorConstants.APP_AUTHOR))
    return config_dir / EditorConstants.CONFIG_FILENAME


def validate_setting(key: str, value: Any) -> Any:
    """Return the normalized value for key.

    Raises:
        ConfigError: if the value has the wrong type or is out of range
    """
    if key == 'bsp_depth':
        # bool is an int subclass; reject it explicitly
        if not isinstance(value, int) or isinstance(value, bool):
            raise ConfigError("bsp_depth must be an integer", {"value": value})
        if not 0 <= value <= EditorConstants.MAX_BSP_DEPTH:
            raise ConfigError(f"bsp_depth must be between 0 and {EditorConstants.MAX_BSP_DEPTH}",
                              {"value": value})
        return value

    if key == 'line_numbers':
        if not isinstance(value, bool):
            raise ConfigError("line_numbers must be true or false", {"value": value})
        return value

    if key == 'log_level':
        if not isinstance(value, str) or value.upper() not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}", {"value": value})
        return value.upper()

    if key == 'log_file':
        if value is not None and not isinstance(value, str):
            raise ConfigError("log_file must be a path or null", {"value": value})
        return value

    raise ConfigError("unknown setting", {"key": key})


def settings_from_dict(data: Dict[str, Any]) -> Settings:
    """Build Settings from raw JSON data, keeping defaults for bad values."""
    settings = Settings()
    for key, value in data.items():
        try:
            setattr(settings, key, validate_setting(key, value))
        except ConfigError as e:
            logger.warning(f"Ignoring setting {key!r}: {e}")
    return settings


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from path (default: config_path())."""
    path = path or config_path()
    if not path.exists():
        logger.debug(f"No config file at {path}, using defaults")
        return Settings()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not load settings from {path}: {e}")
        return Settings()

    if not isinstance(data, dict):
        logger.warning("Settings file has invalid format (not a dict), ignoring")
        return Settings()

    return settings_from_dict(data)
