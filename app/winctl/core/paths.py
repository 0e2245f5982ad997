"""Locations of winctl's configuration files.

On Windows everything lives in ``%APPDATA%\\winctl``. Other platforms,
used for development and tests, fall back to ``$XDG_CONFIG_HOME/winctl``
or ``~/.config/winctl``.
"""

import os
import sys
from pathlib import Path

APP_NAME = "winctl"

MANIFEST_FILENAME = "manifest.toml"
THEME_FILENAME = "theme.toml"


def get_config_dir() -> Path:
    """Return the configuration directory (not created)."""
    appdata = os.environ.get("APPDATA")
    if sys.platform == "win32" and appdata:
        return Path(appdata) / APP_NAME

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg_config) if xdg_config else Path.home() / ".config"
    return base / APP_NAME


def get_manifest_path() -> Path:
    """Return the default manifest location."""
    return get_config_dir() / MANIFEST_FILENAME


def get_user_theme_path() -> Path:
    """Return the location of the optional theme override file."""
    return get_config_dir() / THEME_FILENAME


def ensure_config_dir() -> Path:
    """Create the configuration directory if needed and return it.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    path = get_config_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        reason = "Permission denied" if isinstance(e, PermissionError) else str(e)
        msg = f"Cannot create config directory {path}: {reason}"
        raise RuntimeError(msg) from e
    return path
