"""Color theme for winctl output.

The bundled ``data/theme.toml`` defines every color. A ``theme.toml`` in
the config directory may override any subset of them.
"""

import functools
import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from winctl.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

# Rich style name -> (color field, bold)
_STYLES: dict[str, tuple[str, bool]] = {
    "text": ("text", False),
    "muted": ("muted", False),
    "header": ("header", False),
    "border": ("border", False),
    "success": ("success", False),
    "warning": ("warning", False),
    "error": ("error", True),
    "info": ("info", False),
    # Status labels, one per action type
    "keep": ("keep", False),
    "install": ("install", True),
    "update": ("update", True),
    "change": ("change", True),
    "bold_header": ("header", True),
    "app.name": ("text", True),
    "app.id": ("muted", False),
}


class ThemeColors(BaseModel):
    """Hex colors used by the CLI (#RRGGBB or #RGB)."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    keep: str = "#7f8c8d"
    install: str = "#c1ff62"
    update: str = "#0e8ac8"
    change: str = "#d44ebc"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        """Validate that all color values are valid hex codes."""
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{info.field_name}: color must start with '#'"
            raise ValueError(msg)
        digits = color[1:]
        if len(digits) not in (3, 6):
            msg = f"{info.field_name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        if any(ch not in "0123456789abcdefABCDEF" for ch in digits):
            msg = f"{info.field_name}: invalid hex color '{color}'"
            raise ValueError(msg)
        return color


def get_bundled_theme_path() -> Path:
    """Return the path of the theme shipped in ``winctl.data``."""
    return Path(str(resources.files("winctl.data").joinpath("theme.toml")))


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Read the ``[colors]`` table of a theme file.

    Returns:
        Color name to value mapping (non-string values dropped), or None
        if the file is missing or unreadable.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return None

    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: 'colors' is not a table", path)
        return None
    return {key: value for key, value in colors.items() if isinstance(value, str)}


def load_theme() -> ThemeColors:
    """Load the bundled colors with the user's overrides applied.

    An invalid override file is ignored as a whole and the defaults are
    used instead.
    """
    colors = _load_toml_colors(get_bundled_theme_path())
    if colors is None:
        logger.error("Bundled theme is missing; installation may be corrupted")
        colors = {}

    user_path = get_user_theme_path()
    overrides = _load_toml_colors(user_path)
    if overrides:
        logger.debug("Applying theme overrides from %s", user_path)
        colors = {**colors, **overrides}

    try:
        return ThemeColors(**colors)
    except ValidationError as e:
        logger.warning("Theme validation failed, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme for a set of colors (loaded if not given)."""
    if colors is None:
        colors = load_theme()

    styles: dict[str, str] = {}
    for style, (field, bold) in _STYLES.items():
        color = getattr(colors, field)
        styles[style] = f"bold {color}" if bold else color
    return Theme(styles)


@functools.cache
def get_theme() -> Theme:
    """Return the Rich theme, loading it on first use."""
    return get_rich_theme()
