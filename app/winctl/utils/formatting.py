"""Rich console output helpers.

Normal output goes to stdout; warnings and errors go to stderr so that
``winctl diff --json`` stays machine-readable. Messages passed to the
print helpers are plain text; markup in them is shown literally.
"""

import sys

from rich.console import Console
from rich.markup import escape

from winctl.core.theme import get_theme

# Width of the status label column ("INSTALL " and friends)
LABEL_WIDTH = 8


def _color_system() -> str | None:
    # Full hex colors on a terminal; let Rich decide otherwise
    return "truecolor" if sys.stdout.isatty() else None


console = Console(theme=get_theme(), color_system=_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_color_system())


def format_label(label: str, style: str) -> str:
    """Return a padded status label with Rich markup."""
    return f"[{style}]{label.ljust(LABEL_WIDTH)}[/]"


def print_detail(message: str, style: str = "muted") -> None:
    """Print a line indented under the preceding status line."""
    console.print(f"{' ' * (LABEL_WIDTH + 1)}[{style}]{escape(message)}[/]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{escape(message)}[/]")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{escape(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning to stderr."""
    err_console.print(f"[warning]Warning:[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error to stderr."""
    err_console.print(f"[error]Error:[/] {escape(message)}")
