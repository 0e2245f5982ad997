"""CLI package for winctl.

This package contains the Typer application and all subcommands.
"""

from winctl.cli.main import app

__all__ = ["app"]
