"""CLI commands for winctl.

This package contains all subcommand implementations.
"""

from winctl.cli.commands import apply, apps, diff, init

__all__ = ["apply", "apps", "diff", "init"]
