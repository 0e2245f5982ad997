"""Winget integration.

This package wraps the winget CLI and isolates the parsing of its output.
"""

from winctl.winget.client import WingetClient, WingetError
from winctl.winget.errors import describe_exit_code

__all__ = ["WingetClient", "WingetError", "describe_exit_code"]
