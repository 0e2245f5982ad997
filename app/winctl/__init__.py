"""winctl - Desired-state app reconciliation for Windows with winget."""

__version__ = "0.1.0"
