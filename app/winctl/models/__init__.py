"""Data models for winctl.

This module exports the core data structures used throughout the application.
"""

from winctl.models.action import ActionResult, ActionType, ReconcileAction
from winctl.models.app import AppScope, DesiredApp, InstalledPackage, InstalledScope
from winctl.models.manifest import AppEntry, AppGroup, Manifest, ManifestMeta, Settings

__all__ = [
    "ActionResult",
    "ActionType",
    "AppEntry",
    "AppGroup",
    "AppScope",
    "DesiredApp",
    "InstalledPackage",
    "InstalledScope",
    "Manifest",
    "ManifestMeta",
    "ReconcileAction",
    "Settings",
]
