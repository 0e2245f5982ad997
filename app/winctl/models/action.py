"""Action models for app reconciliation.

This module defines data structures for the per-app reconciliation
decision (install, upgrade, change scope, keep) and its execution result.
"""

from dataclasses import dataclass, field
from enum import Enum

from winctl.models.app import AppScope, DesiredApp, InstalledPackage, InstalledScope


class ActionType(Enum):
    """Type of reconciliation action.

    Attributes:
        INSTALL: App is not installed.
        UPGRADE: App is installed and winget offers a newer version.
        CHANGE_SCOPE: App is installed under the wrong scope and must be
            reinstalled.
        KEEP: Nothing to do.
    """

    INSTALL = "install"
    UPGRADE = "upgrade"
    CHANGE_SCOPE = "change_scope"
    KEEP = "keep"

    @property
    def label(self) -> str:
        """Stable one-word status label used in reports."""
        return _LABELS[self]


_LABELS: dict[ActionType, str] = {
    ActionType.INSTALL: "INSTALL",
    ActionType.UPGRADE: "UPDATE",
    ActionType.CHANGE_SCOPE: "CHANGE",
    ActionType.KEEP: "KEEP",
}


@dataclass(frozen=True, slots=True)
class ReconcileAction:
    """The single decision made for one desired app in one run.

    Attributes:
        action_type: Which kind of action this is.
        app: The desired app the action is for.
        installed: What winget reported for the app.
        description: Human-readable scope/version annotation.
        available_version: Version winget would upgrade to, if any.
        from_scope: Current scope (CHANGE_SCOPE only).
        to_scope: Target scope (INSTALL and CHANGE_SCOPE).
    """

    action_type: ActionType
    app: DesiredApp
    installed: InstalledPackage | None = None
    description: str = ""
    available_version: str | None = None
    from_scope: InstalledScope | None = None
    to_scope: AppScope | None = None

    @property
    def package_id(self) -> str:
        """Winget id of the app."""
        return self.app.package_id

    @property
    def is_change(self) -> bool:
        """Check if this action modifies the system."""
        return self.action_type != ActionType.KEEP

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, object] = {
            "name": self.app.name,
            "id": self.app.package_id,
            "action": self.action_type.value,
            "description": self.description,
            "desired_scope": self.app.scope.value,
        }
        if self.installed is not None and self.installed.installed:
            result["installed_version"] = self.installed.version
            result["installed_scope"] = self.installed.scope.value
        if self.available_version is not None:
            result["available_version"] = self.available_version
        return result


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Result of executing a reconciliation action.

    Attributes:
        action: The action that was executed.
        success: Whether the action completed successfully.
        message: Optional success message or additional information.
        error: Optional error message if the action failed.
        steps: Winget steps that were run, in order (e.g. 'uninstall').
    """

    action: ReconcileAction
    success: bool
    message: str | None = None
    error: str | None = None
    steps: tuple[str, ...] = field(default_factory=tuple)

    @property
    def failed(self) -> bool:
        """Check if the action failed."""
        return not self.success


def _version_arrow(current: str | None, available: str) -> str:
    return f"{current or 'unknown'} -> {available}"


def create_install_action(app: DesiredApp, installed: InstalledPackage) -> ReconcileAction:
    """Create an install action for an app that is not installed.

    Args:
        app: The desired app.
        installed: The not-installed record for the app.

    Returns:
        ReconcileAction configured for installation.
    """
    scope_text = app.scope.value if app.scope.is_concrete else "default"
    return ReconcileAction(
        action_type=ActionType.INSTALL,
        app=app,
        installed=installed,
        description=f"scope: {scope_text}",
        to_scope=app.scope,
    )


def create_upgrade_action(
    app: DesiredApp,
    installed: InstalledPackage,
    available_version: str,
) -> ReconcileAction:
    """Create an upgrade action.

    Args:
        app: The desired app.
        installed: The installed record.
        available_version: Version winget offers.

    Returns:
        ReconcileAction configured for upgrade.
    """
    return ReconcileAction(
        action_type=ActionType.UPGRADE,
        app=app,
        installed=installed,
        description=_version_arrow(installed.version, available_version),
        available_version=available_version,
    )


def create_change_scope_action(
    app: DesiredApp,
    installed: InstalledPackage,
    available_version: str | None = None,
) -> ReconcileAction:
    """Create a scope change action (uninstall, then reinstall).

    Args:
        app: The desired app, with a concrete scope.
        installed: The installed record, with a concrete scope.
        available_version: Upgrade carried along with the reinstall, if any.

    Returns:
        ReconcileAction configured for a scope change.
    """
    description = f"{installed.scope.value} -> {app.scope.value}"
    if available_version is not None:
        description += f", {_version_arrow(installed.version, available_version)}"
    return ReconcileAction(
        action_type=ActionType.CHANGE_SCOPE,
        app=app,
        installed=installed,
        description=description,
        available_version=available_version,
        from_scope=installed.scope,
        to_scope=app.scope,
    )


def create_keep_action(
    app: DesiredApp,
    installed: InstalledPackage,
    note: str,
    available_version: str | None = None,
) -> ReconcileAction:
    """Create a keep action.

    Args:
        app: The desired app.
        installed: The installed record.
        note: Why nothing is done (e.g. 'up to date', 'self-updating').
        available_version: Version winget offers, when it is deliberately ignored.

    Returns:
        ReconcileAction that leaves the app alone.
    """
    if available_version is not None:
        description = f"{_version_arrow(installed.version, available_version)} ({note})"
    else:
        description = f"{installed.version_display} ({installed.scope.value}, {note})"
    return ReconcileAction(
        action_type=ActionType.KEEP,
        app=app,
        installed=installed,
        description=description,
        available_version=available_version,
    )
