"""Reconciliation of desired apps against installed state.

This module holds the pure decision function that picks one action per
app, and the sequential loop that resolves, decides and executes apps
one at a time behind a per-app failure boundary.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from winctl.models.action import (
    ActionResult,
    ActionType,
    ReconcileAction,
    create_change_scope_action,
    create_install_action,
    create_keep_action,
    create_upgrade_action,
)
from winctl.models.app import DesiredApp, InstalledPackage, InstalledScope
from winctl.winget.client import WingetError

if TYPE_CHECKING:
    from winctl.core.executor import ActionExecutor
    from winctl.core.snapshot import InstalledStateResolver

logger = logging.getLogger(__name__)

# Process exit codes
EXIT_NO_CHANGES = 0
EXIT_ERRORS = 1
EXIT_CHANGES = 3


def decide(
    app: DesiredApp,
    installed: InstalledPackage,
    available_version: str | None,
) -> ReconcileAction:
    """Pick the action for one app. The first matching case wins.

    1. Not installed: install at the desired scope.
    2. Installed, scope unknown: keep. Reinstalling a package whose scope
       cannot be seen could remove something winctl never installed.
    3. Installed, but not registered at the desired concrete scope: change
       scope, carrying an upgrade unless the app updates itself. A package
       registered under both scopes already has the desired one.
    4. Upgrade available, not self-updating: upgrade.
    5. Upgrade available, self-updating: keep.
    6. Otherwise: keep.

    Args:
        app: The desired app.
        installed: What winget reports for the app.
        available_version: Upgrade version, or None if up to date.

    Returns:
        Exactly one ReconcileAction.
    """
    if not installed.installed:
        return create_install_action(app, installed)

    if installed.scope == InstalledScope.UNKNOWN:
        return create_keep_action(app, installed, "scope unknown")

    if (
        app.scope.is_concrete
        and installed.scope is not InstalledScope.NONE
        and not installed.scope.includes(app.scope)
    ):
        carried = None if app.self_updating else available_version
        return create_change_scope_action(app, installed, carried)

    if available_version is not None:
        if app.self_updating:
            return create_keep_action(app, installed, "self-updating", available_version)
        return create_upgrade_action(app, installed, available_version)

    return create_keep_action(app, installed, "up to date")


@dataclass(frozen=True, slots=True)
class AppOutcome:
    """Everything that happened to one app in a run.

    Attributes:
        app: The desired app.
        action: The decided action (None if resolving the app failed).
        result: Execution result (None if execution did not happen).
        error: Error caught by the per-app failure boundary.
    """

    app: DesiredApp
    action: ReconcileAction | None = None
    result: ActionResult | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Check if the app ended in an error."""
        return self.error is not None or (self.result is not None and self.result.failed)

    @property
    def error_message(self) -> str | None:
        """The error to report for this app, if any."""
        if self.error is not None:
            return self.error
        if self.result is not None and self.result.failed:
            return self.result.error or "Unknown error"
        return None


@dataclass(slots=True)
class ReconcileSummary:
    """Running tally of a reconciliation run.

    Attributes:
        counts: Apps per decided action type.
        errors: Apps that ended in an error.
        warnings: Non-fatal problems hit while capturing the snapshot.
    """

    counts: dict[ActionType, int] = field(default_factory=lambda: dict.fromkeys(ActionType, 0))
    errors: int = 0
    warnings: list[str] = field(default_factory=list)

    def add(self, outcome: AppOutcome) -> None:
        """Count one app outcome."""
        if outcome.action is not None:
            self.counts[outcome.action.action_type] += 1
        if outcome.failed:
            self.errors += 1

    @property
    def total(self) -> int:
        """Number of apps with a decided action."""
        return sum(self.counts.values())

    @property
    def changes(self) -> int:
        """Number of non-keep actions."""
        return self.total - self.counts[ActionType.KEEP]

    @property
    def has_changes(self) -> bool:
        """Check if any action would change the system."""
        return self.changes > 0

    @property
    def has_errors(self) -> bool:
        """Check if any app ended in an error."""
        return self.errors > 0

    @property
    def exit_code(self) -> int:
        """Process exit code: errors beat changes beat no changes."""
        if self.has_errors:
            return EXIT_ERRORS
        if self.has_changes:
            return EXIT_CHANGES
        return EXIT_NO_CHANGES

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return {
            **{action_type.value: count for action_type, count in self.counts.items()},
            "errors": self.errors,
            "changes": self.changes,
        }


class Reconciler:
    """Runs the resolve, decide, execute loop over a list of apps.

    Apps are handled strictly one after another. Winget failures and
    exceptions for one app are caught, reported in its outcome, and the
    loop moves on to the next app.

    Example:
        >>> reconciler = Reconciler(resolver, executor)
        >>> for outcome in reconciler.run(apps):
        ...     print(outcome.app.name, outcome.action.action_type)
    """

    def __init__(self, resolver: InstalledStateResolver, executor: ActionExecutor) -> None:
        self._resolver = resolver
        self._executor = executor

    def plan(self, app: DesiredApp) -> ReconcileAction:
        """Resolve an app's state and decide its action.

        Raises:
            WingetError: If the targeted fallback query fails.
        """
        installed = self._resolver.resolve(app.package_id)
        available = self._resolver.available_version(app.package_id)
        return decide(app, installed, available)

    def run(self, apps: Iterable[DesiredApp]) -> Iterator[AppOutcome]:
        """Reconcile apps one at a time.

        Args:
            apps: Apps selected for this host.

        Yields:
            One AppOutcome per app, as soon as the app is done.
        """
        for app in apps:
            try:
                action = self.plan(app)
            except (WingetError, OSError, subprocess.SubprocessError) as e:
                logger.warning("Failed to resolve %s: %s", app.package_id, e)
                yield AppOutcome(app=app, error=f"Could not determine state: {e}")
                continue

            if not action.is_change:
                yield AppOutcome(app=app, action=action)
                continue

            try:
                result = self._executor.execute(action)
            except (WingetError, OSError, subprocess.SubprocessError) as e:
                logger.warning("Failed to %s %s: %s", action.action_type.value, app.package_id, e)
                yield AppOutcome(app=app, action=action, error=str(e))
                continue

            if result.failed:
                logger.warning(
                    "%s for %s failed: %s", action.action_type.value, app.package_id, result.error
                )
            yield AppOutcome(app=app, action=action, result=result)
