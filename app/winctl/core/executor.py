"""Action execution.

Turns a ReconcileAction into winget calls. In dry-run mode no winget
subcommand that changes the system is ever run.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from winctl.models.action import ActionResult, ActionType, ReconcileAction
from winctl.models.app import AppScope
from winctl.winget.errors import format_exit_code

if TYPE_CHECKING:
    from winctl.core.snapshot import InstalledStateResolver
    from winctl.utils.shell import CommandResult
    from winctl.winget.client import WingetClient

logger = logging.getLogger(__name__)

_DRY_RUN_VERBS: dict[ActionType, str] = {
    ActionType.INSTALL: "install",
    ActionType.UPGRADE: "upgrade",
    ActionType.CHANGE_SCOPE: "reinstall with new scope",
}


class ActionExecutor:
    """Executes reconciliation actions through winget.

    Args:
        client: Winget client used for install, upgrade and uninstall.
        resolver: Resolver used to confirm removal during a scope change.
        dry_run: If True, only report what would be done.
        settle_delay: Seconds to wait between uninstall and the removal
            check of a scope change.
        sleep: Sleep function, replaceable in tests.

    Example:
        >>> executor = ActionExecutor(client, resolver, dry_run=True)
        >>> executor.execute(action).message
        'Dry-run: would install'
    """

    def __init__(
        self,
        client: WingetClient,
        resolver: InstalledStateResolver,
        *,
        dry_run: bool = False,
        settle_delay: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._resolver = resolver
        self._dry_run = dry_run
        self.settle_delay = settle_delay
        self._sleep = sleep

    def execute(self, action: ReconcileAction) -> ActionResult:
        """Execute a single action.

        Args:
            action: The action to execute.

        Returns:
            ActionResult describing the outcome. Winget failures are
            returned as failed results, not raised.

        Raises:
            WingetError: If the removal check of a scope change fails.
            OSError: If winget cannot be started.
            subprocess.TimeoutExpired: If a winget call times out.
        """
        if action.action_type == ActionType.KEEP:
            return ActionResult(action=action, success=True, message="Nothing to do")

        if self._dry_run:
            verb = _DRY_RUN_VERBS[action.action_type]
            logger.info("Dry-run: Would %s %s", verb, action.package_id)
            return ActionResult(action=action, success=True, message=f"Dry-run: would {verb}")

        if action.action_type == ActionType.INSTALL:
            return self._install(action)
        if action.action_type == ActionType.UPGRADE:
            return self._upgrade(action)
        return self._change_scope(action)

    def _install(self, action: ReconcileAction) -> ActionResult:
        result = self._client.install(action.package_id, action.to_scope or AppScope.NONE)
        return self._create_result(action, result, ("install",), "Installed")

    def _upgrade(self, action: ReconcileAction) -> ActionResult:
        result = self._client.upgrade(action.package_id)
        return self._create_result(action, result, ("upgrade",), "Upgraded")

    def _change_scope(self, action: ReconcileAction) -> ActionResult:
        """Uninstall from the current scope, confirm removal, reinstall.

        The install step only runs once the package is confirmed gone,
        so a failed uninstall never leaves two registrations behind.
        """
        package_id = action.package_id

        uninstall = self._client.uninstall(package_id, action.from_scope)
        if not uninstall.success:
            return self._create_result(action, uninstall, ("uninstall",), "")

        logger.debug("Waiting %.1fs for uninstall of %s to settle", self.settle_delay, package_id)
        self._sleep(self.settle_delay)

        state = self._resolver.query(package_id)
        if state.installed:
            logger.warning("%s still detected after uninstall, not reinstalling", package_id)
            return ActionResult(
                action=action,
                success=False,
                error="Package still detected after uninstall; install skipped",
                steps=("uninstall", "verify"),
            )

        install = self._client.install(package_id, action.to_scope or AppScope.NONE)
        return self._create_result(
            action,
            install,
            ("uninstall", "verify", "install"),
            f"Reinstalled with scope {action.to_scope.value if action.to_scope else 'default'}",
        )

    def _create_result(
        self,
        action: ReconcileAction,
        result: CommandResult,
        steps: tuple[str, ...],
        message: str,
    ) -> ActionResult:
        """Create an ActionResult from a CommandResult.

        Args:
            action: The action that was executed.
            result: Result of the last winget call.
            steps: Steps that ran, in order.
            message: Message to use on success.

        Returns:
            ActionResult with the decoded exit code on failure.
        """
        if result.success:
            return ActionResult(action=action, success=True, message=message, steps=steps)

        logger.debug("winget %s output for %s:\n%s", steps[-1], action.package_id, result.output)
        return ActionResult(
            action=action,
            success=False,
            error=f"winget {steps[-1]} failed: {format_exit_code(result.returncode)}",
            steps=steps,
        )
