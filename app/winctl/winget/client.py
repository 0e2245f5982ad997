"""Thin wrapper around the winget CLI.

Read-only queries return parsed data; mutating calls return the raw
CommandResult so callers can decode the exit code.
"""

import logging
import tempfile
from pathlib import Path

from winctl.models.app import AppScope, InstalledScope
from winctl.utils.shell import CommandResult, command_exists, run_command
from winctl.winget.errors import format_exit_code, is_no_applications_found
from winctl.winget.parsers import (
    TableRow,
    find_package,
    parse_export,
    parse_list_ids,
    parse_upgrades,
)

logger = logging.getLogger(__name__)

# Flags that keep winget from prompting on a fresh machine
_NON_INTERACTIVE = ["--accept-source-agreements", "--disable-interactivity"]


class WingetError(RuntimeError):
    """Raised when a winget query fails in a way that is not 'nothing found'."""


class WingetClient:
    """Runs winget subcommands and parses their output.

    Attributes:
        executable: Name or path of the winget executable.
        timeout: Timeout in seconds for install, upgrade and uninstall calls.

    Example:
        >>> client = WingetClient()
        >>> if client.is_available():
        ...     versions = client.export()
    """

    # Timeout for list/export queries
    _QUERY_TIMEOUT: float = 120.0

    def __init__(self, executable: str = "winget", timeout: float = 600.0) -> None:
        """Initialize the client.

        Args:
            executable: Name or path of the winget executable.
            timeout: Timeout in seconds for mutating calls.
        """
        self.executable = executable
        self.timeout = timeout

    def is_available(self) -> bool:
        """Check if winget is available on PATH."""
        return command_exists(self.executable)

    def _run(self, args: list[str], timeout: float) -> CommandResult:
        command = [self.executable, *args]
        logger.debug("Running: %s", " ".join(command))
        return run_command(command, timeout=timeout)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def export(self) -> dict[str, str | None]:
        """Export all installed packages with their versions.

        Returns:
            Mapping of package id to installed version.

        Raises:
            WingetError: If the export fails or produces an unreadable file.
        """
        with tempfile.TemporaryDirectory(prefix="winctl-") as tmp_dir:
            export_path = Path(tmp_dir) / "export.json"
            result = self._run(
                ["export", "--output", str(export_path), "--include-versions", *_NON_INTERACTIVE],
                timeout=self._QUERY_TIMEOUT,
            )
            if not result.success:
                msg = f"winget export failed: {format_exit_code(result.returncode)}"
                raise WingetError(msg)

            try:
                text = export_path.read_text(encoding="utf-8-sig")
            except OSError as e:
                msg = f"winget export produced no readable file: {e}"
                raise WingetError(msg) from e

        try:
            return parse_export(text)
        except ValueError as e:
            raise WingetError(str(e)) from e

    def list_scope_ids(self, scope: InstalledScope) -> set[str]:
        """List ids of packages installed under one scope.

        Args:
            scope: USER or MACHINE.

        Returns:
            Set of package ids; empty when winget finds nothing.

        Raises:
            WingetError: If the listing fails.
        """
        result = self._run(
            ["list", "--scope", scope.value, *_NON_INTERACTIVE],
            timeout=self._QUERY_TIMEOUT,
        )
        if is_no_applications_found(result.returncode):
            return set()
        if not result.success:
            msg = f"winget list --scope {scope.value} failed: {format_exit_code(result.returncode)}"
            raise WingetError(msg)
        return parse_list_ids(result.stdout)

    def list_upgrades(self) -> dict[str, str]:
        """List packages with an available upgrade.

        Returns:
            Mapping of package id to available version.

        Raises:
            WingetError: If the listing fails.
        """
        result = self._run(["upgrade", *_NON_INTERACTIVE], timeout=self._QUERY_TIMEOUT)
        if is_no_applications_found(result.returncode):
            return {}
        if not result.success:
            msg = f"winget upgrade listing failed: {format_exit_code(result.returncode)}"
            raise WingetError(msg)
        return parse_upgrades(result.stdout)

    def find_installed(self, package_id: str) -> TableRow | None:
        """Look up a single package with an exact id query.

        Args:
            package_id: Package id to look up.

        Returns:
            The matching row, or None if the package is not installed.

        Raises:
            WingetError: If the query fails for another reason.
        """
        result = self._run(
            ["list", "--id", package_id, "--exact", *_NON_INTERACTIVE],
            timeout=self._QUERY_TIMEOUT,
        )
        if is_no_applications_found(result.returncode):
            return None
        if not result.success:
            msg = f"winget list --id {package_id} failed: {format_exit_code(result.returncode)}"
            raise WingetError(msg)
        return find_package(result.stdout, package_id)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def install(self, package_id: str, scope: AppScope = AppScope.NONE) -> CommandResult:
        """Install a package, optionally pinned to a scope."""
        args = ["install", "--id", package_id, "--exact", "--silent", "--accept-package-agreements"]
        if scope.is_concrete:
            args.extend(["--scope", scope.value])
        logger.info("Installing %s (scope: %s)", package_id, scope.value)
        return self._run([*args, *_NON_INTERACTIVE], timeout=self.timeout)

    def upgrade(self, package_id: str) -> CommandResult:
        """Upgrade an installed package to the latest version."""
        args = ["upgrade", "--id", package_id, "--exact", "--silent", "--accept-package-agreements"]
        logger.info("Upgrading %s", package_id)
        return self._run([*args, *_NON_INTERACTIVE], timeout=self.timeout)

    def uninstall(self, package_id: str, scope: InstalledScope | None = None) -> CommandResult:
        """Uninstall a package, optionally from one scope only."""
        args = ["uninstall", "--id", package_id, "--exact", "--silent"]
        if scope is not None and scope.is_concrete:
            args.extend(["--scope", scope.value])
        logger.info("Uninstalling %s (scope: %s)", package_id, scope.value if scope else "any")
        return self._run([*args, *_NON_INTERACTIVE], timeout=self.timeout)
