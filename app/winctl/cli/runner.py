"""Shared setup and run loop for reconciliation commands.

Loads the manifest, selects apps for the host, checks winget, captures
the snapshot and drives the Reconciler. Used by the diff and apply commands.
"""

import logging
import subprocess
from pathlib import Path

import typer
from rich.markup import escape

from winctl.cli.display import print_outcome, print_summary
from winctl.core.executor import ActionExecutor
from winctl.core.hosts import current_host, select_apps
from winctl.core.manifest import require_manifest
from winctl.core.reconcile import AppOutcome, Reconciler, ReconcileSummary
from winctl.core.snapshot import InstalledStateResolver, SystemSnapshot
from winctl.models.app import DesiredApp
from winctl.models.manifest import Manifest
from winctl.utils.formatting import console, print_error, print_info, print_warning
from winctl.winget.client import WingetClient, WingetError

logger = logging.getLogger(__name__)


def load_apps(
    manifest_path: Path | None,
    host: str | None,
) -> tuple[Manifest, list[DesiredApp], str]:
    """Load the manifest and select the apps for a host.

    Args:
        manifest_path: Custom manifest path, or None for the default.
        host: Host name override, or None for this machine.

    Returns:
        Tuple of (manifest, selected apps, host name).

    Raises:
        typer.Exit: If the manifest cannot be loaded.
    """
    manifest = require_manifest(manifest_path)
    host_name = host or current_host()
    apps = select_apps(manifest.groups, host_name)
    logger.debug("Selected %d of %d apps for %s", len(apps), manifest.app_count, host_name)
    return manifest, apps, host_name


def require_winget(client: WingetClient) -> None:
    """Exit with an error if winget is not installed.

    Raises:
        typer.Exit: If winget is not on PATH.
    """
    if not client.is_available():
        print_error("winget is not available on this system.")
        print_info("Install 'App Installer' from the Microsoft Store.")
        raise typer.Exit(code=1)


def capture_snapshot(client: WingetClient, show_warnings: bool = True) -> SystemSnapshot:
    """Capture the winget snapshot or exit on a fatal setup error.

    Args:
        client: Winget client to query.
        show_warnings: Print non-fatal capture warnings to stderr.

    Returns:
        The captured snapshot.

    Raises:
        typer.Exit: If the export fails.
    """
    try:
        snapshot = SystemSnapshot.capture(client)
    except (WingetError, OSError, subprocess.SubprocessError) as e:
        print_error(f"Could not read installed packages: {e}")
        raise typer.Exit(code=1) from e

    if show_warnings:
        for warning in snapshot.warnings:
            print_warning(warning)
    return snapshot


def reconcile(
    manifest: Manifest,
    apps: list[DesiredApp],
    *,
    dry_run: bool,
    quiet: bool = False,
) -> tuple[list[AppOutcome], ReconcileSummary]:
    """Run the reconciliation loop, printing each app as it completes.

    Args:
        manifest: Loaded manifest (for settings).
        apps: Apps selected for this host.
        dry_run: Preview only; never change the system.
        quiet: Collect outcomes without printing. Snapshot warnings are
            still returned on the summary.

    Returns:
        Tuple of (outcomes, summary).

    Raises:
        typer.Exit: If winget is missing or the snapshot cannot be captured.
    """
    client = WingetClient(timeout=manifest.settings.timeout)
    require_winget(client)

    if not quiet:
        mode = "Previewing" if dry_run else "Reconciling"
        print_info(f"{mode} {len(apps)} app(s)...")

    snapshot = capture_snapshot(client, show_warnings=not quiet)
    resolver = InstalledStateResolver(client, snapshot)
    executor = ActionExecutor(
        client,
        resolver,
        dry_run=dry_run,
        settle_delay=manifest.settings.settle_delay,
    )
    reconciler = Reconciler(resolver, executor)

    outcomes: list[AppOutcome] = []
    summary = ReconcileSummary(warnings=list(snapshot.warnings))
    for outcome in reconciler.run(apps):
        outcomes.append(outcome)
        summary.add(outcome)
        if not quiet:
            print_outcome(outcome, dry_run)

    if not quiet:
        print_summary(summary, dry_run)
    return outcomes, summary


def no_apps_for_host(host: str) -> None:
    """Report an empty selection."""
    console.print(f"[muted]No apps are declared for host {escape(host)}. Nothing to do.[/]")
