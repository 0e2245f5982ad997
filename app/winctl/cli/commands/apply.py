"""Apply command implementation.

Reconciles the apps declared for this host: installs missing apps,
upgrades outdated ones and moves apps to their declared scope.
"""

from pathlib import Path
from typing import Annotated

import typer

from winctl.cli.runner import load_apps, no_apps_for_host, reconcile

app = typer.Typer(
    help="Apply manifest to this machine.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def apply_manifest(
    ctx: typer.Context,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be done without making changes.",
        ),
    ] = False,
    host: Annotated[
        str | None,
        typer.Option(
            "--host",
            "-H",
            help="Reconcile the apps declared for this host name instead of the local one.",
        ),
    ] = None,
    manifest_path: Annotated[
        Path | None,
        typer.Option(
            "--manifest",
            "-m",
            help="Path to manifest file.",
        ),
    ] = None,
) -> None:
    """Apply manifest to this machine.

    Every app selected for the host gets one status line:

      KEEP     already in the desired state (or deliberately left alone)
      INSTALL  not installed
      UPDATE   a newer version is available
      CHANGE   installed under the wrong scope; uninstalled and reinstalled

    Apps are handled one at a time. A failure for one app is reported
    and the run continues with the next.

    Exit codes: 0 no changes, 3 changes applied, 1 errors.

    Examples:
        winctl apply --dry-run         # Preview changes
        winctl apply                   # Apply changes
        winctl apply --host PC-OFFICE  # Use another host's app selection
    """
    if ctx.invoked_subcommand is not None:
        return

    manifest, apps, host_name = load_apps(manifest_path, host)
    if not apps:
        no_apps_for_host(host_name)
        return

    _, summary = reconcile(manifest, apps, dry_run=dry_run)

    if summary.exit_code != 0:
        raise typer.Exit(code=summary.exit_code)
