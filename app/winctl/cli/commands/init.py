"""Init command implementation.

Creates a manifest.toml file from the apps winget reports as installed.
"""

from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from winctl.cli.runner import capture_snapshot, require_winget
from winctl.core.hosts import current_host
from winctl.core.manifest import ManifestError, manifest_exists, save_manifest
from winctl.core.paths import ensure_config_dir, get_manifest_path
from winctl.core.snapshot import SystemSnapshot
from winctl.models.manifest import AppEntry, AppGroup, Manifest, ManifestMeta
from winctl.utils.formatting import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from winctl.winget.client import WingetClient

app = typer.Typer(
    help="Initialize manifest from installed apps.",
    invoke_without_command=True,
)


def _collect_apps(client: WingetClient) -> list[AppEntry]:
    """Build manifest entries for every exported package.

    The export carries no display names, so the package id is used as
    the name. Scope is taken from the scope listings. Packages listed
    under neither scope, or under both, are left untracked.
    """
    snapshot: SystemSnapshot = capture_snapshot(client)
    entries: list[AppEntry] = []
    for package_id in snapshot.package_ids:
        scope = snapshot.scope_of(package_id)
        entries.append(
            AppEntry(
                name=package_id,
                id=package_id,
                scope=scope.value if scope.is_concrete else "none",
            )
        )
    return entries


def _create_manifest(host: str, apps: list[AppEntry]) -> Manifest:
    """Create a new manifest with one group for this host.

    Args:
        host: Host name the group targets.
        apps: Apps to include.

    Returns:
        New Manifest object.
    """
    now = datetime.now(UTC)
    return Manifest(
        meta=ManifestMeta(version="1.0", created=now, updated=now),
        groups=[AppGroup(name=host.lower(), hosts=[host], apps=apps)],
    )


def _show_manifest_summary(manifest: Manifest, output_path: Path) -> None:
    """Display a summary of the created manifest."""
    group = manifest.groups[0]
    scopes = {"user": 0, "machine": 0, "none": 0}
    for entry in group.apps:
        scopes[entry.scope] += 1

    console.print()
    console.print("[bold]Manifest Summary[/bold]")
    console.print(f"  Host: [info]{escape(', '.join(group.hosts))}[/info]")
    console.print(f"  Output: [muted]{escape(str(output_path))}[/muted]")
    console.print()
    console.print(f"  Total apps: [bold]{len(group.apps)}[/bold]")
    console.print(f"    Machine scope: [app.name]{scopes['machine']}[/]")
    console.print(f"    User scope: [app.name]{scopes['user']}[/]")
    console.print(f"    Untracked scope: [muted]{scopes['none']}[/muted]")
    console.print()


@app.callback(invoke_without_command=True)
def init_manifest(
    ctx: typer.Context,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path for manifest file.",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing manifest without prompting.",
        ),
    ] = False,
    empty: Annotated[
        bool,
        typer.Option(
            "--empty",
            "-e",
            help="Write a manifest with no apps instead of reading winget.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be created without writing files.",
        ),
    ] = False,
) -> None:
    """Initialize a new manifest from installed apps.

    Reads the packages winget can export, with their install scope, and
    writes them into a single group that targets this machine. Edit the
    result to rename apps, mark self-updating apps and share groups
    between machines.

    Examples:
        winctl init                    # Create manifest in default location
        winctl init --output my.toml   # Create manifest at custom path
        winctl init --empty            # Skeleton without apps
        winctl init --dry-run          # Preview without writing
    """
    if ctx.invoked_subcommand is not None:
        return

    output_path = output or get_manifest_path()

    if manifest_exists(output_path):
        if dry_run:
            print_warning(f"Manifest already exists: {output_path}")
            print_info("Would be overwritten with --force.")
        elif not force:
            print_error(f"Manifest already exists: {output_path}")
            print_info("Use --force to overwrite or specify a different path with --output.")
            raise typer.Exit(code=1)
        else:
            print_warning(f"Overwriting existing manifest: {output_path}")

    apps: list[AppEntry] = []
    if not empty:
        client = WingetClient()
        require_winget(client)
        print_info("Reading installed packages from winget...")
        apps = _collect_apps(client)
        if not apps:
            print_warning("winget exported no packages.")

    manifest = _create_manifest(current_host(), apps)
    _show_manifest_summary(manifest, output_path)

    if dry_run:
        print_info("[dry-run] No files were written.")
        return

    if output is None:
        try:
            ensure_config_dir()
        except RuntimeError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

    try:
        saved_path = save_manifest(manifest, output_path)
    except ManifestError as e:
        print_error(f"Failed to save manifest: {e}")
        raise typer.Exit(code=1) from e
    print_success(f"Manifest created: {saved_path}")
