"""Apps command implementation.

Lists the apps the manifest declares for a host.
"""

from pathlib import Path
from typing import Annotated

import typer

from winctl.cli.display import create_apps_table
from winctl.cli.runner import load_apps, no_apps_for_host
from winctl.utils.formatting import console

app = typer.Typer(
    help="List the apps declared for a host.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def list_apps(
    ctx: typer.Context,
    host: Annotated[
        str | None,
        typer.Option(
            "--host",
            "-H",
            help="Host name to select apps for (default: this machine).",
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
    """List the apps declared for a host.

    Apps from every group whose host patterns match are included.

    Examples:
        winctl apps                    # Apps for this machine
        winctl apps --host PC-OFFICE   # Apps for another machine
    """
    if ctx.invoked_subcommand is not None:
        return

    _, apps, host_name = load_apps(manifest_path, host)
    if not apps:
        no_apps_for_host(host_name)
        return

    console.print(create_apps_table(apps, host_name))
    console.print(f"\n[muted]{len(apps)} app(s)[/]")
