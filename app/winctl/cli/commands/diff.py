"""Diff command implementation.

Previews what apply would do without changing anything.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from winctl.cli.runner import load_apps, no_apps_for_host, reconcile
from winctl.core.reconcile import AppOutcome, ReconcileSummary
from winctl.utils.formatting import console

app = typer.Typer(
    help="Compare manifest with installed apps.",
    invoke_without_command=True,
)


def _outcome_to_dict(outcome: AppOutcome) -> dict[str, object]:
    """Convert an outcome to a dictionary for JSON output."""
    if outcome.action is not None:
        data = outcome.action.to_dict()
    else:
        data = {"name": outcome.app.name, "id": outcome.app.package_id, "action": "error"}
    error = outcome.error_message
    if error is not None:
        data["error"] = error
    return data


def _to_json(host: str, outcomes: list[AppOutcome], summary: ReconcileSummary) -> str:
    return json.dumps(
        {
            "host": host,
            "in_sync": not summary.has_changes,
            "summary": summary.to_dict(),
            "warnings": summary.warnings,
            "apps": [_outcome_to_dict(o) for o in outcomes],
        }
    )


@app.callback(invoke_without_command=True)
def diff_apps(
    ctx: typer.Context,
    host: Annotated[
        str | None,
        typer.Option(
            "--host",
            "-H",
            help="Compare the apps declared for this host name instead of the local one.",
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
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Compare manifest with installed apps.

    Shows the action apply would take for every app selected for the
    host, without running any install, upgrade or uninstall.

    Exit codes: 0 no changes, 3 changes found, 1 errors.

    Examples:
        winctl diff                    # Show planned actions
        winctl diff --json             # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    manifest, apps, host_name = load_apps(manifest_path, host)
    if not apps:
        if json_output:
            console.print_json(
                json.dumps({"host": host_name, "in_sync": True, "warnings": [], "apps": []})
            )
        else:
            no_apps_for_host(host_name)
        return

    outcomes, summary = reconcile(manifest, apps, dry_run=True, quiet=json_output)

    if json_output:
        console.print_json(_to_json(host_name, outcomes, summary))

    if summary.exit_code != 0:
        raise typer.Exit(code=summary.exit_code)
