"""Shared Rich display functions for reconciliation output.

Provides the per-app status line, selected-apps table and run summary
used by the apps, diff and apply commands.
"""

from rich.markup import escape
from rich.table import Table

from winctl.core.reconcile import AppOutcome, ReconcileSummary
from winctl.models.action import ActionType
from winctl.models.app import DesiredApp
from winctl.utils.formatting import console, format_label, print_detail, print_success

# Style name per action type (see core/theme.py)
_ACTION_STYLES: dict[ActionType, str] = {
    ActionType.KEEP: "keep",
    ActionType.INSTALL: "install",
    ActionType.UPGRADE: "update",
    ActionType.CHANGE_SCOPE: "change",
}


def format_outcome_line(outcome: AppOutcome) -> str:
    """Format the single status line for an app.

    Args:
        outcome: The app's outcome.

    Returns:
        Rich markup line: label, name, id and annotation.
    """
    app = outcome.app
    name = f"[app.name]{escape(app.name)}[/] [app.id]({escape(app.package_id)})[/]"

    if outcome.action is None:
        return f"{format_label('ERROR', 'error')} {name}"

    action = outcome.action
    label = format_label(action.action_type.label, _ACTION_STYLES[action.action_type])
    return f"{label} {name} [muted]{escape(action.description)}[/]"


def print_outcome(outcome: AppOutcome, dry_run: bool) -> None:
    """Print an app's status line plus its execution result or error.

    Args:
        outcome: The app's outcome.
        dry_run: Whether the run is a preview (execution details hidden).
    """
    console.print(format_outcome_line(outcome))

    error = outcome.error_message
    if error is not None:
        print_detail(error, "error")
    elif outcome.result is not None and not dry_run and outcome.result.message:
        print_detail(outcome.result.message, "success")


def create_apps_table(apps: list[DesiredApp], host: str) -> Table:
    """Create a Rich table listing the apps selected for a host.

    Args:
        apps: Selected apps.
        host: Host the apps were selected for.

    Returns:
        Rich Table configured for app display.
    """
    table = Table(
        title=f"Apps for {escape(host)}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Name", no_wrap=True)
    table.add_column("Id", style="muted", no_wrap=True)
    table.add_column("Scope", width=8)
    table.add_column("Self-updating", justify="center")
    table.add_column("Hosts", style="muted")

    for app in apps:
        table.add_row(
            f"[app.name]{escape(app.name)}[/]",
            escape(app.package_id),
            app.scope.value,
            "yes" if app.self_updating else "",
            escape(", ".join(sorted(app.host_patterns))),
        )

    return table


def print_summary(summary: ReconcileSummary, dry_run: bool) -> None:
    """Print the tally that ends every run.

    Args:
        summary: Counts collected during the run.
        dry_run: Whether the run was a preview.
    """
    counts = summary.counts
    parts = [
        f"[keep]{counts[ActionType.KEEP]} keep[/]",
        f"[install]{counts[ActionType.INSTALL]} install[/]",
        f"[update]{counts[ActionType.UPGRADE]} update[/]",
        f"[change]{counts[ActionType.CHANGE_SCOPE]} change[/]",
    ]
    error_style = "error" if summary.has_errors else "muted"
    parts.append(f"[{error_style}]{summary.errors} error(s)[/]")
    console.print(f"\nSummary: {', '.join(parts)}")

    if not summary.has_changes:
        print_success("No changes. All apps are in the desired state.")
    elif dry_run:
        console.print(f"[info]{summary.changes} change(s) found.[/] Run 'winctl apply' to apply.")
    else:
        console.print(f"[info]{summary.changes} change(s) applied.[/]")
