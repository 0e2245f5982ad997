"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from winctl import __version__
from winctl.cli.commands import apply, apps, diff, init
from winctl.utils.formatting import err_console

app = typer.Typer(
    name="winctl",
    help="Declarative app setup for Windows with winget.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"winctl version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log every winget call and decision.",
        ),
    ] = False,
) -> None:
    """winctl - Declarative app setup for Windows with winget.

    Declare which apps each machine should have, in which scope, and
    let winctl install, upgrade and re-scope them to match.
    """
    _configure_logging(verbose)


# Register commands
app.add_typer(init.app, name="init")
app.add_typer(apps.app, name="apps")
app.add_typer(diff.app, name="diff")
app.add_typer(apply.app, name="apply")


if __name__ == "__main__":
    app()
