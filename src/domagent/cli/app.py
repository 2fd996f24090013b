"""domagent CLI -- Main Typer entry point.

Registers all subcommands and provides --version / --verbose global options.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console

from domagent import __version__

TAGLINE = "Task strings in, page commands out."

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"domagent v{__version__}", style="bold cyan")
        console.print(f"  {TAGLINE}", style="dim")
        raise typer.Exit()


app = typer.Typer(
    name="domagent",
    help=f"domagent -- {TAGLINE}",
    rich_markup_mode="rich",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show domagent version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
) -> None:
    """domagent -- resolve task strings into element commands and run them in a browser.

    Tasks matching the command grammar (CLICK, TYPE, READ, ...) run directly;
    anything else is interpreted by a language model.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s  %(message)s")


# Each subcommand is a separate module to keep this file lean.

from domagent.cli.run import run  # noqa: E402

app.command(name="run", help="Run a list of tasks against a page.")(run)
