"""SETT Pro command-line interface.

Entry point for the ``sett`` CLI tool.
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from sett_pro import __app_name__, __version__

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name=__app_name__)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Log solver progress (-v for outer rounds, -vv for inner rounds).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int) -> None:
    """SETT Pro: Stirling Engine Thermodynamic Tool.

    Solves the cyclic steady state of a Stirling engine and reports its
    temperatures, powers and efficiency.
    """
    ctx.ensure_object(dict)
    ctx.obj["console"] = console
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=console, show_path=False)],
        )


# Import and register sub-commands
from sett_pro.cli.run_cmd import init, run, sweep, validate  # noqa: E402
from sett_pro.cli.info_cmd import info  # noqa: E402

cli.add_command(run)
cli.add_command(sweep)
cli.add_command(validate)
cli.add_command(init)
cli.add_command(info)


def main() -> None:
    """Convenience wrapper for entry-point scripts."""
    cli()
