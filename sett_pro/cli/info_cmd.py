"""CLI command for listing fluids, component models and linear solvers."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from sett_pro.core.config import component_types
from sett_pro.core.fluids import IdealGas, list_ideal_gases
from sett_pro.state_equations.decomposition import get_decomposition, list_decompositions

_SLOT_NAMES = {
    "chx": "Cold heat exchanger",
    "hhx": "Hot heat exchanger",
    "regen": "Regenerator",
    "ws": "Working spaces",
}


@click.group("info")
@click.pass_context
def info(ctx: click.Context) -> None:
    """List fluids, component models and linear solvers."""
    pass


@info.command("fluids")
@click.pass_context
def info_fluids(ctx: click.Context) -> None:
    """List available working fluids."""
    console: Console = ctx.obj.get("console", Console())
    table = Table(title="Available Working Fluids")
    table.add_column("Model", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("R [J/(kg·K)]", justify="right")
    table.add_column("Reference T [K]", justify="right")

    for name in list_ideal_gases():
        gas = IdealGas(name)
        table.add_row("ideal_gas", name, f"{gas.R:.2f}", f"{gas.ref_temp:.1f}")
    table.add_row("coolprop", "any CoolProp fluid (e.g. Hydrogen, Helium)", "—", "—")
    console.print(table)


@info.command("components")
@click.pass_context
def info_components(ctx: click.Context) -> None:
    """List available component models per engine slot."""
    console: Console = ctx.obj.get("console", Console())
    table = Table(title="Available Component Models")
    table.add_column("Slot", style="cyan")
    table.add_column("Description", style="dim")
    table.add_column("Types", style="green")

    for slot, types in component_types().items():
        table.add_row(slot, _SLOT_NAMES[slot], ", ".join(types))
    console.print(table)


@info.command("solvers")
@click.pass_context
def info_solvers(ctx: click.Context) -> None:
    """List available linear solvers for the state equations."""
    console: Console = ctx.obj.get("console", Console())
    table = Table(title="Available Linear Solvers")
    table.add_column("Name", style="cyan")
    table.add_column("Class", style="green")

    for name in list_decompositions():
        table.add_row(name, type(get_decomposition(name)).__name__)
    console.print(table)
