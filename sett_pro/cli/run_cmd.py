"""CLI commands for running, sweeping and validating engine configurations."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from sett_pro.core.config import (
    ConfigError,
    RunConfig,
    default_config,
    load_run_config,
    save_config_json,
    save_results_json,
)
from sett_pro.core.fluids import FluidPropertyError
from sett_pro.engine import RunResults, run_engine, sweep_source_temperatures
from sett_pro.engine.performance import Performance
from sett_pro.errors import SolverError
from sett_pro.state_equations.decomposition import list_decompositions
from sett_pro.utils.units import convert, to_si
from sett_pro.utils.validation import Severity, ValidationResult, validate_run_config

_SEVERITY_STYLE = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "dim",
}


def _load(console: Console, path: str) -> RunConfig:
    try:
        return load_run_config(path)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1)


def _print_validation(console: Console, result: ValidationResult) -> None:
    for msg in result.messages:
        style = _SEVERITY_STYLE[msg.severity]
        console.print(f"[{style}]{msg.severity.value.upper()}[/{style}] {msg.parameter}: {msg.message}")


def _check(console: Console, config: RunConfig) -> None:
    result = validate_run_config(config)
    _print_validation(console, result)
    if not result.is_valid:
        console.print("[red]Error:[/red] Configuration failed validation.")
        raise SystemExit(1)


def _temperature_table(results: RunResults) -> Table:
    temp = results.temperatures
    pres = results.pressure
    table = Table(title="Engine State")
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_column("Unit", style="dim")

    table.add_row("Sink Temperature", f"{temp['sink']:.2f}", "K")
    table.add_row("CHX Temperature", f"{temp['chx']:.2f}", "K")
    table.add_row("Regenerator Cold End", f"{temp['regen_cold']:.2f}", "K")
    table.add_row("Regenerator Mean", f"{temp['regen_avg']:.2f}", "K")
    table.add_row("Regenerator Hot End", f"{temp['regen_hot']:.2f}", "K")
    table.add_row("HHX Temperature", f"{temp['hhx']:.2f}", "K")
    table.add_row("Source Temperature", f"{temp['source']:.2f}", "K")
    p_avg, p_min, p_max = (convert(pres[k], "Pa", "MPa") for k in ("avg", "min", "max"))
    table.add_row("Mean Pressure", f"{p_avg:.4f}", "MPa")
    table.add_row("Pressure Range", f"{p_min:.4f}-{p_max:.4f}", "MPa")
    table.add_row("Regenerator Imbalance", f"{results.regen_imbalance:.4f}", "K")
    table.add_row("Outer Iterations", str(results.iterations), "—")
    return table


def _performance_table(results: RunResults) -> Table:
    perf = results.performance
    powers = perf["powers"]
    heats = perf["heats"]
    table = Table(title="Performance")
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_column("Unit", style="dim")

    table.add_row("Indicated Power", f"{powers['indicated']:.2f}", "W")
    table.add_row("Indicated Power (no dP)", f"{powers['indicated_zero_dP']:.2f}", "W")
    table.add_row("Shaft Power", f"{powers['shaft']:.2f}", "W")
    table.add_row("Net Power", f"{powers['net']:.2f}", "W")
    table.add_row("Heat Input", f"{heats['input']:.2f}", "W")
    table.add_row("Heat Rejected", f"{heats['rejected']:.2f}", "W")
    table.add_row("Torque", f"{perf['torque']:.4f}", "N·m")
    table.add_row("Efficiency", f"{perf['efficiency'] * 100:.2f}", "%")
    return table


@click.command("run")
@click.argument("config_path", metavar="CONFIG", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--solver",
    type=click.Choice(list_decompositions(), case_sensitive=False),
    default=None,
    help="Override the linear solver used for the state equations.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Output file path (JSON).",
)
@click.pass_context
def run(ctx: click.Context, config_path: str, solver: str | None, output: str | None) -> None:
    """Solve the cyclic steady state of the engine in CONFIG."""
    console: Console = ctx.obj.get("console", Console())
    config = _load(console, config_path)
    _check(console, config)

    settings = config.settings
    if solver is not None:
        settings = replace(settings, solver=solver.lower())

    console.print(f"\n[bold]SETT Pro: {config.name}[/bold]\n")
    try:
        with console.status("Solving cyclic steady state..."):
            engine = run_engine(config.components, config.fluid, config.inputs, settings)
    except (SolverError, FluidPropertyError) as exc:
        console.print(f"[red]Error:[/red] {type(exc).__name__}: {exc}")
        raise SystemExit(1)

    results = RunResults.from_engine(engine, config.inputs)
    console.print(_temperature_table(results))
    console.print(_performance_table(results))

    if output:
        save_results_json(results, output)
        console.print(f"\n[green]Saved:[/green] {output}")


@click.command("sweep")
@click.argument("config_path", metavar="CONFIG", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--source",
    "sources",
    multiple=True,
    required=True,
    help="Source temperature to run (repeatable, e.g. --source 450 --source '550 K').",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Output file path (JSON).",
)
@click.pass_context
def sweep(ctx: click.Context, config_path: str, sources: tuple[str, ...], output: str | None) -> None:
    """Run the engine in CONFIG at several source temperatures."""
    console: Console = ctx.obj.get("console", Console())
    config = _load(console, config_path)

    try:
        temps = [to_si(s, "K") for s in sources]
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1)
    too_cold = [t for t in temps if t <= config.inputs.temp_sink]
    if too_cold:
        console.print(
            f"[red]Error:[/red] Source temperature(s) {too_cold} K must exceed "
            f"the sink temperature {config.inputs.temp_sink} K."
        )
        raise SystemExit(1)

    console.print(f"\n[bold]SETT Pro: {config.name} (source sweep)[/bold]\n")
    with console.status(f"Running {len(temps)} configurations..."):
        points = sweep_source_temperatures(
            config.components, config.fluid, config.inputs, temps, config.settings
        )

    table = Table(title="Source Temperature Sweep")
    table.add_column("T_source [K]", style="cyan", justify="right")
    table.add_column("Status")
    table.add_column("Net Power [W]", style="green", justify="right")
    table.add_column("Heat Input [W]", justify="right")
    table.add_column("Efficiency [%]", justify="right")
    table.add_column("Iterations", style="dim", justify="right")

    rows = []
    for point in points:
        row = {"temp_source": point.inputs.temp_source, "converged": point.converged}
        if point.converged:
            perf = Performance.from_engine(point.engine)
            row.update(
                net_power=perf.powers.net,
                heat_input=perf.heats.input,
                efficiency=perf.efficiency,
                iterations=point.engine.iterations,
            )
            table.add_row(
                f"{point.inputs.temp_source:.1f}",
                "[green]converged[/green]",
                f"{perf.powers.net:.2f}",
                f"{perf.heats.input:.2f}",
                f"{perf.efficiency * 100:.2f}",
                str(point.engine.iterations),
            )
        else:
            row["error"] = point.error
            table.add_row(
                f"{point.inputs.temp_source:.1f}", "[red]failed[/red]", "—", "—", "—", "—"
            )
        rows.append(row)
    console.print(table)

    if output:
        with open(output, "w") as f:
            json.dump({"name": config.name, "points": rows}, f, indent=2)
        console.print(f"\n[green]Saved:[/green] {output}")

    if not any(p.converged for p in points):
        raise SystemExit(1)


@click.command("validate")
@click.argument("config_path", metavar="CONFIG", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx: click.Context, config_path: str) -> None:
    """Check CONFIG for errors and unusual values without solving."""
    console: Console = ctx.obj.get("console", Console())
    config = _load(console, config_path)
    result = validate_run_config(config)
    _print_validation(console, result)
    if not result.is_valid:
        console.print(f"[red]Invalid:[/red] {len(result.errors)} error(s)")
        raise SystemExit(1)
    console.print(f"[green]Valid:[/green] {config_path} ({len(result.warnings)} warning(s))")


@click.command("init")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
@click.pass_context
def init(ctx: click.Context, path: str, force: bool) -> None:
    """Write the reference engine configuration to PATH."""
    console: Console = ctx.obj.get("console", Console())
    if Path(path).exists() and not force:
        console.print(f"[red]Error:[/red] {path} exists (use --force to overwrite).")
        raise SystemExit(1)
    save_config_json(default_config(), path)
    console.print(f"[green]Saved:[/green] {path}")
