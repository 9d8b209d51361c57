"""HierPower CLI - Command Line Interface.

This module provides the command-line interface for HierPower, which reports
instance counts, area and leakage power for every level of a structural
netlist's module hierarchy.

The CLI is built using Typer and uses Rich for formatted output. The report
table itself is plain fixed-width text on stdout; logs go to stderr.

Typical usage example:

  $ hierpower report top.v top --lib stdcells.lib --depth 2
  $ hierpower cells stdcells.lib macros.lib.gz
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .log_utils import setup_logging

app = typer.Typer(
    name="hierpower",
    help="HierPower: hierarchical area and leakage report for structural netlists",
    no_args_is_help=True,
)
console = Console()

logger = logging.getLogger("hierpower.cli")


@app.callback(invoke_without_command=False)
def main(
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress info logs (show warnings/errors only)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """HierPower: hierarchical area and leakage report for structural netlists."""
    setup_logging(quiet=quiet, verbose=verbose)


def _check_exists(paths: list[Path]) -> None:
    for path in paths:
        if not path.exists():
            console.print(f"[red]Error:[/red] File not found: {path}")
            raise typer.Exit(1)


@app.command()
def report(
    netlist: Path = typer.Argument(..., help="Structural Verilog netlist (.v or .v.gz)"),
    top: str = typer.Argument(..., help="Name of the top-level module"),
    lib: Optional[list[Path]] = typer.Option(
        None, "--lib", "-l", help="Liberty file(s); later files override earlier cells"
    ),
    depth: Optional[int] = typer.Option(
        None, "--depth", "-d", help="Deepest hierarchy level to report (top is 0)"
    ),
    instances: bool = typer.Option(
        False, "--instances", "-i", help="Report module instances by instance name"
    ),
    area_scale: float = typer.Option(1.0, "--area-scale", help="Factor applied to area"),
    power_scale: float = typer.Option(1.0, "--power-scale", help="Factor applied to leakage"),
    csv_output: Optional[Path] = typer.Option(None, "--csv", help="Also write the rows as CSV"),
    json_output: Optional[Path] = typer.Option(None, "--json", help="Also write the report as JSON"),
):
    """Prints the hierarchical area/leakage report of a netlist.

    Libraries are loaded in the order given, then the netlist is parsed, then the
    hierarchy below TOP is aggregated. Without libraries only instance counts are
    reported.

    Args:
        netlist: Path to the netlist file.
        top: Name of the module to report on.
        lib: Optional. Liberty files with cell area and leakage data.
        depth: Optional. Rows deeper than this level are omitted; their metrics
            still roll up into their ancestors.
        instances: Optional. Name rows by module instance instead of module type.
        area_scale: Optional. Multiplier for the area column.
        power_scale: Optional. Multiplier for the leakage column.
        csv_output: Optional. Path to save the rows as CSV.
        json_output: Optional. Path to save the full report as JSON.

    Raises:
        typer.Exit: If an input file is missing, TOP is not a module, or the
            hierarchy is cyclic.
    """
    from .context import DesignContext
    from .exceptions import HierPowerError
    from .models.report import ReportConfig
    from .reporting.csv_generator import generate_csv
    from .reporting.text_report import render_report

    libs = list(lib or [])
    _check_exists(libs + [netlist])

    try:
        config = ReportConfig(
            area_scale=area_scale,
            power_scale=power_scale,
            max_depth=depth,
            instance_mode=instances,
        )
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid option: {e.errors()[0]['msg']}")
        raise typer.Exit(1)

    ctx = DesignContext()
    ctx.load_libraries(libs)
    ctx.load_netlist(netlist, instance_mode=instances)

    try:
        result = ctx.build_report(top, config)
    except HierPowerError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    typer.echo(render_report(result))

    if csv_output:
        with open(csv_output, "w", newline="") as f:
            generate_csv(result, f)
        logger.info(f"Saved CSV to {csv_output}")

    if json_output:
        json_output.write_text(json.dumps(result.model_dump(mode="json"), indent=2))
        logger.info(f"Saved JSON to {json_output}")


@app.command()
def cells(
    libs: list[Path] = typer.Argument(..., help="Liberty file(s) to load in order"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file"),
):
    """Lists the cells of one or more Liberty files after merging.

    Shows the area and resolved leakage of every cell, together with the
    leakage resolution method (direct, no-when, average, default) and the
    library that supplied the final definition, followed by the number of cells
    each library resolved with each method.

    Args:
        libs: Liberty files, loaded in order.
        output: Optional. Path to save the merged cell table as JSON.

    Raises:
        typer.Exit: If a file is not found.
    """
    from .context import DesignContext

    _check_exists(libs)

    ctx = DesignContext().load_libraries(libs)

    unit = ctx.power_unit
    table = Table(title=f"Cells ({len(ctx.cells)})")
    table.add_column("Cell")
    table.add_column("Area", justify="right")
    table.add_column(f"Leakage ({unit})" if unit else "Leakage", justify="right")
    table.add_column("Method")
    table.add_column("Library")

    for name, cell in sorted(ctx.cells.items()):
        table.add_row(
            escape(name),
            f"{cell.area:.4f}",
            f"{cell.leakage_power:.4f}",
            cell.leakage_method.value,
            escape(cell.source_library or "N/A"),
        )

    console.print(table)

    for library in ctx.libraries:
        counts = ", ".join(f"{method} {n}" for method, n in library.method_counts().items())
        console.print(f"[bold]{escape(library.name)}[/bold] leakage methods: {counts}")

    if output:
        data = {name: cell.model_dump(mode="json") for name, cell in ctx.cells.items()}
        output.write_text(json.dumps(data, indent=2))
        console.print(f"[green]Saved to:[/green] {output}")


@app.command()
def modules(
    netlist: Path = typer.Argument(..., help="Structural Verilog netlist (.v or .v.gz)"),
):
    """Lists the modules of a netlist and the candidate top modules.

    A candidate top module is one that no other module instantiates.

    Args:
        netlist: Path to the netlist file.

    Raises:
        typer.Exit: If the file is not found.
    """
    from .parsers.netlist import NetlistParser

    _check_exists([netlist])

    parsed = NetlistParser().parse(netlist)
    tops = set(parsed.top_candidates())

    table = Table(title=f"Modules ({len(parsed.modules)})")
    table.add_column("Module")
    table.add_column("Children", justify="right")
    table.add_column("Distinct Types", justify="right")
    table.add_column("Top", justify="center")

    for name, module in parsed.modules.items():
        table.add_row(
            escape(name),
            str(module.num_children),
            str(len(module.counts)),
            "yes" if name in tops else "",
        )

    console.print(table)
