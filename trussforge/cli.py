"""Command-line interface for trussforge."""

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .errors import TrussForgeError
from .generator.ground_structure import GroundStructurePolicy
from .generator.problem import load_problem
from .layout.session import OptimizationSession, SessionSettings
from .run_context import run_record_context
from .run_record import RunRecord, RunStatus
from .solvers import DEFAULT_BACKEND, MOSEK_AVAILABLE, get_backend_registry

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | {level} | {message}"

# Configure logger
logger.remove()  # Remove default handler
logger.add(sys.stderr, format=LOG_FORMAT, level="INFO")

app = typer.Typer(
    help="trussforge: Minimum-volume truss layout optimisation",
    rich_markup_mode="rich",
)
console = Console()

STATUS_COLOURS = {
    RunStatus.CONVERGED: "green",
    RunStatus.STOPPED: "yellow",
    RunStatus.FAILED: "red",
    RunStatus.PENDING: "yellow",
}


def _log_table(record: RunRecord, title: str) -> Table:
    table = Table(title=title)
    table.add_column("Iter", justify="right", style="cyan")
    table.add_column("Volume", justify="right", style="green")
    table.add_column("Objective", justify="right")
    table.add_column("Added", justify="right")
    table.add_column("Runtime (s)", justify="right", style="yellow")
    table.add_column("Backend")
    for entry in record.iterations:
        table.add_row(
            str(entry.index),
            f"{entry.volume:.6f}",
            f"{entry.objective:.6f}" if entry.objective is not None else "-",
            str(entry.members_added),
            f"{entry.runtime:.3f}",
            entry.backend,
        )
    return table


@app.command(name="run")
def run_problem(
    problem_file: Path = typer.Argument(
        ..., help="Path to problem JSON or YAML file", exists=True
    ),
    mode: GroundStructurePolicy = typer.Option(
        GroundStructurePolicy.FROM_EXISTING_TOPOLOGY,
        "--mode",
        "-m",
        help="Ground structure: existing members, fully-connected or member-adding",
    ),
    backend: str = typer.Option(
        DEFAULT_BACKEND, "--backend", "-b", help="LP backend (see 'backends')"
    ),
    max_iter: Optional[int] = typer.Option(
        None, "--max-iter", min=1, help="Maximum member-adding iterations"
    ),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", help="Member-adding violation threshold"
    ),
    max_add: Optional[int] = typer.Option(
        None, "--max-add", help="Maximum members added per iteration (0 = no cap)"
    ),
    outdir: Path = typer.Option(
        "outputs", "--outdir", "-o", help="Output directory for run records"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
):
    """Optimise a truss layout until the member-adding loop converges."""
    # Set log level based on verbose flag
    if verbose:
        logger.remove()
        logger.add(sys.stderr, format=LOG_FORMAT, level="DEBUG")

    try:
        problem = load_problem(problem_file)
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        raise typer.Exit(1)

    settings = SessionSettings(
        policy=mode,
        backend=backend,
        threshold=threshold,
        max_members_added=max_add,
    )
    session = OptimizationSession(settings)
    settings_dict = {
        "mode": mode.value,
        "backend": backend,
        "max_iter": max_iter,
        "threshold": threshold,
        "max_add": max_add,
    }

    outdir.mkdir(parents=True, exist_ok=True)
    try:
        with run_record_context(
            session, outdir, problem_file, settings_dict
        ) as record:
            console.print(f"Optimising [blue]{problem_file}[/] ({mode.value})...")
            session.reset(problem)
            session.run(max_iter)
    except (TrussForgeError, ValueError) as e:
        console.print(f"[red]Error:[/] {str(e)}")
        raise typer.Exit(1)

    console.print(_log_table(record, f"Iterations ({len(record.iterations)})"))
    if record.volume is not None:
        console.print(f"Volume: [green]{record.volume:.6f}[/]")
    console.print(f"Active members: {len(record.bars)}")
    colour = STATUS_COLOURS[record.status]
    console.print(f"Status: [{colour}]{record.status.value}[/]")
    console.print(
        f"\n✓ Run record saved to [blue]{outdir / 'records'}[/] ({record.run_id[:8]})"
    )


@app.command()
def backends():
    """List available LP backends."""
    registry = get_backend_registry()

    table = Table(title="LP Backends")
    table.add_column("Name")
    table.add_column("Solver")
    table.add_column("Version")
    table.add_column("Available")

    for name, info in registry.get_backend_info().items():
        available = MOSEK_AVAILABLE if name == "mosek" else True
        table.add_row(
            name,
            info["name"],
            info["version"],
            "[green]yes[/]" if available else "[red]no[/]",
        )

    console.print(table)


@app.command(name="show")
def show_record(
    record_file: Path = typer.Argument(..., help="Run record JSON file", exists=True),
):
    """Show a saved run record."""
    try:
        record = RunRecord.load_from_file(record_file)
    except Exception as e:
        console.print(f"[red]Error reading run record:[/] {str(e)}")
        raise typer.Exit(1)

    console.print("[bold]Run Record Summary:[/]")
    console.print(f"Run ID: [cyan]{record.run_id}[/]")
    console.print(f"Timestamp: {record.timestamp}")
    colour = STATUS_COLOURS[record.status]
    console.print(f"Status: [{colour}]{record.status.value}[/]")
    if record.problem:
        console.print(
            f"Structure: {record.problem.node_count} nodes, "
            f"{record.problem.member_count} members"
        )
    if record.volume is not None:
        console.print(f"Volume: {record.volume:.6f}")
    if record.error_message:
        console.print(f"[red]Error:[/] {record.error_message}")

    console.print(_log_table(record, "Iterations"))
