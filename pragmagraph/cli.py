"""Command-line interface: export, validate and summarise diagram files."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .analysis import IssueSeverity, summarize_diagram, validate_diagram
from .serialization import EXPORT_EXTENSIONS, DiagramImportError, read_diagram, write_export

app = typer.Typer(
    name="pragmagraph",
    help="Export and check MUD/TOTE diagrams.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

SEVERITY_STYLES = {
    IssueSeverity.ERROR: "red",
    IssueSeverity.WARNING: "yellow",
    IssueSeverity.INFO: "blue",
}


class ExportFormat(str, Enum):
    json = "json"
    svg = "svg"
    tex = "tex"


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"pragmagraph version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True, help="Show version and exit")
    ] = False,
) -> None:
    """pragmagraph - geometry and export tools for MUD/TOTE diagrams."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(path: Path):
    try:
        return read_diagram(path)
    except DiagramImportError as e:
        console.print(f"[red]Error:[/red] {path}: {e}")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Error:[/red] Failed to read {path}: {e}")
        raise typer.Exit(1)


@app.command()
def export(
    input_file: Annotated[
        Path,
        typer.Argument(help="Diagram JSON file")
    ],
    fmt: Annotated[
        ExportFormat,
        typer.Option("--format", "-f", help="Output format")
    ] = ExportFormat.svg,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Output file (default: input name with the format's extension)")
    ] = None,
    standalone: Annotated[
        bool,
        typer.Option("--standalone", help="Use the standalone document class for LaTeX output")
    ] = False,
) -> None:
    """Export a diagram to JSON, SVG or LaTeX/TikZ."""
    diagram = _load(input_file)
    target = out or input_file.with_suffix(f".{EXPORT_EXTENSIONS[fmt.value]}")

    try:
        write_export(diagram, target, fmt.value, standalone=standalone)
    except OSError as e:
        console.print(f"[red]Error:[/red] Failed to write {target}: {e}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] Failed to export {input_file}: {e}")
        raise typer.Exit(1)

    console.print(f"[green]OK[/green] Wrote {fmt.value} export to {target}")


@app.command()
def validate(
    input_file: Annotated[
        Path,
        typer.Argument(help="Diagram JSON file")
    ],
) -> None:
    """Check a diagram for structural issues. Exits 1 if any errors are found."""
    diagram = _load(input_file)
    issues = validate_diagram(diagram)

    if not issues:
        console.print(f"[green]OK[/green] {diagram.name}: no issues found")
        return

    for issue in issues:
        style = SEVERITY_STYLES[issue.severity]
        location = issue.edge_id or issue.node_id
        suffix = f" [dim]({location})[/dim]" if location else ""
        console.print(f"[{style}]{issue.severity.value.upper()}[/{style}] {issue.message}{suffix}")

    if any(issue.severity is IssueSeverity.ERROR for issue in issues):
        raise typer.Exit(1)


@app.command()
def summary(
    input_file: Annotated[
        Path,
        typer.Argument(help="Diagram JSON file")
    ],
) -> None:
    """Print a structural summary of a diagram."""
    diagram = _load(input_file)
    result = summarize_diagram(diagram)

    table = Table(title=f"{result.name} ({result.mode})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Nodes", str(result.total_nodes))
    table.add_row("Edges", str(result.total_edges))
    for node_type, count in sorted(result.nodes_by_type.items()):
        table.add_row(f"  {node_type}", str(count))
    table.add_row("Components", str(result.connected_components))
    table.add_row("Orphan nodes", str(len(result.orphan_nodes)))
    table.add_row("Self-loops", str(len(result.self_loops)))
    table.add_row("Parallel pairs", str(len(result.parallel_pairs)))
    table.add_row("Resultant edges", str(result.resultant_edges))
    table.add_row("Entry points", str(result.entry_points))
    table.add_row("Exit points", str(result.exit_points))

    console.print(table)
