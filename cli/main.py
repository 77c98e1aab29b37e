"""
Modgraph CLI

Command-line interface for the Elixir module dependency visualizer.
Provides commands for listing dependencies, producing a Graphviz
description, rendering and opening the graph, and inspecting one module.

Commands:
    modgraph analyze <paths>...         List every dependency edge
    modgraph dot <paths>...             Print or write the Graphviz description
    modgraph graph <paths>...           Render the graph to an image and open it
    modgraph inspect <module> <paths>...  Show one module's neighbourhood

Paths may be Elixir files or directories (scanned for *.ex and *.exs).

Usage:
    $ modgraph analyze lib/
    $ modgraph dot lib/my_app.ex --output deps.gv
    $ modgraph graph lib/ --format svg --image deps.svg --no-open
    $ modgraph inspect MyApp.Worker lib/
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from modgraph import __version__
from modgraph.analysis import analyze_paths, expand_paths
from modgraph.errors import ModgraphError
from modgraph.graph import ExportSettings, GraphExporter, ModuleGraph, render_dot
from modgraph.graph.export import (
    DEFAULT_DESCRIPTION_PATH,
    DEFAULT_IMAGE_FORMAT,
    DEFAULT_IMAGE_PATH,
    DEFAULT_LAYOUT_COMMAND,
    LAYOUT_COMMAND_ENV,
    VIEWER_COMMAND_ENV,
    default_viewer_command,
)
from modgraph.models import AnalysisResult

# Initialize Typer app and Rich console
app = typer.Typer(
    name="modgraph",
    help="Modgraph: visualize dependencies between Elixir modules",
    add_completion=False,
)
console = Console()


def _paths_argument():
    return typer.Argument(
        ...,
        help="Elixir source files or directories to analyze",
        exists=True,
        file_okay=True,
        dir_okay=True,
        resolve_path=True,
    )


@app.command()
def analyze(
    paths: List[Path] = _paths_argument(),
) -> None:
    """
    List every module dependency found in the given sources.

    Edges are shown in discovery order, one row per edge.
    """
    result = _analyze_or_exit(paths)

    table = Table(title="Module Dependencies", box=box.ROUNDED)
    table.add_column("Module", style="cyan")
    table.add_column("Depends on", style="bold")

    for edge in result.edges:
        source, target = edge.pair
        table.add_row(source, target)

    if result.edges:
        console.print(table)
    else:
        console.print("[yellow]No module dependencies found.[/yellow]")

    console.print()
    _print_analysis_summary(result)


@app.command()
def dot(
    paths: List[Path] = _paths_argument(),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the description to this file instead of stdout",
    ),
) -> None:
    """
    Produce the Graphviz description of the dependency graph.
    """
    result = _analyze_or_exit(paths, quiet=output is None)
    description = render_dot(result.edges)

    if output is None:
        # Plain stdout so the description can be piped into dot
        typer.echo(description, nl=False)
        return

    exporter = GraphExporter(ExportSettings(description_path=output))
    exporter.write_description(description)
    console.print(f"[green]✓[/green] Wrote {result.edge_count} edge(s) to {output}")


@app.command()
def graph(
    paths: List[Path] = _paths_argument(),
    gv_path: Path = typer.Option(
        DEFAULT_DESCRIPTION_PATH,
        "--gv",
        help="Where to write the Graphviz description",
    ),
    image_path: Path = typer.Option(
        DEFAULT_IMAGE_PATH,
        "--image",
        "-i",
        help="Where to write the rendered image",
    ),
    image_format: str = typer.Option(
        DEFAULT_IMAGE_FORMAT,
        "--format",
        "-f",
        help="Image format passed to Graphviz (png, svg, pdf, ...)",
    ),
    layout_command: str = typer.Option(
        DEFAULT_LAYOUT_COMMAND,
        "--dot-command",
        envvar=LAYOUT_COMMAND_ENV,
        help="Graphviz executable",
    ),
    viewer_command: Optional[str] = typer.Option(
        None,
        "--viewer",
        envvar=VIEWER_COMMAND_ENV,
        help="Command used to open the image (default: platform viewer)",
    ),
    open_image: bool = typer.Option(
        True,
        "--open/--no-open",
        help="Open the rendered image when done",
    ),
) -> None:
    """
    Render the dependency graph to an image and open it.

    This command:
    1. Extracts module dependencies from every source file
    2. Writes the Graphviz description
    3. Runs Graphviz to produce the image
    4. Opens the image in the platform viewer
    """
    result = _analyze_or_exit(paths)

    settings = ExportSettings(
        description_path=gv_path,
        image_path=image_path,
        image_format=image_format,
        layout_command=layout_command,
        viewer_command=viewer_command or default_viewer_command(),
    )

    try:
        rendered = GraphExporter(settings).export(result.edges, open_image=open_image)
    except ModgraphError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _print_analysis_summary(result)
    console.print(f"\n[green]✓[/green] Graph written to [bold]{rendered}[/bold]")


@app.command()
def inspect(
    module: str = typer.Argument(
        ...,
        help="Dotted module name, e.g. MyApp.Worker",
    ),
    paths: List[Path] = _paths_argument(),
) -> None:
    """
    Show what a module depends on, what depends on it, and its cycles.
    """
    result = _analyze_or_exit(paths)
    module_graph = ModuleGraph.from_edges(result.edges, modules=result.modules)

    if module not in module_graph:
        matches = [name for name in module_graph.modules() if module in name]
        if matches:
            console.print(f"[yellow]Module '{module}' not found. Did you mean:[/yellow]")
            for match in matches[:5]:
                console.print(f"   • {match}")
        else:
            console.print(f"[red]Module '{module}' not found.[/red]")
        raise typer.Exit(1)

    defined = module in module_graph.defined_modules
    kind = "defined" if defined else "[dim]external[/dim]"
    console.print(f"\n[bold]Module:[/bold] {module} ({kind})")

    dependencies = sorted(module_graph.dependencies_of(module))
    console.print(f"\n[bold]Depends on ({len(dependencies)}):[/bold]")
    for name in dependencies:
        console.print(f"   • [cyan]{name}[/cyan]")

    dependents = sorted(module_graph.dependents_of(module))
    console.print(f"\n[bold]Used by ({len(dependents)}):[/bold]")
    for name in dependents:
        console.print(f"   • [cyan]{name}[/cyan]")

    affected = module_graph.transitive_dependents(module)
    if len(affected) > len(dependents):
        console.print(
            f"\n[dim]💡 {len(affected)} module(s) depend on {module} transitively.[/dim]"
        )

    cycles = module_graph.cycles_through(module)
    if cycles:
        console.print(f"\n[bold yellow]⚠️  Dependency cycles ({len(cycles)}):[/bold yellow]")
        for cycle in cycles:
            console.print("   • " + " → ".join(cycle + [cycle[0]]))


# Helper functions for analysis and output formatting

def _analyze_or_exit(paths: List[Path], quiet: bool = False) -> AnalysisResult:
    """Run the analysis, turning fatal errors into exit status 1."""
    try:
        files = expand_paths(paths)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not files:
        console.print("[yellow]No Elixir source files found.[/yellow]")
        raise typer.Exit(1)

    try:
        if quiet:
            return analyze_paths(files)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Analyzing {len(files)} file(s)...", total=None)
            return analyze_paths(files)
    except ModgraphError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _print_analysis_summary(result: AnalysisResult) -> None:
    """Print a summary panel after analyzing."""
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Label", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Files analyzed", str(result.file_count))
    table.add_row("Modules defined", str(result.module_count))
    table.add_row("Dependency edges", str(result.edge_count))
    table.add_row("Analysis time", f"{result.analysis_time_seconds:.2f}s")

    panel = Panel(table, title="[bold green]✓ Analysis Complete[/bold green]", border_style="green")
    console.print(panel)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Version and global options
@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log each analyzed file and module",
    ),
) -> None:
    """
    Modgraph: visualize dependencies between Elixir modules.
    """
    if version:
        console.print(f"[bold]Modgraph[/bold] version {__version__}")
        raise typer.Exit()

    _configure_logging(verbose)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":
    app()
