#!/usr/bin/env python3
"""
codecompact CLI - Command Line Interface
Compacts code graphs stored as JSON files.
"""

import asyncio
import os
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from codecompact._version import __version__
from codecompact.core.exceptions import CodeCompactError
from codecompact.core.logging import AsyncLogger
from codecompact.core.secure_config import Settings
from codecompact.compact.controller import CompactController
from codecompact.compact.presets import resolve_strategy_name
from codecompact.models.compaction import CompactConfig, CompactRequest, CompactRequirements
from codecompact.models.graph import CodeGraph


def load_graph(path: str) -> CodeGraph:
    """Read and validate a graph JSON file."""
    try:
        return CodeGraph.from_json(Path(path).read_text(encoding="utf-8"))
    except ValidationError as e:
        raise click.ClickException(f"Invalid graph file {path}: {e.error_count()} validation errors")
    except OSError as e:
        raise click.ClickException(f"Cannot read graph file {path}: {e}")


def build_controller(ctx: click.Context) -> CompactController:
    settings: Settings = ctx.obj["settings"]
    return CompactController(CompactConfig.from_settings(settings))


@click.group()
@click.version_option(version=__version__, prog_name="codecompact")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Configuration file (default: ./.codecompact)",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logs")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], verbose: bool):
    """
    codecompact - bounded-size compaction of code graphs.
    """
    try:
        settings = Settings(Path(config_path) if config_path else None)
    except CodeCompactError as e:
        raise click.ClickException(str(e))

    AsyncLogger.configure_console("DEBUG" if verbose else settings.get("logging.level", "WARNING"))
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.argument("graph_file", type=click.Path(exists=True, dir_okay=False))
@click.option("-s", "--strategy", default=None, help="Strategy name (overrides --level/--task)")
@click.option(
    "-l",
    "--level",
    type=click.Choice(["minimal", "balanced", "aggressive"]),
    default=None,
    help="Compaction level",
)
@click.option(
    "-t",
    "--task",
    type=click.Choice(["debugging", "refactoring", "documentation"]),
    default=None,
    help="Task the compacted graph is for",
)
@click.option("-n", "--tokens", type=int, default=0, help="Target size (0 = configured default)")
@click.option("-f", "--focus", multiple=True, help="Keep files whose path contains this pattern")
@click.option("-p", "--preview", is_flag=True, help="Report the result without writing the graph")
@click.option(
    "-o", "--output", type=click.Path(dir_okay=False), default=None, help="Output file (default: stdout)"
)
@click.pass_context
def compact(
    ctx: click.Context,
    graph_file: str,
    strategy: Optional[str],
    level: Optional[str],
    task: Optional[str],
    tokens: int,
    focus: Tuple[str, ...],
    preview: bool,
    output: Optional[str],
):
    """Compact GRAPH_FILE and write the compacted graph as JSON"""
    graph = load_graph(graph_file)
    controller = build_controller(ctx)

    request = CompactRequest(
        graph=graph,
        strategy=resolve_strategy_name(strategy, level, task),
        max_size=tokens,
        requirements=CompactRequirements(preserve_paths=list(focus)),
    )

    try:
        result = asyncio.run(controller.compact(request))
    except CodeCompactError as e:
        raise click.ClickException(str(e))

    console = Console()
    reduction = (1.0 - result.compression_ratio) * 100 if result.original_size else 0.0

    if preview:
        table = Table(title="Compaction Preview", show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Value")
        table.add_row("Strategy", result.strategy)
        table.add_row("Original size", str(result.original_size))
        table.add_row("Compacted size", str(result.compacted_size))
        table.add_row("Reduction", f"{reduction:.1f}%")
        table.add_row("Files removed", str(len(result.removed_items.files)))
        table.add_row("Symbols removed", str(len(result.removed_items.symbols)))
        table.add_row("Processing time", f"{result.execution_time_ms:.2f} ms")
        if result.removed_items.impact is not None:
            table.add_row("Risk", result.removed_items.impact.risk_level)
        console.print(table)
        for warning in result.warnings:
            console.print(f"[yellow]! {warning}[/yellow]")
        console.print("[dim]Run without --preview to write the compacted graph[/dim]")
        return

    content = result.compacted_graph.to_json(indent=2)
    if output is None:
        click.echo(content)
        return

    Path(output).write_text(content, encoding="utf-8")
    console.print(
        f"[bold green]✓ Compaction completed in {result.execution_time_ms:.2f} ms[/bold green]"
    )
    console.print(
        f"  Reduction: {reduction:.1f}% ({result.original_size} → {result.compacted_size})"
    )
    console.print(f"  Strategy: {result.strategy}")
    console.print(f"  Files removed: {len(result.removed_items.files)}")
    console.print(f"  Symbols removed: {len(result.removed_items.symbols)}")
    console.print(f"  Output file: {output}")


@cli.command()
@click.argument("graph_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def analyze(ctx: click.Context, graph_file: str):
    """Estimate how much each strategy could compact GRAPH_FILE"""
    graph = load_graph(graph_file)
    analysis = build_controller(ctx).analyze_compaction_potential(graph)

    console = Console()
    table = Table(title=f"Compaction potential ({analysis.total_size} elements)")
    table.add_column("Strategy", style="cyan")
    table.add_column("Estimated ratio", justify="right")
    table.add_column("Removable files", justify="right")
    table.add_column("Removable symbols", justify="right")
    table.add_column("Confidence", justify="right")
    for name, estimate in sorted(analysis.strategies.items()):
        table.add_row(
            name,
            f"{estimate.estimated_compression:.2f}",
            str(estimate.removable_files),
            str(estimate.removable_symbols),
            f"{estimate.confidence:.2f}",
        )
    console.print(table)
    console.print(f"Recommended strategy: [bold]{analysis.recommended_strategy}[/bold]")
    console.print(f"Estimated savings: {analysis.estimated_savings} elements")


@cli.command()
@click.pass_context
def strategies(ctx: click.Context):
    """List available strategies"""
    controller = build_controller(ctx)

    console = Console()
    table = Table(title="Strategies")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for name in controller.list_strategies():
        strategy = controller.get_strategy(name)
        table.add_row(name, getattr(strategy, "description", ""))
    console.print(table)


def main():
    """Main entry point"""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user.")
        sys.exit(0)
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"))
        if os.environ.get("CODECOMPACT_DEBUG"):
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
