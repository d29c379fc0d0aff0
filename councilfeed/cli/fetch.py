"""Fetch command implementation."""

from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..db import PostgresArticleStore
from ..ingestion import FetchOutcome
from ..pipeline import FetchOrchestrator, SourceNotFoundError
from .context import load_runtime

console = Console()


def fetch_command(
    source_id: Optional[int] = typer.Argument(None, help="Source id to fetch"),
    fetch_all: bool = typer.Option(False, "--all", "-a", help="Fetch every active source"),
) -> None:
    """Fetch new articles from one source or from all active sources."""
    if source_id is None and not fetch_all:
        console.print("[red]Give a source id or --all.[/red]")
        raise typer.Exit(1)

    config = load_runtime()
    orchestrator = FetchOrchestrator(
        PostgresArticleStore(config.get_db_config()),
        config=config.fetch,
    )

    try:
        if fetch_all:
            outcomes = orchestrator.fetch_all_sync()
        else:
            outcomes = [orchestrator.fetch_from_source_sync(source_id)]
    except SourceNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Fetch interrupted by user[/yellow]")
        raise typer.Exit(1)

    print_fetch_summary(outcomes)

    if any(not outcome.success for outcome in outcomes):
        raise typer.Exit(1)


def print_fetch_summary(outcomes: List[FetchOutcome]) -> None:
    """Print a table of fetch outcomes."""
    if not outcomes:
        console.print("[yellow]No active sources.[/yellow]")
        return

    table = Table(title="Fetch Summary")
    table.add_column("Source", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Found", style="yellow")
    table.add_column("New", style="yellow")
    table.add_column("Saved", style="green")
    table.add_column("Message", style="dim")

    for outcome in outcomes:
        table.add_row(
            str(outcome.source_id),
            "[green]✓[/green]" if outcome.success else "[red]✗[/red]",
            str(outcome.total_found),
            str(outcome.new_candidates),
            str(outcome.saved_count),
            outcome.message,
        )

    console.print(table)
