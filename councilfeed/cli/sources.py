"""Sources management commands."""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..db import PostgresArticleStore, SourceRepository, get_connection
from ..models import Source, SourceKind
from ..pipeline import FetchOrchestrator
from .context import load_runtime

console = Console()
sources_app = typer.Typer(help="Manage external sources")


@sources_app.command("list")
def sources_list(
    active_only: bool = typer.Option(False, "--active", help="Only active sources"),
    member: Optional[str] = typer.Option(None, "--member", "-m", help="Council member id"),
) -> None:
    """List configured sources."""
    config = load_runtime()

    with get_connection(config.get_db_config()) as conn:
        sources = SourceRepository().list_sources(
            conn, active_only=active_only, council_member_id=member
        )

    if not sources:
        console.print("[yellow]No sources configured.[/yellow]")
        return

    table = Table(title="External Sources")
    table.add_column("ID", style="cyan")
    table.add_column("Member", style="magenta")
    table.add_column("Kind", style="green")
    table.add_column("Name")
    table.add_column("Interval", style="yellow")
    table.add_column("Active", style="yellow")
    table.add_column("Last fetched", style="dim")
    table.add_column("URL", style="blue")

    for source in sources:
        table.add_row(
            str(source.id),
            source.council_member_id,
            source.kind.value,
            source.name or "",
            f"{source.fetch_interval} min",
            "✓" if source.is_active else "✗",
            source.last_fetched_at.isoformat(timespec="minutes") if source.last_fetched_at else "-",
            source.url,
        )

    console.print(table)


@sources_app.command("add")
def sources_add(
    member: str = typer.Option(..., "--member", "-m", help="Council member id"),
    url: str = typer.Option(..., "--url", "-u", help="Feed or page URL"),
    kind: SourceKind = typer.Option(SourceKind.RSS, "--kind", "-k", help="Source kind"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Source name"),
    interval: int = typer.Option(60, "--interval", "-i", help="Fetch interval in minutes", min=1),
    created_by: Optional[str] = typer.Option(None, "--created-by", help="Administrator id"),
) -> None:
    """Register a new external source."""
    config = load_runtime()

    source = Source(
        council_member_id=member,
        kind=kind,
        url=url,
        name=name,
        fetch_interval=interval,
        is_active=True,
        created_by=created_by,
    )
    with get_connection(config.get_db_config()) as conn:
        created = SourceRepository().create_source(conn, source)

    console.print(f"[green]✅ Added source {created.id}: {created.display_name}[/green]")


@sources_app.command("update")
def sources_update(
    source_id: int = typer.Argument(..., help="Source id"),
    member: Optional[str] = typer.Option(None, "--member", "-m", help="Council member id"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Feed or page URL"),
    kind: Optional[SourceKind] = typer.Option(None, "--kind", "-k", help="Source kind"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Source name"),
    interval: Optional[int] = typer.Option(
        None, "--interval", "-i", help="Fetch interval in minutes", min=1
    ),
    active: Optional[bool] = typer.Option(None, "--active/--inactive", help="Enable or disable"),
) -> None:
    """Change fields of a source."""
    config = load_runtime()

    updates = {
        "council_member_id": member,
        "url": url,
        "kind": kind,
        "name": name,
        "fetch_interval": interval,
        "is_active": active,
    }
    with get_connection(config.get_db_config()) as conn:
        updated = SourceRepository().update_source(conn, source_id, updates)

    if updated is None:
        console.print(f"[red]Source {source_id} not found.[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Updated source {source_id}[/green]")


@sources_app.command("remove")
def sources_remove(
    source_id: int = typer.Argument(..., help="Source id to remove"),
) -> None:
    """Remove a source. Its articles are kept."""
    config = load_runtime()

    with get_connection(config.get_db_config()) as conn:
        deleted = SourceRepository().delete_source(conn, source_id)

    if not deleted:
        console.print(f"[red]Source {source_id} not found.[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Removed source {source_id}[/green]")


@sources_app.command("preview")
def sources_preview(
    url: str = typer.Argument(..., help="Feed or page URL to test"),
    kind: SourceKind = typer.Option(SourceKind.RSS, "--kind", "-k", help="Source kind"),
) -> None:
    """Fetch a URL and show what would be ingested, without storing anything."""
    config = load_runtime()

    orchestrator = FetchOrchestrator(
        PostgresArticleStore(config.get_db_config()),
        config=config.fetch,
    )
    result = orchestrator.preview_url_sync(url, kind)

    if not result.success:
        console.print(f"[red]❌ {result.message}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]✅ {result.message}[/green] "
        f"[dim]({result.format_guess.value}, {result.content_type or 'no content type'})[/dim]"
    )

    table = Table(title=f"Sample of {result.total_count} articles")
    table.add_column("Published", style="yellow")
    table.add_column("Title", style="cyan")
    table.add_column("URL", style="blue")

    for candidate in result.sample_articles:
        published = "-"
        if candidate.published_at:
            published = candidate.published_at.isoformat(timespec="minutes")
        if candidate.date_estimated:
            published += " (now)"
        table.add_row(published, candidate.title, candidate.link)

    console.print(table)
