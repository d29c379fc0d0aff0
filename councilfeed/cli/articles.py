"""Article management commands."""

from datetime import datetime
from enum import Enum
from typing import Optional

import pendulum
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..db import ArticleStorage, SourceRepository, get_connection
from ..models import Article, Category
from .context import load_runtime

console = Console()
articles_app = typer.Typer(help="Manage ingested articles")


class SortOrder(str, Enum):
    """Article listing order."""

    NEWEST = "newest"
    POPULAR = "popular"


def _parse_when(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return pendulum.parse(value)
    except ValueError:
        console.print(f"[red]Invalid date: {value}[/red]")
        raise typer.Exit(1)


@articles_app.command("list")
def articles_list(
    category: Optional[Category] = typer.Option(None, "--category", "-c", help="Category"),
    member: Optional[str] = typer.Option(None, "--member", "-m", help="Council member id"),
    source_id: Optional[int] = typer.Option(None, "--source", "-s", help="Source id"),
    include_inactive: bool = typer.Option(False, "--all", help="Include hidden articles"),
    sort: SortOrder = typer.Option(SortOrder.NEWEST, "--sort", help="Listing order"),
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum articles", min=1),
) -> None:
    """List articles."""
    config = load_runtime()
    storage = ArticleStorage()

    with get_connection(config.get_db_config()) as conn:
        if sort is SortOrder.POPULAR:
            articles = storage.popular_articles(conn, limit=limit)
        else:
            articles = storage.list_articles(
                conn,
                category=category,
                council_member_id=member,
                source_id=source_id,
                active_only=not include_inactive,
                limit=limit,
            )

    if not articles:
        console.print("[yellow]No articles found.[/yellow]")
        return

    table = Table(title="Articles")
    table.add_column("ID", style="cyan")
    table.add_column("Published", style="yellow")
    table.add_column("Category", style="magenta")
    table.add_column("Views", style="green")
    table.add_column("Title")

    for article in articles:
        table.add_row(
            str(article.id),
            article.published_at.strftime("%Y-%m-%d %H:%M"),
            article.category.label,
            str(article.view_count),
            article.title if article.is_active else f"[dim]{article.title}[/dim]",
        )

    console.print(table)


@articles_app.command("counts")
def articles_counts() -> None:
    """Show active article counts per category."""
    config = load_runtime()

    with get_connection(config.get_db_config()) as conn:
        counts = ArticleStorage().category_counts(conn)

    table = Table(title="Articles per Category")
    table.add_column("Category", style="magenta")
    table.add_column("Count", style="green")
    table.add_row("all", str(counts["all"]))
    for category in Category:
        table.add_row(f"{category.value} ({category.label})", str(counts[category.value]))

    console.print(table)


@articles_app.command("show")
def articles_show(
    article_id: int = typer.Argument(..., help="Article id"),
) -> None:
    """Show an article and count the view."""
    config = load_runtime()
    storage = ArticleStorage()

    with get_connection(config.get_db_config()) as conn:
        article = storage.get_article(conn, article_id)
        if article is None:
            console.print(f"[red]Article {article_id} not found.[/red]")
            raise typer.Exit(1)
        storage.increment_view_count(conn, article_id)

    console.print(
        Panel(
            f"[bold]{article.title}[/bold]\n"
            f"{article.category.label} • {article.published_at.isoformat(timespec='minutes')}"
            f" • {article.view_count + 1} views\n\n"
            f"{article.content}\n\n"
            f"[blue]{article.original_url}[/blue]",
            title=f"Article {article.id}",
        )
    )


@articles_app.command("add")
def articles_add(
    source_id: int = typer.Option(..., "--source", "-s", help="Source id"),
    title: str = typer.Option(..., "--title", "-t", help="Title"),
    url: str = typer.Option(..., "--url", "-u", help="Original article URL"),
    content: str = typer.Option("", "--content", help="Body text"),
    excerpt: Optional[str] = typer.Option(None, "--excerpt", help="Short summary"),
    image_url: Optional[str] = typer.Option(None, "--image", help="Image URL"),
    published: Optional[str] = typer.Option(None, "--published", help="Publication date"),
    category: Category = typer.Option(Category.OTHER, "--category", "-c", help="Category"),
) -> None:
    """Add an article by hand."""
    config = load_runtime()
    published_at = _parse_when(published)

    with get_connection(config.get_db_config()) as conn:
        source = SourceRepository().get_source(conn, source_id)
        if source is None:
            console.print(f"[red]Source {source_id} not found.[/red]")
            raise typer.Exit(1)

        now = pendulum.now("UTC")
        article = Article(
            source_id=source.id,
            council_member_id=source.council_member_id,
            title=title,
            content=content,
            excerpt=excerpt,
            source_url=source.url,
            original_url=url,
            image_url=image_url,
            published_at=published_at or now,
            fetched_at=now,
            source_kind=source.kind,
            category=category,
        )
        created = ArticleStorage().insert_article(conn, article)

    console.print(f"[green]✅ Added article {created.id}: {created.title}[/green]")


@articles_app.command("update")
def articles_update(
    article_id: int = typer.Argument(..., help="Article id"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Title"),
    content: Optional[str] = typer.Option(None, "--content", help="Body text"),
    excerpt: Optional[str] = typer.Option(None, "--excerpt", help="Short summary"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Original article URL"),
    image_url: Optional[str] = typer.Option(None, "--image", help="Image URL"),
    published: Optional[str] = typer.Option(None, "--published", help="Publication date"),
    category: Optional[Category] = typer.Option(None, "--category", "-c", help="Category"),
    active: Optional[bool] = typer.Option(None, "--active/--hidden", help="Show or hide"),
) -> None:
    """Change fields of an article."""
    config = load_runtime()

    updates = {
        "title": title,
        "content": content,
        "excerpt": excerpt,
        "original_url": url,
        "image_url": image_url,
        "published_at": _parse_when(published),
        "category": category,
        "is_active": active,
    }
    with get_connection(config.get_db_config()) as conn:
        updated = ArticleStorage().update_article(conn, article_id, updates)

    if updated is None:
        console.print(f"[red]Article {article_id} not found.[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Updated article {article_id}[/green]")


@articles_app.command("remove")
def articles_remove(
    article_id: int = typer.Argument(..., help="Article id to remove"),
) -> None:
    """Delete an article."""
    config = load_runtime()

    with get_connection(config.get_db_config()) as conn:
        deleted = ArticleStorage().delete_article(conn, article_id)

    if not deleted:
        console.print(f"[red]Article {article_id} not found.[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Removed article {article_id}[/green]")
