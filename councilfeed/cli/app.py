"""Main CLI application."""

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from .articles import articles_app
from .fetch import fetch_command
from .init import init_command
from .sources import sources_app

app = typer.Typer(
    name="councilfeed",
    help="Council member external article ingestion",
    no_args_is_help=True,
)

# Register commands
app.command("init")(init_command)
app.command("fetch")(fetch_command)
app.add_typer(sources_app, name="sources", help="Manage external sources")
app.add_typer(articles_app, name="articles", help="Manage ingested articles")


if __name__ == "__main__":
    app()
