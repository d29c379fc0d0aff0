"""Init command implementation."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, default_config_path, load_config, save_config
from ..db import init_database, validate_connection
from ..db.connection import close_connection_pool

console = Console()

PASSWORD_ENV = "COUNCILFEED_DB_PASSWORD"


def init_command(
    config_path: Path = typer.Option(
        default_config_path(),
        "--config",
        "-c",
        help="Configuration file to write",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("councilfeed", "--db-name", help="Database name"),
    db_user: str = typer.Option("councilfeed", "--db-user", help="Database user"),
    timeout: float = typer.Option(30.0, "--timeout", help="Fetch timeout in seconds", min=1),
    max_concurrent: int = typer.Option(
        5, "--max-concurrent", help="Sources fetched at once by 'fetch --all'", min=1
    ),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also log to this file"),
    schema_only: bool = typer.Option(
        False, "--schema-only", help="Keep an existing config file and only create the schema"
    ),
) -> None:
    """Write a config file and create the sources and articles tables."""
    console.print(Panel.fit("councilfeed - Initialization", style="bold blue"))

    if schema_only:
        try:
            config = load_config(config_path)
        except (FileNotFoundError, ValueError) as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(1)
        console.print(f"Using config: {config_path}")
    else:
        config = ConfigModel(
            postgres={
                "host": db_host,
                "port": db_port,
                "database": db_name,
                "user": db_user,
                "password_env": PASSWORD_ENV,
            },
            fetch={"timeout": timeout, "max_concurrent": max_concurrent},
            logging={"level": log_level, "file": log_file},
        )
        save_config(config, config_path)
        console.print(f"✅ Wrote config: {config_path}")

    db_config = config.postgres.model_dump()

    console.print(f"\n[bold]Connecting to {db_config['database']}@{db_config['host']}...[/bold]")
    if not validate_connection(db_config):
        console.print(
            "[red]❌ Could not connect to Postgres.[/red]\n"
            "Check that the server is running and the credentials are right.\n"
            f"Password variable: [bold]{config.postgres.password_env or '-'}[/bold]"
        )
        raise typer.Exit(1)

    console.print("\n[bold]Creating tables...[/bold]")
    try:
        init_database(db_config)
    except Exception as e:
        console.print(f"[red]❌ Schema creation failed: {e}[/red]")
        raise typer.Exit(1)
    finally:
        close_connection_pool()
    console.print("✅ sources and articles tables ready")

    console.print(
        Panel(
            "[green]✅ councilfeed is ready[/green]\n\n"
            f"Configuration: {config_path}\n\n"
            "Next steps:\n"
            "1. Register a source: "
            "[bold]councilfeed sources add --member ID --kind rss --url URL[/bold]\n"
            "2. Check what it yields: [bold]councilfeed sources preview URL[/bold]\n"
            "3. Fetch it: [bold]councilfeed fetch SOURCE_ID[/bold]",
            style="green",
        )
    )
