"""Shared setup for CLI commands."""

import typer
from rich.console import Console

from ..config import Config
from ..logging_utils import setup_logging

console = Console()


def load_runtime() -> Config:
    """Load configuration and logging, or exit with a hint."""
    config = Config()
    try:
        logging_config = config.config.logging
    except FileNotFoundError:
        console.print("[red]Config file not found. Run 'councilfeed init' first.[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    setup_logging(logging_config)
    return config
