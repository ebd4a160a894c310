"""Init command implementation."""

from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, SourceConfig, save_config, save_sources
from ..config.loader import DEFAULT_CONFIG_PATH
from ..db import init_database, validate_connection

console = Console()


def create_default_sources() -> List[SourceConfig]:
    """Create a starter sources list for `feedhub subs import`."""
    return [
        SourceConfig(
            name="Hacker News",
            url="https://news.ycombinator.com/rss",
            category="tech",
        ),
        SourceConfig(
            name="Python Insider",
            url="https://blog.python.org/feeds/posts/default",
            category="python",
        ),
        SourceConfig(
            name="LWN.net",
            url="https://lwn.net/headlines/rss",
            category="tech",
        ),
    ]


def init_command(
    config_dir: Path = typer.Option(
        DEFAULT_CONFIG_PATH.parent,
        "--config-dir",
        "-c",
        help="Configuration directory",
    ),
    workspace: Path = typer.Option(
        Path.home() / "FeedHub",
        "--workspace",
        "-w",
        help="Workspace root directory (feed scripts live in <workspace>/scripts)",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("feedhub", "--db-name", help="Database name"),
    db_user: str = typer.Option("feedhub_user", "--db-user", help="Database user"),
    seed_sources: bool = typer.Option(
        True,
        "--seed-sources/--no-seed-sources",
        help="Write a starter sources.yaml",
    ),
) -> None:
    """Initialize feedhub configuration and database."""
    console.print(Panel.fit("feedhub - Initialization", style="bold blue"))

    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.yaml"
    sources_path = config_dir / "sources.yaml"

    config = ConfigModel(
        workspace_root=str(workspace),
        postgres={
            "host": db_host,
            "port": db_port,
            "database": db_name,
            "user": db_user,
            "password_env": "FEEDHUB_DB_PASSWORD",
        },
    )

    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    if seed_sources:
        sources = create_default_sources()
        save_sources(sources, sources_path)
        console.print(f"✅ Created sources: {sources_path} ({len(sources)} sources)")

    scripts_dir = workspace / "scripts"
    scripts_dir.mkdir(parents=True, exist_ok=True)
    console.print(f"✅ Created scripts directory: {scripts_dir}")

    console.print("\n[bold]Testing database connection...[/bold]")
    db_config = config.postgres.model_dump()

    if not validate_connection(db_config):
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: [bold]export FEEDHUB_DB_PASSWORD=your_password[/bold]"
        )
        raise typer.Exit(1)

    console.print("✅ Database connection successful")

    console.print("\n[bold]Initializing database schema...[/bold]")
    try:
        init_database(db_config)
        console.print("✅ Database schema initialized")
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[green]✅ feedhub initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n"
            f"Scripts: {scripts_dir}\n\n"
            f"Next steps:\n"
            f"1. Import the starter sources: [bold]feedhub subs import[/bold]\n"
            f"2. Refresh all feeds: [bold]feedhub fetch[/bold]",
            style="green",
        )
    )
