"""Settings commands."""

import typer
from rich.console import Console

from ..config import Config
from ..db import PostgresStore
from ..errors import FeedHubError

console = Console()
settings_app = typer.Typer(help="Read and change settings")

SECRET_KEYS = {"deepl_api_key", "openai_api_key", "freshrss_api_password"}


@settings_app.command("get")
def settings_get(key: str = typer.Argument(..., help="Setting name")) -> None:
    """Print a setting."""
    store = PostgresStore(Config().get_db_config())
    try:
        value = store.get_setting(key)
    except FeedHubError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if key in SECRET_KEYS and value:
        value = value[:4] + "…"
    console.print(f"{key} = {value!r}")


@settings_app.command("set")
def settings_set(
    key: str = typer.Argument(..., help="Setting name (e.g. translation_enabled, target_language)"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Change a setting."""
    store = PostgresStore(Config().get_db_config())
    try:
        store.set_setting(key, value)
    except FeedHubError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ {key} updated[/green]")
