"""FreshRSS sync commands."""

from typing import Optional

import typer
from rich.console import Console

from ..config import Config
from ..db.settings import (
    FRESHRSS_API_PASSWORD,
    FRESHRSS_ENABLED,
    FRESHRSS_SERVER_URL,
    FRESHRSS_USERNAME,
)
from ..errors import FeedHubError
from ..services import Services, build_services
from ..sync import FreshRSSClient, FreshRSSSync
from .fetch import print_batch_summary

console = Console()
freshrss_app = typer.Typer(help="Sync with a FreshRSS server")


def _load_services() -> Services:
    try:
        return build_services(Config())
    except FileNotFoundError as e:
        console.print(f"[red]{e}. Run 'feedhub init' first.[/red]")
        raise typer.Exit(1)


@freshrss_app.command("sync")
def freshrss_sync(
    max_items: int = typer.Option(100, "--max-items", "-n", min=1, help="Most unread items to pull"),
    push: bool = typer.Option(False, "--push", help="Subscribe the server to local feeds it lacks"),
    mark_read: bool = typer.Option(False, "--mark-read", help="Mark pulled items as read on the server"),
    refresh: bool = typer.Option(True, "--refresh/--no-refresh", help="Fetch all feeds after syncing"),
) -> None:
    """Pull FreshRSS feeds and unread items into feedhub."""
    services = _load_services()
    store = services.store

    try:
        if store.get_setting(FRESHRSS_ENABLED) != "true":
            console.print("[red]FreshRSS sync is disabled. Run 'feedhub settings set freshrss_enabled true'.[/red]")
            raise typer.Exit(1)

        server_url = store.get_setting(FRESHRSS_SERVER_URL)
        username = store.get_setting(FRESHRSS_USERNAME)
        password = store.get_setting(FRESHRSS_API_PASSWORD)
    except FeedHubError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not (server_url and username and password):
        console.print("[red]FreshRSS settings incomplete: set freshrss_server_url, freshrss_username and freshrss_api_password.[/red]")
        raise typer.Exit(1)

    syncer = FreshRSSSync(FreshRSSClient(server_url, username, password), store)
    try:
        with console.status("[bold green]Syncing with FreshRSS..."):
            result = syncer.sync(max_items=max_items, push_local=push, mark_read=mark_read)
    except FeedHubError as e:
        console.print(f"[red]❌ FreshRSS sync failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]✅ FreshRSS sync complete: {result.feeds_added} feeds added, "
        f"{result.articles_saved} articles saved[/green]"
    )
    if push:
        console.print(f"   Subscribed server to {result.feeds_pushed} local feeds")
    if mark_read:
        console.print(f"   Marked {result.marked_read} items as read on the server")

    if refresh:
        print_batch_summary(services.orchestrator.fetch_all_sync())


@freshrss_app.command("test")
def freshrss_test(
    server_url: Optional[str] = typer.Option(None, "--server", help="Server URL (default: stored setting)"),
    username: Optional[str] = typer.Option(None, "--username", help="User name (default: stored setting)"),
    password: Optional[str] = typer.Option(None, "--password", help="API password (default: stored setting)"),
) -> None:
    """Check that the FreshRSS server accepts the credentials."""
    if not (server_url and username and password):
        store = _load_services().store
        try:
            server_url = server_url or store.get_setting(FRESHRSS_SERVER_URL)
            username = username or store.get_setting(FRESHRSS_USERNAME)
            password = password or store.get_setting(FRESHRSS_API_PASSWORD)
        except FeedHubError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)

    if not (server_url and username and password):
        console.print("[red]FreshRSS settings incomplete.[/red]")
        raise typer.Exit(1)

    client = FreshRSSClient(server_url, username, password)
    try:
        client.login()
    except FeedHubError as e:
        console.print(f"[red]❌ Connection failed: {e}[/red]")
        raise typer.Exit(1)

    try:
        count = len(client.get_subscriptions())
    except FeedHubError as e:
        console.print(f"[yellow]⚠️  Logged in, but listing subscriptions failed: {e}[/yellow]")
        count = 0

    console.print(f"[green]✅ Connection successful, {count} subscriptions on the server[/green]")
