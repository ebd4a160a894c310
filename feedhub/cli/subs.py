"""Subscription management commands."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config, load_sources
from ..errors import FeedHubError
from ..services import Services, build_services

console = Console()
subs_app = typer.Typer(help="Manage subscriptions")


def _load_services() -> Services:
    try:
        return build_services(Config())
    except FileNotFoundError as e:
        console.print(f"[red]{e}. Run 'feedhub init' first.[/red]")
        raise typer.Exit(1)


@subs_app.command("list")
def subs_list() -> None:
    """List all subscriptions."""
    services = _load_services()

    try:
        subscriptions = services.store.list_subscriptions()
    except FeedHubError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not subscriptions:
        console.print("[yellow]No subscriptions yet.[/yellow]")
        return

    table = Table(title="Subscriptions")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Source", style="blue")
    table.add_column("Last error", style="red")

    for subscription in subscriptions:
        table.add_row(
            str(subscription.id),
            subscription.title,
            subscription.category,
            subscription.locator,
            subscription.last_error,
        )

    console.print(table)


@subs_app.command("add")
def subs_add(
    url: str = typer.Argument(..., help="RSS/Atom feed URL"),
    category: str = typer.Option("", "--category", "-c", help="Category label"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Custom title"),
) -> None:
    """Fetch a feed URL once and subscribe to it."""
    services = _load_services()

    try:
        subscription_id = asyncio.run(services.fetcher.add_subscription(url, category, title))
    except FeedHubError as e:
        console.print(f"[red]❌ Could not add {url}: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Added subscription {subscription_id}[/green]")


@subs_app.command("add-script")
def subs_add_script(
    script_path: str = typer.Argument(..., help="Script path relative to the scripts directory"),
    category: str = typer.Option("", "--category", "-c", help="Category label"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Custom title"),
) -> None:
    """Run a feed script once and subscribe to it."""
    services = _load_services()

    try:
        subscription_id = asyncio.run(
            services.fetcher.add_script_subscription(script_path, category, title)
        )
    except FeedHubError as e:
        console.print(f"[red]❌ Could not add script {script_path}: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Added script subscription {subscription_id}[/green]")


@subs_app.command("remove")
def subs_remove(
    subscription_id: int = typer.Argument(..., help="Subscription ID to remove"),
) -> None:
    """Remove a subscription and its articles."""
    services = _load_services()

    try:
        deleted = services.store.delete_subscription(subscription_id)
    except FeedHubError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not deleted:
        console.print(f"[red]Subscription {subscription_id} not found.[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Removed subscription {subscription_id}[/green]")


@subs_app.command("import")
def subs_import(
    sources_path: Optional[Path] = typer.Argument(
        None, help="sources.yaml to import (default: next to the config file)"
    ),
) -> None:
    """Import subscriptions from a sources.yaml file without fetching them."""
    services = _load_services()
    sources_path = sources_path or Config().sources_path

    try:
        sources = load_sources(sources_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    try:
        existing = {s.url for s in services.store.list_subscriptions()}
        imported = 0
        for source in sources:
            if source.url in existing:
                console.print(f"[yellow]⚠️  {source.name}: already subscribed[/yellow]")
                continue
            services.fetcher.import_subscription(source.name, source.url, source.category)
            existing.add(source.url)
            imported += 1
    except FeedHubError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Imported {imported} subscriptions from {sources_path}[/green]")


@subs_app.command("edit")
def subs_edit(
    subscription_id: int = typer.Argument(..., help="Subscription ID to edit"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="New feed URL (turns a script feed into a URL feed)"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="New category label"),
    script_path: Optional[str] = typer.Option(
        None, "--script", "-s", help="New script path relative to the scripts directory"
    ),
) -> None:
    """Change a subscription's title, source or category."""
    if url and script_path:
        console.print("[red]Use either --url or --script, not both.[/red]")
        raise typer.Exit(1)

    services = _load_services()

    try:
        subscription = services.fetcher.edit_subscription(
            subscription_id, title=title, url=url, category=category, script_path=script_path
        )
    except FeedHubError as e:
        console.print(f"[red]❌ Could not edit subscription {subscription_id}: {e}[/red]")
        raise typer.Exit(1)

    if subscription is None:
        console.print(f"[red]Subscription {subscription_id} not found.[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Updated subscription {subscription_id}: {subscription.title} ({subscription.locator})[/green]")
