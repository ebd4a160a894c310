"""Article browsing commands."""

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config
from ..db import PostgresStore
from ..errors import FeedHubError

console = Console()
articles_app = typer.Typer(help="Browse stored articles")


@articles_app.command("recent")
def articles_recent(
    subscription_id: int = typer.Argument(..., help="Subscription ID"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of articles", min=1),
) -> None:
    """Show the most recent articles of a subscription."""
    store = PostgresStore(Config().get_db_config())

    try:
        articles = store.query_recent_articles(subscription_id, limit)
    except FeedHubError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not articles:
        console.print("[yellow]No articles.[/yellow]")
        return

    table = Table(title=f"Recent articles of subscription {subscription_id}")
    table.add_column("Published", style="yellow")
    table.add_column("Title", style="cyan")
    table.add_column("Flags", style="magenta")
    table.add_column("URL", style="blue")

    for article in articles:
        flags = "".join(
            mark
            for mark, on in (("R", article.is_read), ("F", article.is_favorite), ("H", article.is_hidden))
            if on
        )
        title = article.title
        if article.translated_title:
            title = f"{article.translated_title} [dim]({article.title})[/dim]"
        table.add_row(
            article.published_at.strftime("%Y-%m-%d %H:%M"),
            title,
            flags,
            article.url,
        )

    console.print(table)
