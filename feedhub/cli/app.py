"""Main CLI application."""

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from ..log import setup_logging
from .articles import articles_app
from .fetch import fetch_command
from .freshrss import freshrss_app
from .init import init_command
from .settings import settings_app
from .subs import subs_app

app = typer.Typer(
    name="feedhub",
    help="feedhub - personal RSS/Atom feed aggregator",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Personal RSS/Atom feed aggregator."""
    setup_logging(verbose)


# Register commands
app.command("init")(init_command)
app.command("fetch")(fetch_command)
app.add_typer(subs_app, name="subs", help="Manage subscriptions")
app.add_typer(articles_app, name="articles", help="Browse stored articles")
app.add_typer(settings_app, name="settings", help="Read and change settings")
app.add_typer(freshrss_app, name="freshrss", help="Sync with a FreshRSS server")


if __name__ == "__main__":
    app()
