"""Fetch command implementation."""

import asyncio
import signal
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from ..config import Config
from ..db import close_connection_pool, validate_connection
from ..ingestion import CancelToken
from ..pipeline import BatchOutcome, BatchResult, FetchOrchestrator
from ..services import build_services

console = Console()


async def run_with_progress(
    orchestrator: FetchOrchestrator,
    token: CancelToken,
    timeout: Optional[float] = None,
) -> BatchResult:
    """Run a batch while drawing its progress; Ctrl-C cancels the batch."""
    loop = asyncio.get_running_loop()
    handle_sigint = sys.platform != "win32"
    if handle_sigint:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    if timeout:
        loop.call_later(timeout, token.cancel)

    batch = asyncio.create_task(orchestrator.fetch_all(token))
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Refreshing feeds", total=None)
            while not batch.done():
                snapshot = orchestrator.get_progress()
                description = "Cancelling" if token.cancelled else "Refreshing feeds"
                progress.update(
                    task,
                    description=description,
                    total=snapshot.total or None,
                    completed=snapshot.current,
                )
                await asyncio.wait({batch}, timeout=0.2)
    finally:
        if handle_sigint:
            loop.remove_signal_handler(signal.SIGINT)

    return batch.result()


def print_batch_summary(result: BatchResult) -> None:
    """Print summary of a refresh batch."""
    table = Table(title="Feed Refresh Summary")
    table.add_column("Outcome", style="bold")
    table.add_column("Feeds", style="cyan")
    table.add_column("Failed", style="red")
    table.add_column("New articles", style="green")
    table.add_column("Duration", style="yellow")

    table.add_row(
        result.outcome.value.replace("_", " "),
        f"{result.completed}/{result.total}",
        str(result.failed),
        str(result.articles_saved),
        f"{result.duration:.1f}s",
    )
    console.print(table)


def fetch_command(
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Cancel the refresh after this many seconds",
        min=0.0,
    ),
) -> None:
    """Refresh every subscription once."""
    config = Config()

    try:
        if not validate_connection(config.get_db_config()):
            console.print("[red]❌ Database connection failed![/red]")
            raise typer.Exit(1)

        services = build_services(config)
        token = CancelToken()
        result = asyncio.run(run_with_progress(services.orchestrator, token, timeout))
    except FileNotFoundError as e:
        console.print(f"[red]{e}. Run 'feedhub init' first.[/red]")
        raise typer.Exit(1)
    finally:
        close_connection_pool()

    if result.outcome == BatchOutcome.ALREADY_RUNNING:
        console.print("[yellow]A refresh is already running.[/yellow]")
        return

    print_batch_summary(result)

    if result.outcome == BatchOutcome.ABORTED:
        console.print("[red]Refresh aborted: could not load subscriptions.[/red]")
        raise typer.Exit(1)
