"""Index table management commands."""

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scout_database import db
from scout_database.cli.app import app
from scout_database.cli.commands.command_utils import open_engine, run_with_cleanup
from scout_database.config import ScoutDatabaseConfig
from scout_database.errors import ScoutDatabaseError

console = Console()


@app.command()
def init() -> None:
    """Create the search index table if it does not exist."""
    config = ScoutDatabaseConfig()

    async def _init():
        search_engine = await open_engine(config)
        engine, _ = await db.get_or_create_db(config.database_url)
        await db.create_index_table(engine, search_engine.table)

    run_with_cleanup(_init())
    console.print(f"[green]Index table {config.index_table_name} is ready[/green]")


@app.command()
def drop(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Drop the search index table and everything indexed in it."""
    config = ScoutDatabaseConfig()
    if not yes and not typer.confirm(f"Drop index table {config.index_table_name}?"):
        raise typer.Exit(1)

    async def _drop():
        search_engine = await open_engine(config)
        engine, _ = await db.get_or_create_db(config.database_url)
        await db.drop_index_table(engine, search_engine.table)

    run_with_cleanup(_drop())
    console.print(f"[green]Index table {config.index_table_name} dropped[/green]")


@app.command()
def stats() -> None:
    """Show document and term counts per document type."""
    config = ScoutDatabaseConfig()

    async def _stats():
        search_engine = await open_engine(config)
        return await search_engine.seeker.statistics()

    try:
        statistics = run_with_cleanup(_stats())
    except ScoutDatabaseError as e:
        logger.error(f"Reading statistics failed: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))} ({escape(str(e.cause))})")
        raise typer.Exit(1)

    if not statistics:
        console.print("[yellow]The index is empty[/yellow]")
        return

    table = Table(title=f"Index {config.index_table_name}")
    table.add_column("Type", style="cyan")
    table.add_column("Documents", justify="right")
    table.add_column("Terms", justify="right")
    table.add_column("Postings", justify="right")
    for entry in statistics:
        table.add_row(
            entry.document_type, str(entry.documents), str(entry.terms), str(entry.postings)
        )
    console.print(table)
