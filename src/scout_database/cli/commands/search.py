"""Commands for indexing, searching and flushing documents."""

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from scout_database.cli.app import app
from scout_database.cli.commands.command_utils import open_engine, run_with_cleanup
from scout_database.config import ScoutDatabaseConfig
from scout_database.errors import ScoutDatabaseError
from scout_database.schemas import Document, ExactValue, FreeText, SearchQuery

console = Console()


def parse_document(line: str) -> Document:
    """Parse one JSON line: {"type", "id", "fields": {...}, "exact": {...}}."""
    data = json.loads(line)
    fields: Dict[str, object] = {
        name: FreeText("" if value is None else str(value))
        for name, value in (data.get("fields") or {}).items()
    }
    for name, value in (data.get("exact") or {}).items():
        fields[name] = ExactValue(value)
    return Document(document_type=str(data["type"]), document_id=int(data["id"]), fields=fields)


BOOLEAN_VALUES = {"true": True, "yes": True, "1": True, "false": False, "no": False, "0": False}


def parse_filter_value(column: str, value: str, column_type: Optional[str]) -> Any:
    """Convert a filter value to the Python type of its exact match column."""
    try:
        if column_type == "integer":
            return int(value)
        if column_type == "float":
            return float(value)
        if column_type == "boolean":
            return BOOLEAN_VALUES[value.strip().lower()]
    except (KeyError, ValueError):
        raise typer.BadParameter(f"{column} expects a {column_type} value, got {value!r}") from None
    return value


def parse_filters(
    where: List[str], column_types: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """Parse repeated column=value options, typed by the configured exact match columns."""
    column_types = column_types or {}
    filters: Dict[str, Any] = {}
    for condition in where:
        column, separator, value = condition.partition("=")
        column = column.strip()
        if not separator or not column:
            raise typer.BadParameter(f"Expected column=value, got {condition!r}")
        filters[column] = parse_filter_value(column, value, column_types.get(column))
    return filters


@app.command()
def index(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON lines file"),
    batch_size: int = typer.Option(100, "--batch-size", "-b", min=1, help="Documents per batch"),
) -> None:
    """Index documents read from a JSON lines file."""
    config = ScoutDatabaseConfig()
    with file.open(encoding="utf-8") as f:
        documents = [parse_document(line) for line in f if line.strip()]

    async def _index():
        search_engine = await open_engine(config)
        for start in range(0, len(documents), batch_size):
            await search_engine.update(documents[start : start + batch_size])

    try:
        run_with_cleanup(_index())
    except ScoutDatabaseError as e:
        logger.error(f"Indexing {file} failed: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))} ({escape(str(e.cause))})")
        raise typer.Exit(1)

    console.print(f"[green]Indexed {len(documents)} documents[/green]")


@app.command()
def search(
    document_type: str = typer.Argument(..., help="Document type to search"),
    query: str = typer.Argument(..., help="Search query"),
    where: List[str] = typer.Option(
        [], "--where", "-w", help="Exact match filter column=value, repeatable"
    ),
    page: int = typer.Option(1, "--page", min=1, help="Page number"),
    per_page: Optional[int] = typer.Option(None, "--per-page", min=1, help="Page size"),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Maximum results"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON"),
) -> None:
    """Search the index and print matching document identifiers, best first."""
    config = ScoutDatabaseConfig()
    search_query = SearchQuery(
        document_type=document_type,
        query=query,
        filters=parse_filters(where, config.exact_match_columns),
        limit=limit,
    )

    async def _search():
        search_engine = await open_engine(config)
        if per_page is not None:
            return await search_engine.paginate(search_query, per_page, page)
        return await search_engine.search(search_query)

    try:
        result = run_with_cleanup(_search())
    except ScoutDatabaseError as e:
        logger.error(f"Search failed: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))} ({escape(str(e.cause))})")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(result.to_dict()))
        return

    if not result.identifiers:
        console.print(f"[yellow]No results[/yellow] ({result.hits} hits)")
        return

    for position, identifier in enumerate(result.identifiers, start=1):
        console.print(f"{position:>4}. {identifier}")
    console.print(f"[dim]{result.hits} hits[/dim]")


@app.command()
def flush(
    document_type: str = typer.Argument(..., help="Document type to remove"),
) -> None:
    """Remove every document of a type from the index."""
    config = ScoutDatabaseConfig()

    async def _flush():
        search_engine = await open_engine(config)
        await search_engine.flush(document_type)

    try:
        run_with_cleanup(_flush())
    except ScoutDatabaseError as e:
        logger.error(f"Flushing {document_type} failed: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))} ({escape(str(e.cause))})")
        raise typer.Exit(1)

    console.print(f"[green]Flushed all documents of type {document_type}[/green]")
