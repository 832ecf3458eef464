from typing import Optional

import typer

from scout_database.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        import scout_database

        typer.echo(f"scout-database version: {scout_database.__version__}")
        raise typer.Exit()


app = typer.Typer(name="scout-db", no_args_is_help=True)


@app.callback()
def app_callback(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Log level written to stderr",
        envvar="SCOUT_DB_LOG_LEVEL",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """scout-database - full-text search index stored in your SQL database."""
    setup_logging(log_level)
