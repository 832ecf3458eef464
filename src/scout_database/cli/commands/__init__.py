"""CLI commands for scout-database."""

from scout_database.cli.commands import db, search

__all__ = ["db", "search"]
