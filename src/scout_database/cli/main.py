"""Main CLI entry point for scout-database."""

import sys

if sys.platform == "win32":  # pragma: no cover
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from scout_database.cli.app import app

# Register commands
from scout_database.cli.commands import db, search  # noqa: F401, E402

if __name__ == "__main__":  # pragma: no cover
    app()
