"""utility functions for commands"""

import asyncio
from typing import Any, Coroutine, TypeVar

from scout_database import db
from scout_database.config import ScoutDatabaseConfig
from scout_database.engine import DatabaseEngine

T = TypeVar("T")


def run_with_cleanup(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine and dispose database connections before the loop closes."""

    async def _runner() -> T:
        try:
            return await coro
        finally:
            await db.shutdown_db()

    return asyncio.run(_runner())


async def open_engine(config: ScoutDatabaseConfig) -> DatabaseEngine:
    """Create the search engine for the configured database."""
    config.ensure_data_dir()
    _, session_maker = await db.get_or_create_db(config.database_url)
    return DatabaseEngine.from_config(config, session_maker)
