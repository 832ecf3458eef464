import math
from contextlib import asynccontextmanager
from enum import Enum, auto
from pathlib import Path
from typing import AsyncGenerator, Optional

from loguru import logger
from sqlalchemy import Table, event
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Module level state, one engine per database url
_engines: dict[str, AsyncEngine] = {}
_session_makers: dict[str, async_sessionmaker[AsyncSession]] = {}

# serialization_failure, deadlock_detected, lock_not_available, query_canceled
TRANSIENT_SQLSTATES = {"40001", "40P01", "55P03", "57014"}
# ER_LOCK_WAIT_TIMEOUT, ER_LOCK_DEADLOCK
TRANSIENT_MYSQL_ERRORS = {1205, 1213}
TRANSIENT_SQLITE_MESSAGES = (
    "database is locked",
    "database table is locked",
    "database is busy",
)


class DatabaseType(Enum):
    """Types of supported SQLite databases."""

    MEMORY = auto()
    FILESYSTEM = auto()

    @classmethod
    def get_db_url(cls, db_path: Optional[Path], db_type: "DatabaseType") -> str:
        """Get SQLAlchemy URL for database path."""
        if db_type == cls.MEMORY:
            logger.info("Using in-memory SQLite database")
            return "sqlite+aiosqlite://"

        return f"sqlite+aiosqlite:///{db_path}"


def _sql_ln(value):
    if value is None:
        return None
    if value <= 0:
        raise ValueError(f"cannot take logarithm of {value}")
    return math.log(value)


def _sql_sqrt(value):
    if value is None:
        return None
    if value < 0:
        raise ValueError(f"cannot take square root of {value}")
    return math.sqrt(value)


def _configure_sqlite(engine: AsyncEngine, in_memory: bool) -> None:
    """Apply connection pragmas and register the math functions used for scoring.

    SQLite only ships ``ln`` and ``sqrt`` when compiled with math functions, so
    Python implementations are registered on every connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function("ln", 1, _sql_ln, deterministic=True)
        dbapi_connection.create_function("sqrt", 1, _sql_sqrt, deterministic=True)

        cursor = dbapi_connection.cursor()
        try:
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=10000")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA temp_store=MEMORY")
        finally:
            cursor.close()


def _create_engine_and_session(
    db_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Internal helper to create engine and session maker."""
    logger.debug(f"Creating engine for db_url: {db_url}")
    if db_url.startswith("sqlite"):
        engine = create_async_engine(db_url, connect_args={"check_same_thread": False})
        in_memory = db_url.rstrip("/").endswith(("sqlite+aiosqlite:", ":memory:"))
        _configure_sqlite(engine, in_memory)
    else:
        engine = create_async_engine(db_url, pool_pre_ping=True)
    session_maker = async_sessionmaker(engine, expire_on_commit=False)
    return engine, session_maker


@asynccontextmanager
async def scoped_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Get a session that commits on success and rolls back on any error.

    Args:
        session_maker: Session maker to create the session from
    """
    session = session_maker()
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_or_create_db(
    db_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Get or create database engine and session maker for a database url."""
    if db_url not in _engines:
        engine, session_maker = _create_engine_and_session(db_url)
        _engines[db_url] = engine
        _session_makers[db_url] = session_maker

    return _engines[db_url], _session_makers[db_url]


async def shutdown_db() -> None:
    """Clean up all database connections."""
    for db_url, engine in _engines.items():
        await engine.dispose()
        logger.debug(f"Disposed engine for: {db_url}")

    _engines.clear()
    _session_makers.clear()


@asynccontextmanager
async def engine_session_factory(
    db_url: str,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None]:
    """Create an engine and session factory that are disposed on exit.

    Note: This is primarily used for testing and one-shot commands where a fresh
    engine is wanted. Long running hosts use get_or_create_db() instead.
    """
    engine, session_maker = _create_engine_and_session(db_url)
    try:
        yield engine, session_maker
    finally:
        await engine.dispose()


async def create_index_table(engine: AsyncEngine, table: Table) -> None:
    """Create the index table and its indexes if they don't exist."""
    logger.info(f"Creating search index table: {table.name}")
    async with engine.begin() as conn:
        await conn.run_sync(table.create, checkfirst=True)


async def drop_index_table(engine: AsyncEngine, table: Table) -> None:
    """Drop the index table if it exists."""
    logger.info(f"Dropping search index table: {table.name}")
    async with engine.begin() as conn:
        await conn.run_sync(table.drop, checkfirst=True)


def is_transient_error(exc: BaseException) -> bool:
    """Whether a store failure is a conflict that may succeed when retried.

    Serialization failures, deadlocks, lock timeouts and dropped connections are
    transient. Constraint violations, schema errors and everything that is not a
    DBAPI error are not.
    """
    if not isinstance(exc, DBAPIError):
        return False
    if exc.connection_invalidated:
        return True

    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in TRANSIENT_SQLSTATES:
        return True

    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int) and args[0] in TRANSIENT_MYSQL_ERRORS:
        return True

    message = str(orig).lower()
    return any(fragment in message for fragment in TRANSIENT_SQLITE_MESSAGES)
