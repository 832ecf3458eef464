"""Common test fixtures.

Tests run against a temporary SQLite file through aiosqlite, with the same
engine setup the package uses in production.
"""

from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy import MetaData, Table, insert, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from scout_database import db
from scout_database.config import IndexingConfiguration, SearchConfiguration
from scout_database.models.index import build_index_table
from scout_database.repository.indexer import DatabaseIndexer
from scout_database.repository.seeker import DatabaseSeeker
from scout_database.text.normalizer import TextNormalizer
from scout_database.text.stemmer import NullStemmer, PorterStemmer
from scout_database.text.tokenizer import UnicodeTokenizer

TENANT_ID_1 = "83d774cb-0b9f-4e13-bff8-b1bb7764d662"
TENANT_ID_2 = "79502181-9ecc-418a-9742-caf7f704f72e"


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def engine_factory(
    database_url,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None]:
    async with db.engine_session_factory(database_url) as (engine, session_maker):
        yield engine, session_maker


@pytest.fixture
def session_maker(engine_factory) -> async_sessionmaker[AsyncSession]:
    _, session_maker = engine_factory
    return session_maker


@pytest_asyncio.fixture
async def index_table(engine_factory) -> Table:
    """Index table with a tenant_id exact-match column."""
    engine, _ = engine_factory
    table = build_index_table(MetaData(), "scout_index", {"tenant_id": "string"})
    await db.create_index_table(engine, table)
    return table


@pytest.fixture
def porter_normalizer() -> TextNormalizer:
    return TextNormalizer(UnicodeTokenizer(), PorterStemmer())


@pytest.fixture
def null_normalizer() -> TextNormalizer:
    return TextNormalizer(UnicodeTokenizer(), NullStemmer())


@pytest.fixture
def indexer(session_maker, index_table, null_normalizer) -> DatabaseIndexer:
    return DatabaseIndexer(
        session_maker, index_table, null_normalizer, IndexingConfiguration(transaction_attempts=3)
    )


@pytest.fixture
def make_seeker(session_maker, index_table, null_normalizer) -> Callable[..., DatabaseSeeker]:
    """Build a seeker with the given search configuration overrides."""

    def _make_seeker(**overrides) -> DatabaseSeeker:
        settings = {
            "idf_weight": 1.0,
            "tf_weight": 1.0,
            "deviation_weight": 1.0,
            "wildcard_last_token": True,
            "require_match_for_all_tokens": False,
        }
        settings.update(overrides)
        return DatabaseSeeker(
            session_maker, index_table, null_normalizer, SearchConfiguration(**settings)
        )

    return _make_seeker


async def insert_rows(session_maker, table: Table, rows: list[dict]) -> None:
    async with db.scoped_session(session_maker) as session:
        await session.execute(insert(table), rows)


async def fetch_rows(session_maker, table: Table, *conditions) -> list[dict]:
    statement = (
        select(table)
        .where(*conditions)
        .order_by(table.c.document_type, table.c.document_id, table.c.term)
    )
    async with db.scoped_session(session_maker) as session:
        result = await session.execute(statement)
        return [dict(row._mapping) for row in result]


def posting(document_type: str, document_id: int, term: str, num_hits: int, **extra) -> dict:
    return {
        "document_type": document_type,
        "document_id": document_id,
        "term": term,
        "length": len(term),
        "num_hits": num_hits,
        **extra,
    }


COMMON_POSTINGS = [
    posting("user", 1, "abc", 1),
    posting("user", 2, "abc", 4),
    posting("user", 1, "def", 2),
    posting("user", 3, "fooo", 1),
    posting("user", 4, "foo", 1),
    posting("user", 5, "one", 1),
    posting("user", 6, "euro", 1),
    posting("user", 7, "euro", 1),
    posting("user", 8, "cent", 1),
    posting("user", 10, "hello", 1),
    posting("user", 11, "hello", 4),
    posting("user", 100, "baz", 1),
    posting("user", 101, "baz", 1),
    posting("user", 102, "baz", 1),
    posting("user", 103, "baz", 1),
    posting("user", 104, "baz", 1),
    posting("post", 1, "abc", 1),
    posting("comment", 3, "abc", 2),
]


@pytest_asyncio.fixture
async def common_postings(session_maker, index_table) -> list[dict]:
    """Postings of several document types, none scoped to a tenant."""
    rows = [dict(row, tenant_id=None) for row in COMMON_POSTINGS]
    await insert_rows(session_maker, index_table, rows)
    return rows


@pytest_asyncio.fixture
async def tenant_postings(session_maker, index_table) -> list[dict]:
    """The common postings for one tenant plus a second tenant's user."""
    rows = [dict(row, tenant_id=TENANT_ID_1) for row in COMMON_POSTINGS]
    rows += [
        posting("user", 3, "john", 1, tenant_id=TENANT_ID_2),
        posting("user", 3, "doe", 1, tenant_id=TENANT_ID_2),
        posting("user", 3, "example", 1, tenant_id=TENANT_ID_2),
    ]
    await insert_rows(session_maker, index_table, rows)
    return rows
