"""Search engine facade combining the indexer and the seeker."""

from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scout_database.config import ScoutDatabaseConfig
from scout_database.models.index import build_index_table
from scout_database.repository.indexer import DatabaseIndexer
from scout_database.repository.seeker import DatabaseSeeker
from scout_database.schemas import SearchableDocument, SearchQuery, SearchResult
from scout_database.text.normalizer import TextNormalizer
from scout_database.text.stemmer_factory import create_stemmer, create_tokenizer

Resolver = Callable[[List[int]], Awaitable[Iterable[Any]]]


def _default_key(obj: Any) -> int:
    return obj.search_key()


class DatabaseEngine:
    """Entry point used by host applications.

    Indexing and deletion are delegated to DatabaseIndexer, searching to
    DatabaseSeeker. Mapping identifiers back to host objects is left to a
    resolver supplied by the host.
    """

    def __init__(self, indexer: DatabaseIndexer, seeker: DatabaseSeeker):
        self.indexer = indexer
        self.seeker = seeker

    @classmethod
    def from_config(
        cls,
        config: ScoutDatabaseConfig,
        session_maker: async_sessionmaker[AsyncSession],
        metadata: Optional[MetaData] = None,
    ) -> "DatabaseEngine":
        """Wire tokenizer, stemmer, index table, indexer and seeker from settings."""
        table = build_index_table(
            metadata if metadata is not None else MetaData(),
            config.index_table_name,
            config.exact_match_columns,
        )
        normalizer = TextNormalizer(
            create_tokenizer(config.tokenizer), create_stemmer(config.stemmer)
        )
        return cls(
            DatabaseIndexer(session_maker, table, normalizer, config.indexing),
            DatabaseSeeker(session_maker, table, normalizer, config.search),
        )

    @property
    def table(self):
        return self.indexer.table

    async def update(self, documents: Iterable[SearchableDocument]) -> None:
        """Add the documents to the index or replace their existing entries."""
        await self.indexer.index(documents)

    async def delete(self, documents: Iterable[SearchableDocument]) -> None:
        """Remove the documents from the index."""
        await self.indexer.delete_from_index(documents)

    async def flush(self, document_type: str) -> None:
        """Remove all documents of a type from the index."""
        await self.indexer.delete_index(document_type)

    async def search(self, query: SearchQuery) -> SearchResult:
        return await self.seeker.search(query)

    async def paginate(self, query: SearchQuery, per_page: int, page: int) -> SearchResult:
        return await self.seeker.search(query, page=page, page_size=per_page)

    def map_ids(self, result: SearchResult) -> List[int]:
        return list(result.identifiers)

    async def map(
        self,
        result: SearchResult,
        resolver: Resolver,
        key: Callable[[Any], int] = _default_key,
    ) -> List[Any]:
        """Resolve the result's identifiers into host objects, in ranking order.

        Args:
            result: Result of a search
            resolver: Loads host objects for a list of identifiers, in any order
            key: Returns the identifier of a host object

        Objects the resolver returns for identifiers outside the result are dropped.
        """
        identifiers = result.identifiers
        if not identifiers:
            return []

        positions = {identifier: position for position, identifier in enumerate(identifiers)}
        objects = [obj for obj in await resolver(list(identifiers)) if key(obj) in positions]
        return sorted(objects, key=lambda obj: positions[key(obj)])

    def get_total_count(self, result: SearchResult) -> int:
        return result.hits or 0


def resolve_from(objects: Sequence[Any], key: Callable[[Any], int] = _default_key) -> Resolver:
    """Resolver over an in-memory collection, mostly useful for tests and scripts."""

    async def resolver(identifiers: List[int]) -> Iterable[Any]:
        wanted = set(identifiers)
        return [obj for obj in objects if key(obj) in wanted]

    return resolver
