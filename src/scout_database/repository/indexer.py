"""Writes documents to the search index and removes them from it."""

from collections import Counter
from typing import Dict, Iterable, List, Sequence

from loguru import logger
from sqlalchemy import Table, and_, delete, insert, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from scout_database import db
from scout_database.config import IndexingConfiguration
from scout_database.errors import DeletionFailed, IndexingFailed
from scout_database.models.index import MAX_TERM_LENGTH
from scout_database.repository.index_row import IndexRow
from scout_database.schemas import SearchableDocument
from scout_database.text.normalizer import TextNormalizer, split_fields

INSERT_CHUNK_SIZE = 100


class DatabaseIndexer:
    """Keeps the index table in sync with documents.

    A document's rows are always replaced as a whole: indexing deletes every
    existing row of the batch's documents and inserts the freshly computed rows
    in the same transaction, so readers never see a mix of old and new terms.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        table: Table,
        normalizer: TextNormalizer,
        config: IndexingConfiguration | None = None,
    ):
        self.session_maker = session_maker
        self.table = table
        self.normalizer = normalizer
        self.config = config or IndexingConfiguration()

    def build_rows(self, documents: Iterable[SearchableDocument]) -> List[IndexRow]:
        """Compute the index rows of the given documents.

        Free-text fields of a document are normalized into one multiset of stems;
        each distinct stem becomes one row carrying its hit count and the
        document's exact-match values.
        """
        rows: List[IndexRow] = []
        for document in documents:
            texts, exact_values = split_fields(document.to_searchable_fields())

            terms: Counter[str] = Counter()
            for term, hits in self.normalizer.term_hits(texts).items():
                terms[term[:MAX_TERM_LENGTH]] += hits

            for term, hits in terms.items():
                rows.append(
                    IndexRow(
                        document_type=document.search_document_type(),
                        document_id=document.search_key(),
                        term=term,
                        length=len(term),
                        num_hits=hits,
                        exact_values=dict(exact_values),
                    )
                )
        return rows

    async def index(self, documents: Iterable[SearchableDocument]) -> None:
        """Index the given documents. Works for inserts and updates alike.

        The delete-then-insert transaction is retried on conflict-class store
        errors up to the configured number of attempts. Any other error, or the
        last failed attempt, raises IndexingFailed with the store left unchanged.
        """
        documents = list(documents)
        if not documents:
            return

        rows = self.build_rows(documents)

        # All rows of one write share the same exact-match columns
        exact_columns = sorted({column for row in rows for column in row.exact_values})
        values = [row.to_insert(exact_columns) for row in rows]

        attempts = self.config.transaction_attempts
        for attempt in range(1, attempts + 1):
            try:
                async with db.scoped_session(self.session_maker) as session:
                    await self._write_batch(session, documents, values)
            except SQLAlchemyError as exc:
                if attempt < attempts and db.is_transient_error(exc):
                    logger.warning(
                        f"Indexing transaction conflicted (attempt {attempt}/{attempts}), "
                        f"retrying: {exc}"
                    )
                    continue
                logger.error(
                    f"Indexing {len(documents)} documents failed after {attempt} attempt(s): {exc}"
                )
                raise IndexingFailed(
                    "Extending or updating search index failed.", exc, attempts=attempt
                ) from exc

            logger.debug(f"Indexed {len(documents)} documents with {len(values)} terms")
            return

    async def delete_from_index(self, documents: Iterable[SearchableDocument]) -> None:
        """Remove all rows of the given documents from the index."""
        documents = list(documents)
        if not documents:
            return

        try:
            async with db.scoped_session(self.session_maker) as session:
                await self._delete_documents(session, documents)
        except SQLAlchemyError as exc:
            logger.error(f"Deleting {len(documents)} documents from the index failed: {exc}")
            raise DeletionFailed("Deleting entries from search index failed.", exc) from exc

        logger.debug(f"Deleted {len(documents)} documents from the index")

    async def delete_index(self, document_type: str) -> None:
        """Remove every row of a document type from the index."""
        try:
            async with db.scoped_session(self.session_maker) as session:
                result = await session.execute(
                    delete(self.table).where(self.table.c.document_type == document_type)
                )
        except SQLAlchemyError as exc:
            logger.error(f"Deleting index of type {document_type} failed: {exc}")
            raise DeletionFailed(
                "Deleting all entries of type from search index failed.", exc
            ) from exc

        logger.info(f"Deleted {result.rowcount} index rows of type {document_type}")

    async def _write_batch(
        self,
        session: AsyncSession,
        documents: Sequence[SearchableDocument],
        values: List[dict],
    ) -> None:
        await self._delete_documents(session, documents)
        for start in range(0, len(values), INSERT_CHUNK_SIZE):
            await session.execute(insert(self.table), values[start : start + INSERT_CHUNK_SIZE])

    async def _delete_documents(
        self, session: AsyncSession, documents: Sequence[SearchableDocument]
    ) -> None:
        await session.execute(delete(self.table).where(self._documents_clause(documents)))

    def _documents_clause(self, documents: Sequence[SearchableDocument]) -> ColumnElement[bool]:
        """Exact (document_type, document_id) match for every given document."""
        ids_by_type: Dict[str, Dict[int, None]] = {}
        for document in documents:
            ids_by_type.setdefault(document.search_document_type(), {})[document.search_key()] = None

        return or_(
            *(
                and_(
                    self.table.c.document_type == document_type,
                    self.table.c.document_id.in_(list(ids)),
                )
                for document_type, ids in ids_by_type.items()
            )
        )
