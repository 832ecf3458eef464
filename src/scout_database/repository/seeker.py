"""Ranked search over the index table.

The whole ranking runs inside the database as a chain of common table
expressions, so no document text is loaded into the application:

    corpus           distinct documents of the type (IDF corpus size)
    matching_terms   stored terms equal to a keyword, or starting with the
                     wildcarded last keyword, tagged with that keyword's length
    term_frequency   total hits of every matching term across the type
    scored_matches   one score per index row of a matching term

The scored rows are grouped per document and ordered by
``sqrt(distinct matched terms) * sum(score)``, best first, ties broken by the
lower document id.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from loguru import logger
from sqlalchemy import (
    Float,
    Integer,
    Select,
    Table,
    case,
    cast,
    distinct,
    func,
    literal,
    literal_column,
    select,
    true,
    union,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from scout_database import db
from scout_database.config import SearchConfiguration
from scout_database.errors import QueryFailed
from scout_database.models.index import MAX_TERM_LENGTH
from scout_database.schemas import SearchQuery, SearchResult
from scout_database.text.normalizer import TextNormalizer

WILDCARD = "%"


@dataclass
class IndexStatistics:
    """Size of the index for one document type."""

    document_type: str
    documents: int
    terms: int
    postings: int


class DatabaseSeeker:
    """Searches the index for documents of one type.

    The score of a matched row combines three weighted components:

    - inverse document frequency: terms with many hits across the type are
      likely filler words and score lower
    - term frequency: more hits of the term in the document score higher
    - term deviation: stored terms close in length to the searched keyword
      score higher, which ranks exact matches above prefix matches
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        table: Table,
        normalizer: TextNormalizer,
        config: SearchConfiguration | None = None,
    ):
        self.session_maker = session_maker
        self.table = table
        self.normalizer = normalizer
        self.config = config or SearchConfiguration()

    def keywords(self, query: str) -> List[str]:
        """Stemmed keywords of a query; the last one gets a wildcard if configured."""
        # Stored terms are cut to the column length, keywords must match them
        keywords = [stem[:MAX_TERM_LENGTH] for stem in self.normalizer.stems(query)]
        if keywords and self.config.wildcard_last_token:
            keywords[-1] += WILDCARD
        return keywords

    async def search(
        self, query: SearchQuery, page: int = 1, page_size: Optional[int] = None
    ) -> SearchResult:
        """Search the index and return the ranked identifiers of matching documents.

        Args:
            query: Document type, query string, exact-match filters and limit
            page: 1-based page number, only used together with page_size
            page_size: Number of identifiers per page; without it the query's
                own limit applies, if any

        Returns:
            SearchResult with the identifiers of the requested page and the
            number of matching documents over all pages
        """
        if page_size is not None and page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")

        keywords = self.keywords(query.query)
        if not keywords:
            logger.debug(f"Query {query.query!r} has no keywords, skipping search")
            return SearchResult(query, [], 0)

        ranking = self.build_ranking_query(query, keywords)

        limit = page_size if page_size is not None else query.limit
        statement = ranking
        if page_size is not None:
            statement = statement.offset((max(page, 1) - 1) * page_size)
        if limit:
            statement = statement.limit(limit)

        logger.debug(
            f"Searching type={query.document_type} keywords={keywords} "
            f"page={page} page_size={page_size} limit={limit}"
        )

        try:
            async with db.scoped_session(self.session_maker) as session:
                result = await session.execute(statement)
                identifiers = [int(document_id) for document_id in result.scalars().all()]

                if limit:
                    count = select(func.count()).select_from(
                        ranking.order_by(None).subquery("ranked_documents")
                    )
                    hits = (await session.execute(count)).scalar_one()
                else:
                    hits = len(identifiers)
        except SQLAlchemyError as exc:
            logger.error(f"Search of type {query.document_type} failed: {exc}")
            raise QueryFailed("Searching the index failed.", exc) from exc

        return SearchResult(query, identifiers, hits)

    def build_ranking_query(self, query: SearchQuery, keywords: List[str]) -> Select:
        """Build the grouped and ordered ranking query, without offset or limit."""
        table = self.table
        config = self.config
        conditions = self._conditions(query)

        corpus = (
            select(func.count(distinct(table.c.document_id)).label("total_documents"))
            .where(*conditions)
            .cte("corpus")
        )

        keyword_selects = []
        for keyword in keywords:
            if keyword.endswith(WILDCARD):
                term_clause = table.c.term.like(keyword)
            else:
                term_clause = table.c.term == keyword
            keyword_length = len(keyword.rstrip(WILDCARD))
            keyword_selects.append(
                select(
                    table.c.term.label("term"),
                    literal_column(str(keyword_length), Integer).label("keyword_length"),
                ).where(*conditions, term_clause)
            )
        if len(keyword_selects) == 1:
            matching_terms = keyword_selects[0].distinct().cte("matching_terms")
        else:
            matching_terms = union(*keyword_selects).cte("matching_terms")

        term_frequency = (
            select(table.c.term, func.sum(table.c.num_hits).label("frequency"))
            .where(*conditions, table.c.term.in_(select(matching_terms.c.term)))
            .group_by(table.c.term)
            .cte("term_frequency")
        )

        frequency = case(
            (term_frequency.c.frequency > 1, term_frequency.c.frequency),
            else_=1,
        )
        inverse_document_frequency = 1 + func.ln(
            literal(config.idf_weight, Float)
            * cast(corpus.c.total_documents, Float)
            / (frequency + 1)
        )
        term_frequency_score = literal(config.tf_weight, Float) * func.sqrt(table.c.num_hits)
        term_deviation_score = literal(config.deviation_weight, Float) * func.sqrt(
            literal(1.0, Float)
            / (func.abs(table.c.length - matching_terms.c.keyword_length) + 1)
        )

        scored_matches = (
            select(
                table.c.document_id,
                table.c.term,
                (
                    inverse_document_frequency * (term_frequency_score + term_deviation_score)
                ).label("score"),
            )
            .select_from(
                table.join(matching_terms, matching_terms.c.term == table.c.term)
                .join(term_frequency, term_frequency.c.term == table.c.term)
                .join(corpus, true())
            )
            .where(*conditions)
            .cte("scored_matches")
        )

        matched_terms = func.count(distinct(scored_matches.c.term))
        ranking = select(scored_matches.c.document_id).group_by(scored_matches.c.document_id)
        if config.require_match_for_all_tokens:
            ranking = ranking.having(matched_terms >= len(keywords))

        return ranking.order_by(
            (func.sqrt(matched_terms) * func.sum(scored_matches.c.score)).desc(),
            scored_matches.c.document_id.asc(),
        )

    async def statistics(self) -> List[IndexStatistics]:
        """Document, term and posting counts per document type."""
        table = self.table
        statement = (
            select(
                table.c.document_type,
                func.count(distinct(table.c.document_id)),
                func.count(distinct(table.c.term)),
                func.count(),
            )
            .group_by(table.c.document_type)
            .order_by(table.c.document_type)
        )
        try:
            async with db.scoped_session(self.session_maker) as session:
                rows = (await session.execute(statement)).all()
        except SQLAlchemyError as exc:
            raise QueryFailed("Reading index statistics failed.", exc) from exc

        return [
            IndexStatistics(
                document_type=row[0], documents=row[1], terms=row[2], postings=row[3]
            )
            for row in rows
        ]

    def _conditions(self, query: SearchQuery) -> List[ColumnElement[bool]]:
        """Restrict rows to the query's document type and exact-match filters."""
        conditions: List[ColumnElement[bool]] = [
            self.table.c.document_type == query.document_type
        ]
        for column_name, value in query.filters.items():
            column = self.table.c.get(column_name)
            if column is None:
                raise QueryFailed(f"Unknown exact match column: {column_name}")
            conditions.append(self._equals(column, value))
        return conditions

    @staticmethod
    def _equals(column, value: Any) -> ColumnElement[bool]:
        if value is None:
            return column.is_(None)
        return column == value
