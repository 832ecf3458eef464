"""Schema of the search index table.

The index is a single flat table holding one posting per (document type,
document, term). Exact-match columns are appended per deployment, so the table is
built as a SQLAlchemy Core ``Table`` rather than a declarative model.
"""

from typing import Mapping

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
)
from sqlalchemy.types import TypeEngine

MAX_TERM_LENGTH = 128

EXACT_COLUMN_TYPES: dict[str, type[TypeEngine]] = {
    "string": String,
    "integer": BigInteger,
    "float": Float,
    "boolean": Boolean,
}

# SQLite only autoincrements INTEGER PRIMARY KEY columns
PrimaryKeyType = BigInteger().with_variant(Integer(), "sqlite")


def build_index_table(
    metadata: MetaData,
    name: str = "scout_index",
    exact_match_columns: Mapping[str, str] | None = None,
) -> Table:
    """Build the index table definition.

    Args:
        metadata: MetaData the table is registered with
        name: Full table name, including any configured prefix
        exact_match_columns: Extra nullable columns, name -> one of EXACT_COLUMN_TYPES
    """
    extra_columns = []
    for column_name, type_name in (exact_match_columns or {}).items():
        try:
            column_type = EXACT_COLUMN_TYPES[type_name]
        except KeyError:
            raise ValueError(
                f"Unsupported exact match column type for {column_name}: {type_name}"
            ) from None
        extra_columns.append(Column(column_name, column_type(), nullable=True))

    return Table(
        name,
        metadata,
        Column("id", PrimaryKeyType, primary_key=True, autoincrement=True),
        Column("document_type", String(255), nullable=False),
        Column("document_id", BigInteger, nullable=False),
        Column("term", String(MAX_TERM_LENGTH), nullable=False),
        Column("length", Integer, nullable=False),
        Column("num_hits", Integer, nullable=False),
        *extra_columns,
        Index(f"ix_{name}_document_type_term", "document_type", "term"),
        Index(f"ix_{name}_document_type_document_id", "document_type", "document_id"),
        Index(f"ix_{name}_document_id", "document_id"),
    )
