"""Table definitions for the search index."""

from scout_database.models.index import MAX_TERM_LENGTH, build_index_table

__all__ = ["MAX_TERM_LENGTH", "build_index_table"]
