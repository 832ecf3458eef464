from scout_database.repository.index_row import IndexRow
from scout_database.repository.indexer import DatabaseIndexer
from scout_database.repository.seeker import DatabaseSeeker, IndexStatistics

__all__ = [
    "DatabaseIndexer",
    "DatabaseSeeker",
    "IndexRow",
    "IndexStatistics",
]
