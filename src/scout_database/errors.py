"""Typed errors raised at the indexer and seeker boundaries."""

from typing import Optional


class ScoutDatabaseError(RuntimeError):
    """Base class for failures surfaced by the search index.

    The store exception that caused the failure is chained as ``__cause__`` and
    kept on ``cause`` for callers that only inspect the raised object.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class IndexingFailed(ScoutDatabaseError):
    """Raised when a batch could not be written to the index."""

    def __init__(
        self, message: str, cause: Optional[BaseException] = None, attempts: int = 1
    ):
        super().__init__(message, cause)
        self.attempts = attempts


class DeletionFailed(ScoutDatabaseError):
    """Raised when rows could not be removed from the index."""


class QueryFailed(ScoutDatabaseError):
    """Raised when the store rejected a search query."""
