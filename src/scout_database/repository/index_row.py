"""Index row data structure."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable


@dataclass
class IndexRow:
    """One posting: the hits of a term within a single document."""

    document_type: str
    document_id: int
    term: str
    length: int
    num_hits: int
    exact_values: Dict[str, Any] = field(default_factory=dict)

    def to_insert(self, exact_columns: Iterable[str] = ()) -> Dict[str, Any]:
        """Column values for an insert.

        Every name in ``exact_columns`` is present in the result, set to None
        when this row's document has no such value, so that all rows of a batch
        share one set of columns.
        """
        values: Dict[str, Any] = {
            "document_type": self.document_type,
            "document_id": self.document_id,
            "term": self.term,
            "length": self.length,
            "num_hits": self.num_hits,
        }
        for column in exact_columns:
            values[column] = self.exact_values.get(column)
        return values
