"""Documents going into the index and results coming out of it.

A host object becomes searchable by implementing ``SearchableDocument``. Each of
its searchable fields is either ``FreeText``, which is tokenized and stemmed, or
an ``ExactValue``, which is copied verbatim into a column of the same name on
every index row of the document and can be used to filter searches.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union, runtime_checkable


@dataclass(frozen=True)
class FreeText:
    """Text that is lower-cased, tokenized and stemmed before indexing."""

    text: str


@dataclass(frozen=True)
class ExactValue:
    """A scalar stored as-is in its own index column for equality filtering."""

    value: Any


FieldValue = Union[FreeText, ExactValue, str, int, float, None]


@runtime_checkable
class SearchableDocument(Protocol):
    """Contract for objects that can be written to the index."""

    def search_document_type(self) -> str:
        """Name of the collection the document belongs to."""
        ...

    def search_key(self) -> int:
        """Identifier of the document within its type."""
        ...

    def to_searchable_fields(self) -> Mapping[str, FieldValue]:
        """Searchable fields by name."""
        ...


@dataclass
class Document:
    """Plain implementation of SearchableDocument."""

    document_type: str
    document_id: int
    fields: Dict[str, FieldValue] = field(default_factory=dict)

    def search_document_type(self) -> str:
        return self.document_type

    def search_key(self) -> int:
        return self.document_id

    def to_searchable_fields(self) -> Mapping[str, FieldValue]:
        return self.fields


@dataclass(frozen=True)
class SearchQuery:
    """Parameters of a search against one document type.

    ``filters`` are exact-match conditions on exact-match columns and ``limit``
    caps the number of identifiers returned when no page size is given.
    """

    document_type: str
    query: str
    filters: Mapping[str, Any] = field(default_factory=dict)
    limit: Optional[int] = None


@dataclass
class SearchResult:
    """Ranked document identifiers of a search.

    ``identifiers`` is ordered best match first and may hold fewer entries than
    ``hits`` when a page size or limit was applied.
    """

    query: SearchQuery
    identifiers: List[int] = field(default_factory=list)
    hits: Optional[int] = None

    def __post_init__(self):
        if self.hits is None:
            self.hits = len(self.identifiers)

    def to_dict(self) -> Dict[str, Any]:
        return {"ids": list(self.identifiers), "hits": self.hits}
