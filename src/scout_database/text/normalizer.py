"""Turns searchable fields and query strings into stemmed terms."""

from collections import Counter
from typing import Any, Dict, List, Mapping, Tuple

from scout_database.schemas import ExactValue, FieldValue, FreeText
from scout_database.text.stemmer import Stemmer
from scout_database.text.tokenizer import Tokenizer


class TextNormalizer:
    """Lower-cases, tokenizes and stems text.

    Documents and queries go through the same pipeline, so a query keyword and
    an indexed term compare equal whenever they stem to the same word.
    """

    def __init__(self, tokenizer: Tokenizer, stemmer: Stemmer):
        self.tokenizer = tokenizer
        self.stemmer = stemmer

    def stems(self, text: str) -> List[str]:
        """Stems of all tokens of the text, in input order."""
        words = self.tokenizer.tokenize(text.lower())
        return [self.stemmer.stem(word) for word in words]

    def term_hits(self, texts: List[str]) -> Dict[str, int]:
        """Count the occurrences of every distinct stem across all texts."""
        hits: Counter[str] = Counter()
        for text in texts:
            hits.update(self.stems(text))
        return dict(hits)


def split_fields(fields: Mapping[str, FieldValue]) -> Tuple[List[str], Dict[str, Any]]:
    """Partition searchable fields into free texts and exact-match values."""
    texts: List[str] = []
    exact_values: Dict[str, Any] = {}
    for name, value in fields.items():
        if isinstance(value, ExactValue):
            exact_values[name] = value.value
        elif isinstance(value, FreeText):
            texts.append(value.text)
        elif value is not None:
            texts.append(str(value))
    return texts, exact_values
