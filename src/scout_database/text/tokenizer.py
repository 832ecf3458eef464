"""Tokenizer protocol and the default Unicode tokenizer."""

import re
from typing import List, Protocol

# Runs of Unicode letters or digits; \w minus the underscore
TOKEN_PATTERN = re.compile(r"[^\W_]+")


class Tokenizer(Protocol):
    """Contract for splitting text into word-like tokens."""

    def tokenize(self, text: str) -> List[str]:
        """Split text into tokens, in input order, without empty tokens."""
        ...


class UnicodeTokenizer:
    """Splits text on every character that is neither a Unicode letter nor a digit.

    Whitespace, punctuation, symbols and underscores all act as separators, so
    "e-mail: max.mustermann@example.com" yields
    ["e", "mail", "max", "mustermann", "example", "com"].
    """

    def tokenize(self, text: str) -> List[str]:
        return TOKEN_PATTERN.findall(text)
