"""Stemmer protocol and implementations.

Snowball stemmers are provided by NLTK. The stemming algorithms themselves are
not part of this package; any object with a deterministic ``stem`` method can be
used in their place.
"""

from typing import Protocol

from nltk.stem.snowball import SnowballStemmer as NltkSnowballStemmer


class Stemmer(Protocol):
    """Contract for reducing a token to its stem."""

    def stem(self, word: str) -> str:
        """Return the stem of a single lower-cased token."""
        ...


class NullStemmer:
    """Returns every word unchanged."""

    def stem(self, word: str) -> str:
        return word


class SnowballStemmer:
    """Stemmer for any language supported by the Snowball algorithm."""

    language: str = ""

    def __init__(self, language: str | None = None):
        self.language = language or self.language
        if not self.language:
            raise ValueError("A Snowball stemmer requires a language")
        self._stemmer = NltkSnowballStemmer(self.language)

    def stem(self, word: str) -> str:
        return self._stemmer.stem(word)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(language={self.language!r})"


class DanishStemmer(SnowballStemmer):
    language = "danish"


class DutchStemmer(SnowballStemmer):
    language = "dutch"


class EnglishStemmer(SnowballStemmer):
    language = "english"


class PorterStemmer(EnglishStemmer):
    """The English Snowball stemmer, also known as Porter2."""


class FrenchStemmer(SnowballStemmer):
    language = "french"


class GermanStemmer(SnowballStemmer):
    language = "german"


class PortugueseStemmer(SnowballStemmer):
    language = "portuguese"


class RomanianStemmer(SnowballStemmer):
    language = "romanian"


class RussianStemmer(SnowballStemmer):
    language = "russian"


class SpanishStemmer(SnowballStemmer):
    language = "spanish"


class SwedishStemmer(SnowballStemmer):
    language = "swedish"
