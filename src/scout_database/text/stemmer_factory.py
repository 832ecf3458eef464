"""Factory for creating configured tokenizers and stemmers."""

from scout_database.text.stemmer import (
    DanishStemmer,
    DutchStemmer,
    EnglishStemmer,
    FrenchStemmer,
    GermanStemmer,
    NullStemmer,
    PorterStemmer,
    PortugueseStemmer,
    RomanianStemmer,
    RussianStemmer,
    SpanishStemmer,
    Stemmer,
    SwedishStemmer,
)
from scout_database.text.tokenizer import Tokenizer, UnicodeTokenizer

STEMMERS: dict[str, type] = {
    "danish": DanishStemmer,
    "dutch": DutchStemmer,
    "english": EnglishStemmer,
    "porter": PorterStemmer,
    "french": FrenchStemmer,
    "german": GermanStemmer,
    "portuguese": PortugueseStemmer,
    "romanian": RomanianStemmer,
    "russian": RussianStemmer,
    "spanish": SpanishStemmer,
    "swedish": SwedishStemmer,
    "null": NullStemmer,
}

TOKENIZERS: dict[str, type] = {
    "unicode": UnicodeTokenizer,
}


def create_stemmer(name: str) -> Stemmer:
    """Create a stemmer by language name ("porter" and "null" included)."""
    stemmer_name = name.strip().lower()
    try:
        return STEMMERS[stemmer_name]()
    except KeyError:
        raise ValueError(f"Unsupported stemmer: {name}") from None


def create_tokenizer(name: str) -> Tokenizer:
    tokenizer_name = name.strip().lower()
    try:
        return TOKENIZERS[tokenizer_name]()
    except KeyError:
        raise ValueError(f"Unsupported tokenizer: {name}") from None
