"""Text normalization: tokenizers and stemmers."""

from scout_database.text.stemmer import NullStemmer, SnowballStemmer, Stemmer
from scout_database.text.stemmer_factory import create_stemmer, create_tokenizer
from scout_database.text.tokenizer import Tokenizer, UnicodeTokenizer

__all__ = [
    "NullStemmer",
    "SnowballStemmer",
    "Stemmer",
    "Tokenizer",
    "UnicodeTokenizer",
    "create_stemmer",
    "create_tokenizer",
]
