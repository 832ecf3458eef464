"""scout-database - full-text search stored in, and ranked by, a relational database."""

__version__ = "0.4.0"
