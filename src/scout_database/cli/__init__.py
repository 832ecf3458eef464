"""Command line interface for scout-database."""
