"""Command-line interface for vocal_search."""
