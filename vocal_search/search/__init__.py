"""Fuzzy song and artist search."""

from .service import SearchService

__all__ = ["SearchService"]
