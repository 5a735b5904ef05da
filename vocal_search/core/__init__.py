"""Core components for vocal_search."""

# Import interfaces for easier access
from .interfaces import (
    Clause,
    IPitchSource,
    ISongStore,
    MatchOp,
    Predicate,
)

__all__ = ["Clause", "IPitchSource", "ISongStore", "MatchOp", "Predicate"]
