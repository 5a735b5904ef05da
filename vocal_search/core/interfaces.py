"""Defines the core interfaces for vocal_search."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Tuple

from ..note_types import PitchSample, Song


class MatchOp(str, Enum):
    """Comparison applied by a store clause. All are case-insensitive."""

    EQUALS = "equals"
    STARTS_WITH = "starts_with"
    CONTAINS = "contains"


@dataclass(frozen=True)
class Clause:
    """One field comparison. ``value`` is raw user text; stores escape it."""

    field: str  # "name" or "artist"
    op: MatchOp
    value: str


@dataclass(frozen=True)
class Predicate:
    """Clauses joined with "or" or "and"."""

    clauses: Tuple[Clause, ...]
    combine: str = "or"

    @classmethod
    def any_of(cls, *clauses: Clause) -> "Predicate":
        return cls(tuple(clauses), "or")

    @classmethod
    def all_of(cls, *clauses: Clause) -> "Predicate":
        return cls(tuple(clauses), "and")


class ISongStore(ABC):
    """Interface for the record store backing the search engine."""

    @abstractmethod
    def find_where(self, predicate: Predicate) -> List[Song]:
        """Return every song matching the predicate."""
        pass

    @abstractmethod
    def find_by_artist(self, artist: str) -> List[Song]:
        """Return every song whose artist equals ``artist`` (case-insensitive)."""
        pass

    @abstractmethod
    def random_songs(self, limit: int) -> List[Song]:
        """Return up to ``limit`` songs in random order."""
        pass

    @abstractmethod
    def add_song(self, name: str, artist: str, vocal_range: str) -> Song:
        """Insert a song and return it with its assigned id."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether the store can currently be queried."""
        pass


class IPitchSource(ABC):
    """Interface for producers of pitch samples."""

    @abstractmethod
    def start(self, callback: Callable[[PitchSample], None]) -> bool:
        """Start emitting samples to the callback."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop emitting samples."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the source is running."""
        pass
