"""Type definitions for the vocal_search project."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Song:
    """A catalogued song. Owned by the record store, read-only here."""

    id: int
    name: str
    artist: str
    vocal_range: str  # "<LowNote> - <HighNote>", e.g. "E2 - G4"


@dataclass
class PitchSample:
    """A single reading from a pitch-detection collaborator."""

    frequency: float  # Frequency in Hz
    note: str  # Pitch class, e.g. 'C#'
    octave: int  # e.g. 4
    confidence: float  # Producer-supplied confidence (0-1)
    timestamp: float  # Milliseconds, monotonically increasing

    @property
    def note_name(self) -> str:
        return f"{self.note}{self.octave}"


@dataclass
class ConsecutiveGroup:
    """A maximal run of adjacent samples sharing the same note and octave."""

    note_name: str
    samples: List[PitchSample] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.samples)


@dataclass
class NoteOccurrence:
    """All sustained groups of one note, possibly non-adjacent in time."""

    note_name: str
    total_count: int = 0
    frequencies: List[float] = field(default_factory=list)

    @property
    def average_frequency(self) -> float:
        return sum(self.frequencies) / len(self.frequencies)


@dataclass
class VocalRangeResult:
    """The winning note for a "lowest" or "highest" query."""

    note: str
    frequency: float  # Average frequency in Hz
    confidence: float


class SearchStrategy(str, Enum):
    """Retrieval technique that produced (or best matches) a candidate."""

    EXACT = "exact"
    TITLE_COMPLETE = "title_complete"
    PREFIX = "prefix"
    TITLE_PREFIX = "title_prefix"
    SPLIT = "split"
    CONTAINS = "contains"
    TOKEN = "token"  # reserved, no branch produces it yet


# Higher wins when one record is returned by several strategies
STRATEGY_PRIORITY: Dict[SearchStrategy, int] = {
    SearchStrategy.EXACT: 100,
    SearchStrategy.TITLE_COMPLETE: 95,
    SearchStrategy.PREFIX: 90,
    SearchStrategy.TITLE_PREFIX: 85,
    SearchStrategy.SPLIT: 80,
    SearchStrategy.CONTAINS: 70,
    SearchStrategy.TOKEN: 60,
}


@dataclass(frozen=True)
class SplitInfo:
    """A guess at which tokens form the title and which the artist."""

    title_part: str
    artist_part: str
    confidence: float
    artist_first: bool = False


@dataclass
class MatchDetails:
    exact_match: bool = False
    perfect_match: bool = False
    title_match: bool = False
    artist_match: bool = False
    multi_field_match: bool = False


@dataclass
class ScoredCandidate:
    """A song plus the query-scoped metadata used to rank it."""

    song: Song
    strategy: SearchStrategy
    split_info: Optional[SplitInfo] = None
    score: int = 0
    match_details: MatchDetails = field(default_factory=MatchDetails)

    @property
    def id(self) -> int:
        return self.song.id


@dataclass
class ArtistSummary:
    """An artist with the catalogued songs that carry a usable vocal range."""

    name: str
    songs: List[Song]
    song_count: int
    lowest_note: Optional[str] = None
    highest_note: Optional[str] = None


@dataclass
class RangeClassification:
    semitones: int
    octaves: int
    remaining_semitones: int
    classification: str
    range_description: str


@dataclass
class RangeFit:
    """Closest standard voice category for a song, per voice family."""

    male: str
    female: str
    male_out_of_range: Optional[str] = None  # "lower", "higher" or "both"
    female_out_of_range: Optional[str] = None
