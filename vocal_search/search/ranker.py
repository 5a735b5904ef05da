"""Thresholding and ordering of scored candidates."""

import unicodedata
from typing import List, Set, Tuple

from ..core.interfaces import Clause, ISongStore, MatchOp, Predicate
from ..logger import get_logger
from ..note_types import ScoredCandidate, Song

logger = get_logger(__name__)

MAX_RESULTS = 15
MIN_SCORE = 5000
MULTI_FIELD_MIN_SCORE = 3000
STRONG_SCORE = 6000


def name_sort_key(name: str) -> Tuple[str, str]:
    """Alphabetical key that ignores case and accents; the raw name breaks ties."""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), name


def passes_threshold(
    candidate: ScoredCandidate,
    min_score: int = MIN_SCORE,
    multi_field_min_score: int = MULTI_FIELD_MIN_SCORE,
) -> bool:
    score = candidate.score
    return (
        score >= min_score
        or (candidate.match_details.multi_field_match and score >= multi_field_min_score)
        or score >= STRONG_SCORE
    )


def rank(
    scored: List[ScoredCandidate],
    max_results: int = MAX_RESULTS,
    min_score: int = MIN_SCORE,
    multi_field_min_score: int = MULTI_FIELD_MIN_SCORE,
) -> List[ScoredCandidate]:
    """Filter, order and truncate scored candidates.

    Order: score descending, then multi-field matches first, then name
    alphabetically (see ``name_sort_key``).
    """
    kept = [c for c in scored if passes_threshold(c, min_score, multi_field_min_score)]
    kept.sort(
        key=lambda c: (-c.score, not c.match_details.multi_field_match, name_sort_key(c.song.name))
    )

    seen: Set[int] = set()
    ranked = []
    for candidate in kept:
        if candidate.id in seen:
            continue
        seen.add(candidate.id)
        ranked.append(candidate)

    logger.debug(f"Ranked {len(scored)} scored candidates down to {min(len(ranked), max_results)}")
    return ranked[:max_results]


def simple_score(song: Song, query: str) -> int:
    """100 exact, 75 prefix, 50 substring on name or artist, else 0."""
    name = song.name.casefold()
    artist = song.artist.casefold()
    if name == query or artist == query:
        return 100
    if name.startswith(query) or artist.startswith(query):
        return 75
    if query in name or query in artist:
        return 50
    return 0


def search_songs_by_query(store: ISongStore, query: str) -> List[Tuple[Song, int]]:
    """Plain substring search, scored but not truncated.

    Store failures are logged and give an empty list.
    """
    needle = query.strip().casefold()
    if not needle:
        return []
    try:
        songs = store.find_where(
            Predicate.any_of(
                Clause("name", MatchOp.CONTAINS, needle),
                Clause("artist", MatchOp.CONTAINS, needle),
            )
        )
    except Exception as e:
        logger.error(f"Error in search_songs_by_query: {e}", exc_info=True)
        return []

    scored = [(song, simple_score(song, needle)) for song in songs]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored
