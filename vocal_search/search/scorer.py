"""Relevance scoring for retrieved candidates.

Scores depend on which strategy matched and on how well:

    exact          name == q  10000   artist == q  9500
    title_complete name == q   9800
    title_prefix   name ^= q   8500
    prefix         name ^= q   8000   artist ^= q  7500
    contains       name ~ q    6000   artist ~ q   5500
    split          7000 + confidence*500 + title_quality*300 + artist_quality*300
"""

from typing import List

from ..logger import get_logger
from ..note_types import MatchDetails, ScoredCandidate, SearchStrategy

logger = get_logger(__name__)

SPLIT_BASE_SCORE = 7000
SPLIT_CONFIDENCE_WEIGHT = 500
SPLIT_QUALITY_WEIGHT = 300


def match_quality(needle: str, haystack: str) -> float:
    """How well ``needle`` matches ``haystack`` (both case-folded).

    Returns:
        1.0 equal, 0.8 prefix, 0.6 substring, 0.4-0.6 partial word overlap,
        0.0 no match
    """
    if not needle or not haystack:
        return 0.0
    if needle == haystack:
        return 1.0
    if haystack.startswith(needle):
        return 0.8
    if needle in haystack:
        return 0.6

    needle_words = needle.split()
    haystack_words = haystack.split()
    found = sum(
        1 for word in needle_words if any(word in candidate for candidate in haystack_words)
    )
    if found == 0:
        return 0.0
    return 0.4 + 0.2 * (found / len(needle_words))


def _tokens_span_fields(tokens: List[str], name: str, artist: str) -> bool:
    """Every token appears in name or artist, and each field holds at least one."""
    if len(tokens) < 2:
        return False
    in_name = [token in name for token in tokens]
    in_artist = [token in artist for token in tokens]
    covered = all(n or a for n, a in zip(in_name, in_artist))
    return covered and any(in_name) and any(in_artist)


def score_candidate(candidate: ScoredCandidate, tokens: List[str], query: str) -> ScoredCandidate:
    """Fill in ``score`` and ``match_details`` for one candidate.

    ``query`` must already be trimmed and case-folded.
    """
    name = candidate.song.name.casefold()
    artist = candidate.song.artist.casefold()
    details = MatchDetails()
    score = 0
    strategy = candidate.strategy

    if strategy == SearchStrategy.EXACT:
        if name == query:
            score = 10000
            details.exact_match = details.perfect_match = details.title_match = True
        elif artist == query:
            score = 9500
            details.exact_match = details.perfect_match = details.artist_match = True

    elif strategy == SearchStrategy.TITLE_COMPLETE:
        if name == query:
            score = 9800
            details.perfect_match = details.title_match = True

    elif strategy == SearchStrategy.TITLE_PREFIX:
        if name.startswith(query):
            score = 8500
            details.title_match = True

    elif strategy == SearchStrategy.PREFIX:
        if name.startswith(query):
            score = 8000
            details.title_match = True
        elif artist.startswith(query):
            score = 7500
            details.artist_match = True

    elif strategy == SearchStrategy.CONTAINS:
        if query in name:
            score = 6000
            details.title_match = True
        elif query in artist:
            score = 5500
            details.artist_match = True

    elif strategy == SearchStrategy.SPLIT and candidate.split_info is not None:
        split = candidate.split_info
        title_quality = match_quality(split.title_part, name)
        artist_quality = match_quality(split.artist_part, artist)
        if title_quality > 0 and artist_quality > 0:
            score = round(
                SPLIT_BASE_SCORE
                + split.confidence * SPLIT_CONFIDENCE_WEIGHT
                + title_quality * SPLIT_QUALITY_WEIGHT
                + artist_quality * SPLIT_QUALITY_WEIGHT
            )
            details.title_match = details.artist_match = True
            details.multi_field_match = True

    if score and not details.multi_field_match:
        details.multi_field_match = _tokens_span_fields(tokens, name, artist)

    candidate.score = score
    candidate.match_details = details
    return candidate


def score_candidates(
    candidates: List[ScoredCandidate], tokens: List[str], original_query: str
) -> List[ScoredCandidate]:
    """Score every candidate and drop the ones no rule matched."""
    query = original_query.strip().casefold()
    scored = []
    for candidate in candidates:
        score_candidate(candidate, tokens, query)
        if candidate.score > 0:
            scored.append(candidate)
        else:
            logger.debug(
                f"Dropping {candidate.song.name!r} ({candidate.strategy.value}): no rule matched"
            )
    return scored
