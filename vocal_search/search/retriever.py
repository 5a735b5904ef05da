"""Multi-strategy candidate retrieval.

Every applicable lookup is issued concurrently against the store. A lookup
that fails is logged and contributes nothing, so a partial backend failure
only makes the result list less complete.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..core.interfaces import Clause, ISongStore, MatchOp, Predicate
from ..logger import get_logger
from ..note_types import STRATEGY_PRIORITY, ScoredCandidate, SearchStrategy, SplitInfo
from .normalizer import has_trailing_space

logger = get_logger(__name__)

MIN_SPLIT_TOKENS = 2
MAX_SPLIT_TOKENS = 5
MIN_TITLE_QUERY_LENGTH = 2
ARTIST_FIRST_PENALTY = 0.9


@dataclass
class _Lookup:
    label: str
    strategy: SearchStrategy
    predicate: Predicate
    split_info: Optional[SplitInfo] = None


@dataclass
class RetrievalOutcome:
    candidates: List[ScoredCandidate] = field(default_factory=list)
    failed_branches: int = 0
    total_branches: int = 0

    @property
    def all_failed(self) -> bool:
        return self.total_branches > 0 and self.failed_branches == self.total_branches


def split_confidence(title_words: int, artist_words: int, artist_first: bool = False) -> float:
    """Plausibility of a title/artist split.

    Artist names tend to be short and titles longer, so fewer artist words
    and more title words raise the confidence.
    """
    confidence = 0.5
    if artist_words <= 2:
        confidence += 0.2
    elif artist_words == 3:
        confidence += 0.1
    confidence += min(title_words, 3) * 0.1
    confidence = min(confidence, 1.0)
    if artist_first:
        confidence *= ARTIST_FIRST_PENALTY
    return round(confidence, 4)


def generate_splits(tokens: List[str]) -> List[SplitInfo]:
    """All title/artist splits at token boundaries, both orientations.

    Sorted by descending confidence; equal confidences keep generation order.
    """
    splits = []
    for boundary in range(1, len(tokens)):
        head = " ".join(tokens[:boundary])
        tail = " ".join(tokens[boundary:])
        head_words = boundary
        tail_words = len(tokens) - boundary

        # title first: "<title> <artist>"
        splits.append(
            SplitInfo(head, tail, split_confidence(head_words, tail_words), artist_first=False)
        )
        # artist first: "<artist> <title>"
        splits.append(
            SplitInfo(
                tail, head, split_confidence(tail_words, head_words, artist_first=True), artist_first=True
            )
        )

    splits.sort(key=lambda s: s.confidence, reverse=True)
    return splits


def merge_candidates(batches: List[List[ScoredCandidate]]) -> List[ScoredCandidate]:
    """Flatten lookup results and keep one copy per song id.

    The copy tagged with the highest-priority strategy wins; on equal
    priority the first one seen is kept.
    """
    best: Dict[int, ScoredCandidate] = {}
    for batch in batches:
        for candidate in batch:
            existing = best.get(candidate.id)
            if existing is None or (
                STRATEGY_PRIORITY[candidate.strategy] > STRATEGY_PRIORITY[existing.strategy]
            ):
                best[candidate.id] = candidate
    return list(best.values())


class CandidateRetriever:
    """Fan out lookups for one query and merge what comes back."""

    def __init__(self, store: ISongStore, max_splits: int = 6):
        self._store = store
        self._max_splits = max_splits

    def plan(self, raw_query: str, tokens: List[str]) -> List[_Lookup]:
        """Decide which lookups a query needs."""
        trimmed = raw_query.strip()
        trailing = has_trailing_space(raw_query)
        lookups: List[_Lookup] = []

        if not trailing:
            lookups.append(
                _Lookup(
                    "exact",
                    SearchStrategy.EXACT,
                    Predicate.any_of(
                        Clause("name", MatchOp.EQUALS, trimmed),
                        Clause("artist", MatchOp.EQUALS, trimmed),
                    ),
                )
            )

        lookups.append(
            _Lookup(
                "prefix",
                SearchStrategy.PREFIX,
                Predicate.any_of(
                    Clause("name", MatchOp.STARTS_WITH, trimmed),
                    Clause("artist", MatchOp.STARTS_WITH, trimmed),
                ),
            )
        )
        lookups.append(
            _Lookup(
                "contains",
                SearchStrategy.CONTAINS,
                Predicate.any_of(
                    Clause("name", MatchOp.CONTAINS, trimmed),
                    Clause("artist", MatchOp.CONTAINS, trimmed),
                ),
            )
        )

        # "bohemian rhapsody " reads as a finished title
        if trailing and len(trimmed) >= MIN_TITLE_QUERY_LENGTH:
            lookups.append(
                _Lookup(
                    "title_complete",
                    SearchStrategy.TITLE_COMPLETE,
                    Predicate.any_of(Clause("name", MatchOp.EQUALS, trimmed)),
                )
            )
            lookups.append(
                _Lookup(
                    "title_prefix",
                    SearchStrategy.TITLE_PREFIX,
                    Predicate.any_of(Clause("name", MatchOp.STARTS_WITH, trimmed)),
                )
            )

        if not trailing and MIN_SPLIT_TOKENS <= len(tokens) <= MAX_SPLIT_TOKENS:
            for split in generate_splits(tokens)[: self._max_splits]:
                lookups.append(
                    _Lookup(
                        f"split[{split.title_part}|{split.artist_part}]",
                        SearchStrategy.SPLIT,
                        Predicate.all_of(
                            Clause("name", MatchOp.CONTAINS, split.title_part),
                            Clause("artist", MatchOp.CONTAINS, split.artist_part),
                        ),
                        split,
                    )
                )

        return lookups

    async def _run_lookup(self, lookup: _Lookup) -> Tuple[List[ScoredCandidate], bool]:
        start = time.perf_counter()
        try:
            songs = await asyncio.to_thread(self._store.find_where, lookup.predicate)
        except Exception as e:
            logger.error(f"Lookup '{lookup.label}' failed: {e}", exc_info=True)
            return [], False

        logger.debug(
            f"Lookup '{lookup.label}' returned {len(songs)} songs "
            f"in {(time.perf_counter() - start) * 1000:.1f}ms"
        )
        return [
            ScoredCandidate(song=song, strategy=lookup.strategy, split_info=lookup.split_info)
            for song in songs
        ], True

    async def retrieve(self, raw_query: str, tokens: List[str]) -> RetrievalOutcome:
        """Run every planned lookup concurrently and merge the results."""
        lookups = self.plan(raw_query, tokens)
        results = await asyncio.gather(*(self._run_lookup(lookup) for lookup in lookups))

        batches = [candidates for candidates, _ in results]
        failed = sum(1 for _, ok in results if not ok)
        merged = merge_candidates(batches)

        if failed:
            logger.warning(f"{failed}/{len(lookups)} lookups failed for query {raw_query!r}")
        logger.debug(
            f"Retrieved {len(merged)} unique candidates from {len(lookups)} lookups for {raw_query!r}"
        )
        return RetrievalOutcome(candidates=merged, failed_branches=failed, total_branches=len(lookups))
