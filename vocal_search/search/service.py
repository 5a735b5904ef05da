"""Search entry point used by UI callers.

Ties the normalizer, retriever, scorer and ranker together and enforces
last-query-wins: every call takes a sequence number, and a completion that
is no longer the latest is discarded instead of being returned or
published.
"""

from __future__ import annotations

import asyncio
import copy
import threading
from typing import List, Optional, Union

from ..core.events import SearchEvents
from ..core.interfaces import ISongStore
from ..errors import SearchUnavailableError
from ..logger import get_logger
from ..note_types import ArtistSummary, ScoredCandidate, Song
from .artists import derive_artists, search_artists_by_query
from .cache import LRUCache
from .normalizer import normalize
from .ranker import MAX_RESULTS, MIN_SCORE, MULTI_FIELD_MIN_SCORE, rank
from .retriever import CandidateRetriever
from .scorer import score_candidates

logger = get_logger(__name__)

SEARCH_FILTERS = ("songs", "artists")

SearchResults = Union[List[ScoredCandidate], List[ArtistSummary]]


class SearchService:
    """Fuzzy song/artist search over an injected record store."""

    def __init__(
        self,
        store: ISongStore,
        max_results: int = MAX_RESULTS,
        min_score: int = MIN_SCORE,
        multi_field_min_score: int = MULTI_FIELD_MIN_SCORE,
        max_splits: int = 6,
        artist_limit: int = 20,
        browse_limit: int = 25,
        result_cache: Optional[LRUCache] = None,
        artist_cache: Optional[LRUCache] = None,
    ):
        self._store = store
        self._retriever = CandidateRetriever(store, max_splits=max_splits)
        self._max_results = max_results
        self._min_score = min_score
        self._multi_field_min_score = multi_field_min_score
        self._artist_limit = artist_limit
        self._browse_limit = browse_limit
        self._result_cache = result_cache
        self._artist_cache = artist_cache

        self.events = SearchEvents()
        self._sequence = 0
        self._sequence_lock = threading.Lock()

    # ---------- last-query-wins bookkeeping ----------
    def _next_sequence(self) -> int:
        with self._sequence_lock:
            self._sequence += 1
            return self._sequence

    def _is_current(self, sequence: int) -> bool:
        with self._sequence_lock:
            return sequence == self._sequence

    # ---------- public API ----------
    async def search(self, query: str, filter: str = "songs") -> Optional[SearchResults]:
        """Search songs or artists.

        Returns:
            The ranked results, ``[]`` when the query has no searchable
            content, or ``None`` when a newer search superseded this one.

        Raises:
            SearchUnavailableError: no lookup could be issued at all
            ValueError: unknown filter
        """
        if filter not in SEARCH_FILTERS:
            raise ValueError(f"Unknown search filter: {filter!r}")

        sequence = self._next_sequence()
        tokens = normalize(query)

        try:
            if not tokens:
                results: SearchResults = []
            elif filter == "songs":
                results = await self._search_songs(query, tokens)
            else:
                results = await self._search_artists(query)
        except SearchUnavailableError as e:
            if not self._is_current(sequence):
                logger.debug(f"Discarding stale failure for {query!r}: {e}")
                return None
            self.events.emit_error(query, filter, e)
            raise

        if not self._is_current(sequence):
            logger.debug(f"Discarding stale results for {query!r} (search #{sequence})")
            return None

        self.events.emit_results(query, filter, results)
        return results

    async def related_artists(self, results: List[ScoredCandidate], query: str = "") -> List[ArtistSummary]:
        """Artists appearing in a song result list."""
        songs = [candidate.song for candidate in results]
        return await asyncio.to_thread(
            derive_artists, songs, self._store, self._artist_limit, query.strip(), self._artist_cache
        )

    async def browse(self, limit: Optional[int] = None) -> List[Song]:
        """Random songs to show before the user has typed anything."""
        await self._ensure_available()
        return await asyncio.to_thread(self._store.random_songs, limit or self._browse_limit)

    def add_song(self, name: str, artist: str, vocal_range: str) -> Song:
        """Write a song through to the store and drop stale cached results."""
        song = self._store.add_song(name, artist, vocal_range)
        self.invalidate_caches()
        return song

    def invalidate_caches(self) -> None:
        for cache in (self._result_cache, self._artist_cache):
            if cache is not None:
                cache.invalidate()

    # ---------- internals ----------
    async def _ensure_available(self) -> None:
        available = await asyncio.to_thread(self._store.is_available)
        if not available:
            raise SearchUnavailableError("Song store is unavailable")

    async def _search_songs(self, query: str, tokens: List[str]) -> List[ScoredCandidate]:
        cache_key = ("songs", query)
        if self._result_cache is not None:
            cached = self._result_cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Result cache hit for {query!r}")
                # Callers own what they get back, the cached list stays untouched
                return copy.deepcopy(cached)

        await self._ensure_available()
        outcome = await self._retriever.retrieve(query, tokens)
        if outcome.all_failed:
            raise SearchUnavailableError(f"Every lookup failed for {query!r}")

        scored = score_candidates(outcome.candidates, tokens, query)
        ranked = rank(
            scored,
            max_results=self._max_results,
            min_score=self._min_score,
            multi_field_min_score=self._multi_field_min_score,
        )
        logger.info(f"Search {query!r}: {len(outcome.candidates)} candidates, {len(ranked)} results")

        # Partial results would hide songs on the next identical query
        if self._result_cache is not None and outcome.failed_branches == 0:
            self._result_cache.put(cache_key, copy.deepcopy(ranked))
        return ranked

    async def _search_artists(self, query: str) -> List[ArtistSummary]:
        await self._ensure_available()
        artists = await asyncio.to_thread(
            search_artists_by_query, self._store, query, self._artist_limit, self._artist_cache
        )
        logger.info(f"Artist search {query!r}: {len(artists)} results")
        return artists
