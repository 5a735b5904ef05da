"""Artist aggregation over song search results."""

from typing import Dict, List, Optional

from ..core.interfaces import Clause, ISongStore, MatchOp, Predicate
from ..logger import get_logger
from ..note_types import ArtistSummary, Song
from ..note_utils import calculate_overall_range, parse_vocal_range
from .cache import LRUCache

logger = get_logger(__name__)


def _artist_songs(store: ISongStore, name: str, cache: Optional[LRUCache]) -> List[Song]:
    """Songs by ``name`` that carry a parseable vocal range."""
    if cache is not None:
        cached = cache.get(name)
        if cached is not None:
            return list(cached)

    try:
        songs = store.find_by_artist(name)
    except Exception as e:
        logger.error(f"Error fetching songs for artist {name!r}: {e}", exc_info=True)
        return []

    usable = [song for song in songs if parse_vocal_range(song.vocal_range) is not None]
    if cache is not None:
        cache.put(name, list(usable))
    return usable


def derive_artists(
    songs: List[Song],
    store: ISongStore,
    limit: int = 20,
    query: str = "",
    cache: Optional[LRUCache] = None,
) -> List[ArtistSummary]:
    """Group songs by artist and attach each artist's catalogued songs.

    Artists without any song carrying a usable vocal range are dropped.
    With a query, artists whose name contains it come first; otherwise the
    order is song count descending, then name.
    """
    if not songs:
        return []

    counts: Dict[str, int] = {}
    for song in songs:
        if not song.artist:
            continue
        counts[song.artist] = counts.get(song.artist, 0) + 1

    artists = []
    for name, count in counts.items():
        artist_songs = _artist_songs(store, name, cache)
        if not artist_songs:
            continue
        overall = calculate_overall_range(artist_songs)
        lowest, highest = overall if overall else (None, None)
        artists.append(
            ArtistSummary(
                name=name,
                songs=artist_songs,
                song_count=count,
                lowest_note=lowest,
                highest_note=highest,
            )
        )

    needle = query.strip().casefold()
    if needle:
        artists.sort(key=lambda a: (needle not in a.name.casefold(), -a.song_count, a.name))
    else:
        artists.sort(key=lambda a: (-a.song_count, a.name))

    return artists[:limit]


def search_artists_by_query(
    store: ISongStore,
    query: str,
    limit: int = 20,
    cache: Optional[LRUCache] = None,
) -> List[ArtistSummary]:
    """Artists whose name contains ``query``, with their ranged songs."""
    needle = query.strip()
    if not needle:
        return []
    try:
        songs = store.find_where(Predicate.any_of(Clause("artist", MatchOp.CONTAINS, needle)))
    except Exception as e:
        logger.error(f"Error fetching artists for {needle!r}: {e}", exc_info=True)
        return []
    return derive_artists(songs, store, limit=limit, query=needle, cache=cache)
