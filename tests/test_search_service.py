import asyncio
import unittest

from vocal_search.errors import SearchUnavailableError
from vocal_search.note_types import SearchStrategy
from vocal_search.search.cache import LRUCache
from vocal_search.search.service import SearchService

from store_fixtures import (
    BrokenStore,
    CountingStore,
    OfflineStore,
    SlowStore,
    SplitFailingStore,
    build_store,
)


class TestSongSearch(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.service = SearchService(build_store())

    async def test_full_title(self):
        results = await self.service.search("bohemian rhapsody")
        self.assertEqual(results[0].song.name, "Bohemian Rhapsody")
        self.assertGreaterEqual(results[0].score, 6000)

    async def test_title_then_artist(self):
        results = await self.service.search("rhapsody queen")
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].song.name, "Bohemian Rhapsody")
        self.assertEqual(results[0].strategy, SearchStrategy.SPLIT)
        self.assertGreaterEqual(results[0].score, 7000)
        self.assertTrue(results[0].match_details.multi_field_match)

    async def test_exact_match_is_case_insensitive(self):
        results = await self.service.search("HELLO")
        self.assertEqual({c.id for c in results}, {5, 6})
        self.assertTrue(all(c.score == 10000 for c in results))

    async def test_exact_artist(self):
        results = await self.service.search("queen")
        self.assertEqual({c.id for c in results}, {1, 2, 3, 9})
        self.assertTrue(all(c.score == 9500 for c in results))

    async def test_non_ascii_artist(self):
        song = self.service.add_song("Été", "Édith Piaf", "A3 - D5")
        results = await self.service.search("édith piaf")
        self.assertEqual([c.id for c in results], [song.id])
        self.assertEqual(results[0].score, 9500)

    async def test_trailing_space_completes_title(self):
        results = await self.service.search("bohemian rhapsody ")
        self.assertEqual(results[0].strategy, SearchStrategy.TITLE_COMPLETE)
        self.assertEqual(results[0].score, 9800)

    async def test_prefix_and_contains(self):
        results = await self.service.search("bohem")
        self.assertEqual(results[0].score, 8000)

        results = await self.service.search("deep")
        self.assertEqual([c.id for c in results], [4])
        self.assertEqual(results[0].score, 6000)

        results = await self.service.search("beatles")
        self.assertEqual([c.id for c in results], [8, 7])
        self.assertTrue(all(c.score == 5500 for c in results))

    async def test_wildcards_are_literal(self):
        self.assertEqual(await self.service.search("%"), [])
        self.assertEqual(await self.service.search("_ello"), [])

    async def test_no_match(self):
        self.assertEqual(await self.service.search("zzzz"), [])

    async def test_unknown_filter(self):
        with self.assertRaises(ValueError):
            await self.service.search("queen", "albums")


class TestEmptyQueries(unittest.IsolatedAsyncioTestCase):
    async def test_no_store_calls(self):
        store = build_store(CountingStore)
        service = SearchService(store)
        for query in ("", "   ", "?!"):
            self.assertEqual(await service.search(query), [])
        self.assertEqual(store.predicates, [])


class TestFailures(unittest.IsolatedAsyncioTestCase):
    async def test_partial_failure(self):
        service = SearchService(build_store(SplitFailingStore))
        results = await service.search("bohemian rhapsody")
        self.assertEqual(results[0].id, 1)

    async def test_all_lookups_failing(self):
        service = SearchService(build_store(BrokenStore))
        errors = []
        service.events.on_error(lambda query, filter, error: errors.append(error))
        with self.assertRaises(SearchUnavailableError):
            await service.search("queen")
        self.assertEqual(len(errors), 1)

    async def test_store_offline(self):
        service = SearchService(build_store(OfflineStore))
        with self.assertRaises(SearchUnavailableError):
            await service.search("queen")
        with self.assertRaises(SearchUnavailableError):
            await service.search("queen", "artists")
        with self.assertRaises(SearchUnavailableError):
            await service.browse()


class TestLastQueryWins(unittest.IsolatedAsyncioTestCase):
    async def test_stale_results_are_discarded(self):
        service = SearchService(build_store(SlowStore))
        published = []
        service.events.on_results(lambda query, filter, results: published.append(query))

        first, second = await asyncio.gather(
            service.search("bohemian"), service.search("queen")
        )

        self.assertIsNone(first)
        self.assertEqual({c.id for c in second}, {1, 2, 3, 9})
        self.assertEqual(published, ["queen"])


class TestCaching(unittest.IsolatedAsyncioTestCase):
    async def test_repeated_query_is_served_from_cache(self):
        store = build_store(CountingStore)
        service = SearchService(store, result_cache=LRUCache(8))

        first = await service.search("bohemian rhapsody")
        calls = len(store.predicates)
        second = await service.search("bohemian rhapsody")

        self.assertEqual(len(store.predicates), calls)
        self.assertEqual([c.id for c in first], [c.id for c in second])

    async def test_cached_results_are_not_shared(self):
        service = SearchService(build_store(), result_cache=LRUCache(8))

        first = await service.search("bohemian rhapsody")
        score = first[0].score
        first[0].score = 0
        first[0].match_details.artist_match = True
        first.clear()

        second = await service.search("bohemian rhapsody")
        self.assertEqual(second[0].score, score)
        self.assertFalse(second[0].match_details.artist_match)

        second[0].score = 1
        third = await service.search("bohemian rhapsody")
        self.assertEqual(third[0].score, score)

    async def test_add_song_invalidates(self):
        store = build_store(CountingStore)
        service = SearchService(store, result_cache=LRUCache(8), artist_cache=LRUCache(8))

        await service.search("yesterday")
        song = service.add_song("Yesterday Once More", "Carpenters", "G3 - C5")
        results = await service.search("yesterday")

        self.assertIn(song.id, {c.id for c in results})

    async def test_partial_results_are_not_cached(self):
        cache = LRUCache(8)
        service = SearchService(build_store(SplitFailingStore), result_cache=cache)
        await service.search("bohemian rhapsody")
        self.assertEqual(len(cache), 0)


class TestArtistSearch(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.service = SearchService(build_store())

    async def test_artist_filter(self):
        artists = await self.service.search("queen", "artists")
        self.assertEqual([a.name for a in artists], ["Queen"])
        self.assertEqual(artists[0].lowest_note, "F2")
        self.assertEqual(artists[0].highest_note, "C5")

    async def test_related_artists(self):
        results = await self.service.search("hello")
        artists = await self.service.related_artists(results)
        self.assertEqual([a.name for a in artists], ["Adele", "Lionel Richie"])

    async def test_browse(self):
        songs = await self.service.browse(limit=3)
        self.assertEqual(len(songs), 3)


if __name__ == "__main__":
    unittest.main()
