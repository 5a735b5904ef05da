import os
import tempfile
import unittest

from vocal_search.core.interfaces import Clause, MatchOp, Predicate
from vocal_search.errors import StoreError
from vocal_search.search.ranker import search_songs_by_query
from vocal_search.store.sqlite_store import SQLiteSongStore, escape_like

from store_fixtures import CATALOG, BrokenStore, build_store


class TestEscapeLike(unittest.TestCase):
    def test_wildcards_and_backslash(self):
        self.assertEqual(escape_like("a%b_c\\d"), "a\\%b\\_c\\\\d")
        self.assertEqual(escape_like("plain"), "plain")


class TestSQLiteSongStore(unittest.TestCase):
    def setUp(self):
        self.store = build_store()

    def tearDown(self):
        self.store.close()

    def test_import_skips_incomplete_records(self):
        store = SQLiteSongStore()
        count = store.import_songs(
            [
                {"name": "A", "artist": "X", "vocal_range": "C3 - C4"},
                {"name": "B", "artist": "X"},
                {"name": "", "artist": "X", "vocalRange": "C3 - C4"},
            ]
        )
        self.assertEqual(count, 1)

    def test_find_where_is_case_insensitive(self):
        songs = self.store.find_where(Predicate.any_of(Clause("name", MatchOp.EQUALS, "HELLO")))
        self.assertEqual([s.id for s in songs], [5, 6])

        songs = self.store.find_where(Predicate.any_of(Clause("artist", MatchOp.STARTS_WITH, "the")))
        self.assertEqual([s.id for s in songs], [7, 8])

    def test_case_folding_covers_non_ascii(self):
        song = self.store.add_song("Été", "Édith Piaf", "A3 - D5")

        songs = self.store.find_where(Predicate.any_of(Clause("artist", MatchOp.EQUALS, "ÉDITH PIAF")))
        self.assertEqual([s.id for s in songs], [song.id])

        songs = self.store.find_where(Predicate.any_of(Clause("name", MatchOp.CONTAINS, "été")))
        self.assertEqual([s.id for s in songs], [song.id])

        songs = self.store.find_where(Predicate.any_of(Clause("artist", MatchOp.STARTS_WITH, "édith")))
        self.assertEqual([s.id for s in songs], [song.id])

    def test_all_of(self):
        songs = self.store.find_where(
            Predicate.all_of(
                Clause("name", MatchOp.CONTAINS, "hello"),
                Clause("artist", MatchOp.CONTAINS, "adele"),
            )
        )
        self.assertEqual([s.id for s in songs], [5])

    def test_wildcards_match_literally(self):
        self.store.add_song("100% Pure", "Test_Artist", "C3 - C4")
        self.store.add_song("1000 Pure", "TestXArtist", "C3 - C4")

        songs = self.store.find_where(Predicate.any_of(Clause("name", MatchOp.CONTAINS, "100%")))
        self.assertEqual([s.name for s in songs], ["100% Pure"])

        songs = self.store.find_where(Predicate.any_of(Clause("artist", MatchOp.CONTAINS, "t_a")))
        self.assertEqual([s.artist for s in songs], ["Test_Artist"])

    def test_unknown_field_is_rejected(self):
        with self.assertRaises(StoreError):
            self.store.find_where(Predicate.any_of(Clause("id; DROP TABLE songs", MatchOp.EQUALS, "1")))

    def test_find_by_artist(self):
        self.assertEqual([s.id for s in self.store.find_by_artist("queen")], [1, 2, 3, 9])

    def test_random_songs(self):
        songs = self.store.random_songs(4)
        self.assertEqual(len(songs), 4)
        self.assertEqual(len({s.id for s in songs}), 4)
        self.assertEqual(len(self.store.random_songs(100)), len(CATALOG))

    def test_add_song(self):
        song = self.store.add_song("New", "Artist", "C3 - G4")
        self.assertEqual(song.id, len(CATALOG) + 1)
        self.assertEqual(self.store.find_by_artist("Artist"), [song])

    def test_is_available(self):
        self.assertTrue(self.store.is_available())

    def test_persists_to_disk(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "songs.sqlite")
            store = build_store(db_path=path)
            store.close()

            reopened = SQLiteSongStore(path)
            self.assertEqual(len(reopened.random_songs(100)), len(CATALOG))
            reopened.close()


class TestSearchSongsByQuery(unittest.TestCase):
    def setUp(self):
        self.store = build_store()

    def test_scores_and_order(self):
        results = search_songs_by_query(self.store, "bohem")
        self.assertEqual([(song.id, score) for song, score in results], [(1, 75)])

        results = search_songs_by_query(self.store, "Hello")
        self.assertEqual([score for _, score in results], [100, 100])

        results = search_songs_by_query(self.store, "rhap")
        self.assertEqual([(song.id, score) for song, score in results], [(1, 50)])

    def test_prefix_beats_substring(self):
        results = search_songs_by_query(self.store, "the")
        scores = [score for _, score in results]
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual(results[0][1], 75)

    def test_empty_query(self):
        self.assertEqual(search_songs_by_query(self.store, "  "), [])

    def test_store_failure_gives_empty_list(self):
        self.assertEqual(search_songs_by_query(build_store(BrokenStore), "queen"), [])


if __name__ == "__main__":
    unittest.main()
