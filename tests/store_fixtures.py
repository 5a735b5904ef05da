"""Song catalogue and store doubles shared by the search tests."""

import time

from vocal_search.errors import StoreError
from vocal_search.store.sqlite_store import SQLiteSongStore

CATALOG = [
    {"id": 1, "name": "Bohemian Rhapsody", "artist": "Queen", "vocalRange": "A2 - A4"},
    {"id": 2, "name": "Don't Stop Me Now", "artist": "Queen", "vocalRange": "F2 - C5"},
    {"id": 3, "name": "Somebody to Love", "artist": "Queen", "vocalRange": "C3 - A4"},
    {"id": 4, "name": "Rolling in the Deep", "artist": "Adele", "vocalRange": "C3 - C5"},
    {"id": 5, "name": "Hello", "artist": "Adele", "vocalRange": "F3 - E5"},
    {"id": 6, "name": "Hello", "artist": "Lionel Richie", "vocalRange": "C3 - G4"},
    {"id": 7, "name": "Yesterday", "artist": "The Beatles", "vocalRange": "F2 - G4"},
    {"id": 8, "name": "Let It Be", "artist": "The Beatles", "vocalRange": "C3 - E4"},
    {"id": 9, "name": "Bad Range", "artist": "Queen", "vocalRange": "not a range"},
    {"id": 10, "name": "Mystery", "artist": "Nobody", "vocalRange": "unknown"},
]


def build_store(store_class=SQLiteSongStore, **kwargs):
    store = store_class(**kwargs)
    store.import_songs(CATALOG)
    return store


class CountingStore(SQLiteSongStore):
    """Records every predicate it is asked to evaluate."""

    def __init__(self, db_path=":memory:"):
        super().__init__(db_path)
        self.predicates = []

    def find_where(self, predicate):
        self.predicates.append(predicate)
        return super().find_where(predicate)


class SplitFailingStore(SQLiteSongStore):
    """Fails every AND lookup, i.e. every title/artist split."""

    def find_where(self, predicate):
        if predicate.combine == "and":
            raise StoreError("split lookups are down")
        return super().find_where(predicate)


class BrokenStore(SQLiteSongStore):
    """Reachable, but every lookup fails."""

    def find_where(self, predicate):
        raise StoreError("backend error")


class OfflineStore(SQLiteSongStore):
    def is_available(self):
        return False


class SlowStore(SQLiteSongStore):
    def find_where(self, predicate):
        time.sleep(0.05)
        return super().find_where(predicate)
