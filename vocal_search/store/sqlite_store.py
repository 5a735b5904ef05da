"""SQLite-backed song store.

Single ``songs`` table; all user text is bound as parameters and LIKE
wildcards are escaped, so only ``escape_like`` has to know about the
backend's pattern syntax.
"""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Union

from ..core.interfaces import Clause, ISongStore, MatchOp, Predicate
from ..errors import StoreError
from ..logger import get_logger
from ..note_types import Song

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS songs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    artist TEXT NOT NULL,
    vocal_range TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_songs_artist ON songs(artist);
"""

# Column names are interpolated into SQL, so only these are accepted
SEARCHABLE_FIELDS = ("name", "artist")

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Neutralise LIKE wildcards in user input.

    ``%`` and ``_`` get a backslash prefix and backslashes are doubled;
    queries must use ``ESCAPE '\\'``.
    """
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _casefold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


def _row_to_song(row: sqlite3.Row) -> Song:
    return Song(
        id=row["id"], name=row["name"], artist=row["artist"], vocal_range=row["vocal_range"]
    )


class SQLiteSongStore(ISongStore):
    """Song store over a local SQLite database (``:memory:`` for tests)."""

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        # Lookups arrive from worker threads, the lock serialises them
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        # SQLite LOWER() and LIKE only fold ASCII letters
        self._conn.create_function("casefold", 1, _casefold, deterministic=True)
        self._lock = threading.Lock()
        with self._lock:
            self._conn.executescript(SCHEMA)
        logger.info(f"Opened song store at {self.db_path}")

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ---------- query building ----------
    @staticmethod
    def _clause_sql(clause: Clause) -> Tuple[str, str]:
        if clause.field not in SEARCHABLE_FIELDS:
            raise StoreError(f"Unsupported field: {clause.field!r}")

        if clause.op == MatchOp.EQUALS:
            return f"casefold({clause.field}) = casefold(?)", clause.value

        like = f"casefold({clause.field}) LIKE casefold(?) ESCAPE '\\'"
        if clause.op == MatchOp.STARTS_WITH:
            return like, escape_like(clause.value) + "%"
        if clause.op == MatchOp.CONTAINS:
            return like, "%" + escape_like(clause.value) + "%"
        raise StoreError(f"Unsupported match op: {clause.op!r}")

    def _query(self, sql: str, params: Iterable[Any] = ()) -> List[Song]:
        try:
            with self._lock:
                rows = self._conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Query failed: {e}") from e
        return [_row_to_song(row) for row in rows]

    # ---------- ISongStore ----------
    def find_where(self, predicate: Predicate) -> List[Song]:
        if not predicate.clauses:
            return []
        if predicate.combine not in ("or", "and"):
            raise StoreError(f"Unsupported combinator: {predicate.combine!r}")

        parts = [self._clause_sql(clause) for clause in predicate.clauses]
        where = f" {predicate.combine.upper()} ".join(sql for sql, _ in parts)
        params = [param for _, param in parts]
        return self._query(
            f"SELECT id, name, artist, vocal_range FROM songs WHERE {where} ORDER BY id",
            params,
        )

    def find_by_artist(self, artist: str) -> List[Song]:
        return self.find_where(Predicate.any_of(Clause("artist", MatchOp.EQUALS, artist)))

    def random_songs(self, limit: int) -> List[Song]:
        return self._query(
            "SELECT id, name, artist, vocal_range FROM songs ORDER BY RANDOM() LIMIT ?",
            (limit,),
        )

    def add_song(self, name: str, artist: str, vocal_range: str) -> Song:
        try:
            with self._lock:
                cur = self._conn.execute(
                    "INSERT INTO songs (name, artist, vocal_range) VALUES (?, ?, ?)",
                    (name, artist, vocal_range),
                )
                self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Insert failed: {e}") from e
        logger.info(f"Added song {cur.lastrowid}: {name} by {artist}")
        return Song(id=cur.lastrowid, name=name, artist=artist, vocal_range=vocal_range)

    def is_available(self) -> bool:
        try:
            with self._lock:
                self._conn.execute("SELECT 1").fetchone()
            return True
        except sqlite3.Error as e:
            logger.warning(f"Song store unavailable: {e}")
            return False

    # ---------- bulk load ----------
    def import_songs(self, records: Iterable[Dict[str, Any]]) -> int:
        """Insert song dicts with keys name, artist and vocalRange/vocal_range.

        An explicit ``id`` is kept when present. Returns the number inserted.
        """
        rows = []
        for record in records:
            vocal_range = record.get("vocal_range", record.get("vocalRange"))
            if not record.get("name") or not record.get("artist") or not vocal_range:
                logger.warning(f"Skipping incomplete song record: {record}")
                continue
            rows.append((record.get("id"), record["name"], record["artist"], vocal_range))

        try:
            with self._lock:
                self._conn.executemany(
                    "INSERT INTO songs (id, name, artist, vocal_range) VALUES (?, ?, ?, ?)",
                    rows,
                )
                self._conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Import failed: {e}") from e

        logger.info(f"Imported {len(rows)} songs into {self.db_path}")
        return len(rows)
