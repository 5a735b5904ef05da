"""Song record stores."""

from .sqlite_store import SQLiteSongStore, escape_like

__all__ = ["SQLiteSongStore", "escape_like"]
