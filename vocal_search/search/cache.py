"""Bounded LRU cache owned by the caller and injected into the search service."""

import threading
from collections import OrderedDict
from typing import Any, Hashable, Optional

from ..logger import get_logger

logger = get_logger(__name__)


class LRUCache:
    """Thread-safe least-recently-used cache."""

    def __init__(self, max_size: int = 128):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._max_size = max_size
        self._data: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            if key not in self._data:
                return None
            self._data.move_to_end(key)
            return self._data[key]

    def put(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > self._max_size:
                self._data.popitem(last=False)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def invalidate(self) -> None:
        """Drop every entry, e.g. after the store was written to."""
        with self._lock:
            count = len(self._data)
            self._data.clear()
        logger.debug(f"Invalidated cache ({count} entries)")
