"""Search result notifications for UI callers."""

from enum import Enum, auto
from typing import Callable, Dict, List

from ..logger import get_logger

logger = get_logger(__name__)

# listener(query, filter, payload) where payload is the result list or the error
SearchListener = Callable[[str, str, object], None]


class SearchEventType(Enum):
    RESULTS = auto()
    ERROR = auto()


class SearchEvents:
    """Publishes the outcome of the latest search to registered listeners.

    Stale completions are discarded by the service before they get here, so
    listeners only ever see the most recent query. Listeners run
    synchronously on the caller's thread; one that raises is logged and
    skipped.
    """

    def __init__(self):
        self._listeners: Dict[SearchEventType, List[SearchListener]] = {
            event_type: [] for event_type in SearchEventType
        }

    def subscribe(self, event_type: SearchEventType, listener: SearchListener) -> Callable[[], None]:
        """Register ``listener`` and return a function that removes it."""
        listeners = self._listeners[event_type]
        if listener not in listeners:
            listeners.append(listener)
            logger.debug(f"Subscribed to {event_type.name} ({len(listeners)} listeners)")

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def on_results(self, listener: SearchListener) -> Callable[[], None]:
        return self.subscribe(SearchEventType.RESULTS, listener)

    def on_error(self, listener: SearchListener) -> Callable[[], None]:
        return self.subscribe(SearchEventType.ERROR, listener)

    def publish(self, event_type: SearchEventType, query: str, filter: str, payload: object) -> None:
        for listener in list(self._listeners[event_type]):
            try:
                listener(query, filter, payload)
            except Exception as e:
                logger.error(f"{event_type.name} listener failed for {query!r}: {e}", exc_info=True)

    def emit_results(self, query: str, filter: str, results: list) -> None:
        self.publish(SearchEventType.RESULTS, query, filter, results)

    def emit_error(self, query: str, filter: str, error: Exception) -> None:
        self.publish(SearchEventType.ERROR, query, filter, error)

    def listener_count(self, event_type: SearchEventType) -> int:
        return len(self._listeners[event_type])

    def clear(self) -> None:
        for listeners in self._listeners.values():
            listeners.clear()
