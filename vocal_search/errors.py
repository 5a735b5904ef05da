"""Exception types raised by vocal_search."""


class VocalSearchError(Exception):
    """Base class for all vocal_search errors."""


class InvalidNoteError(VocalSearchError, ValueError):
    """A note string does not match the ``<Letter>[#]<octave>`` format."""

    def __init__(self, note: str):
        super().__init__(f"Invalid note format: {note!r}")
        self.note = note


class StoreError(VocalSearchError):
    """The record store could not complete a query or write."""


class SearchUnavailableError(VocalSearchError):
    """No lookup could be issued at all (e.g. no connectivity).

    Distinct from an empty result list, which simply means nothing matched.
    """


class ImplausibleRangeError(VocalSearchError):
    """A detected low/high pair is outside the 1-5 octave window."""

    def __init__(self, low: str, high: str):
        super().__init__(f"Implausible vocal range: {low} - {high}")
        self.low = low
        self.high = high
