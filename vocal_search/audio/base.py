"""Shared pieces for pitch sources."""

from typing import Callable, Optional

from ..core.interfaces import IPitchSource
from ..note_types import PitchSample
from ..note_utils import frequency_to_note


def make_sample(frequency: float, confidence: float, timestamp: float) -> Optional[PitchSample]:
    """Wrap a raw reading as a PitchSample, or None outside the vocal window."""
    note_data = frequency_to_note(frequency)
    if note_data is None:
        return None
    note, octave = note_data
    return PitchSample(
        frequency=frequency,
        note=note,
        octave=octave,
        confidence=confidence,
        timestamp=timestamp,
    )


class PitchSourceBase(IPitchSource):
    """Running-state bookkeeping common to every source."""

    _running: bool = False
    _callback: Optional[Callable[[PitchSample], None]] = None

    def is_running(self) -> bool:
        return self._running

    def _emit(self, sample: Optional[PitchSample]) -> None:
        if sample is not None and self._running and self._callback:
            self._callback(sample)
