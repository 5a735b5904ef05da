"""Deterministic pitch source for development and tests."""

import threading
import time
from typing import Callable, List, Optional, Sequence

from ..logger import get_logger
from ..note_types import PitchSample
from .base import PitchSourceBase, make_sample

logger = get_logger(__name__)

# E2-A2, A3-F4, A4-F5
DEVELOPMENT_FREQUENCIES: List[float] = [
    82.41, 87.31, 92.50, 98.00, 103.83, 110.00,
    220.00, 246.94, 261.63, 293.66, 329.63, 349.23,
    440.00, 493.88, 523.25, 587.33, 659.25, 698.46,
]


class SyntheticPitchSource(PitchSourceBase):
    """Cycles through a fixed list of frequencies at a fixed cadence.

    Each frequency is held for ``hold`` consecutive samples, so with a
    large enough hold the output contains sustained notes.
    """

    def __init__(
        self,
        frequencies: Optional[Sequence[float]] = None,
        interval_ms: float = 150.0,
        hold: int = 1,
        confidence: float = 0.95,
        realtime: bool = True,
        max_samples: Optional[int] = None,
    ):
        self._frequencies = list(DEVELOPMENT_FREQUENCIES if frequencies is None else frequencies)
        if not self._frequencies:
            raise ValueError("SyntheticPitchSource needs at least one frequency")
        self._interval_ms = interval_ms
        self._hold = max(1, hold)
        self._confidence = confidence
        self._realtime = realtime
        self._max_samples = max_samples
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def _sample_at(self, index: int, timestamp: float) -> Optional[PitchSample]:
        frequency = self._frequencies[(index // self._hold) % len(self._frequencies)]
        return make_sample(frequency, self._confidence, timestamp)

    def generate(self, count: int, start_ms: float = 0.0) -> List[PitchSample]:
        """Produce ``count`` readings synchronously (out-of-window ones are skipped)."""
        samples = []
        for index in range(count):
            sample = self._sample_at(index, start_ms + index * self._interval_ms)
            if sample is not None:
                samples.append(sample)
        return samples

    def start(self, callback: Callable[[PitchSample], None]) -> bool:
        if self._running:
            logger.warning("Synthetic pitch source already running")
            return False

        self._callback = callback
        self._stop_event.clear()
        self._running = True
        self._thread = threading.Thread(target=self._stream, daemon=True)
        self._thread.start()
        logger.info(f"Synthetic pitch source started ({len(self._frequencies)} frequencies)")
        return True

    def _stream(self) -> None:
        index = 0
        start = time.monotonic() * 1000
        while not self._stop_event.is_set():
            if self._max_samples is not None and index >= self._max_samples:
                break
            self._emit(self._sample_at(index, start + index * self._interval_ms))
            index += 1
            if self._realtime:
                self._stop_event.wait(self._interval_ms / 1000)
        self._running = False

    def stop(self) -> None:
        if not self._running and self._thread is None:
            return
        self._running = False
        self._stop_event.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
        logger.info("Synthetic pitch source stopped")
