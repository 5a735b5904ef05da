"""Offline pitch source reading a recording with soundfile and tracking it with aubio."""

import threading
import time
from typing import Callable, List, Optional

import aubio
import numpy as np
import soundfile as sf

from ..logger import get_logger
from ..note_types import PitchSample
from .base import PitchSourceBase, make_sample

logger = get_logger(__name__)


class WavFilePitchSource(PitchSourceBase):
    """Tracks pitch through an audio file.

    Sample timestamps come from the frame position, so a recording analyses
    the same whether it is played back in real time or not.
    """

    def __init__(
        self,
        file_path: str,
        hop_size: int = 1024,
        min_confidence: float = 0.85,
        tolerance: float = 0.8,
        realtime: bool = False,
    ):
        self._file_path = file_path
        self._hop_size = hop_size
        self._min_confidence = min_confidence
        self._tolerance = tolerance
        self._realtime = realtime
        self._thread: Optional[threading.Thread] = None

        with sf.SoundFile(self._file_path) as f:
            self._sample_rate = f.samplerate
            self._channels = f.channels

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    def _readings(self):
        """Yield PitchSamples for every confident hop in the file."""
        detector = aubio.pitch("yin", self._hop_size * 2, self._hop_size, self._sample_rate)
        detector.set_unit("Hz")
        detector.set_tolerance(self._tolerance)

        position = 0
        with sf.SoundFile(self._file_path) as f:
            while True:
                block = f.read(self._hop_size, dtype="float32", always_2d=True)
                if len(block) == 0:
                    break
                mono = np.ascontiguousarray(block.mean(axis=1), dtype=np.float32)
                if len(mono) < self._hop_size:
                    mono = np.concatenate((mono, np.zeros(self._hop_size - len(mono), dtype=np.float32)))

                frequency = float(detector(mono)[0])
                confidence = float(detector.get_confidence())
                timestamp = position / self._sample_rate * 1000
                position += len(block)

                if confidence > self._min_confidence:
                    sample = make_sample(frequency, confidence, timestamp)
                    if sample is not None:
                        yield sample

    def read_all(self) -> List[PitchSample]:
        """Analyse the whole file synchronously."""
        samples = list(self._readings())
        logger.info(f"Read {len(samples)} pitch samples from {self._file_path}")
        return samples

    def start(self, callback: Callable[[PitchSample], None]) -> bool:
        if self._running:
            return False
        self._callback = callback
        self._running = True
        self._thread = threading.Thread(target=self._stream, daemon=True)
        self._thread.start()
        return True

    def _stream(self) -> None:
        try:
            for sample in self._readings():
                if not self._running:
                    break
                self._emit(sample)
                if self._realtime:
                    time.sleep(self._hop_size / self._sample_rate)
        except RuntimeError as e:
            logger.error(f"Error streaming {self._file_path}: {e}", exc_info=True)
        finally:
            self._running = False

    def stop(self) -> None:
        self._running = False
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None
