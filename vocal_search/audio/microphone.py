"""Live pitch source: sounddevice input stream feeding aubio's YIN tracker."""

from __future__ import annotations

import time
from typing import Callable, ClassVar, Optional

import aubio
import numpy as np
import sounddevice as sd

from ..logger import get_logger
from ..note_types import PitchSample
from .base import PitchSourceBase, make_sample

logger = get_logger(__name__)


class MicrophonePitchSource(PitchSourceBase):
    """Emits a PitchSample for every confident reading from the microphone."""

    SAMPLE_RATE: ClassVar[int] = 22050  # Hz
    HOP_SIZE: ClassVar[int] = 1024
    MIN_CONFIDENCE: ClassVar[float] = 0.85  # Only high-confidence detections
    MIN_SIGNAL: ClassVar[float] = 0.01  # Basic noise gate

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        hop_size: Optional[int] = None,
        min_confidence: Optional[float] = None,
        tolerance: float = 0.8,
    ) -> None:
        self._device_id = device_id
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._hop_size = hop_size or self.HOP_SIZE
        self._min_confidence = self.MIN_CONFIDENCE if min_confidence is None else min_confidence
        self._tolerance = tolerance
        self._stream: Optional[sd.InputStream] = None
        self._pitch_detector = self._create_detector()

    def _create_detector(self) -> "aubio.pitch":
        detector = aubio.pitch("yin", self._hop_size * 2, self._hop_size, self._sample_rate)
        detector.set_unit("Hz")
        detector.set_tolerance(self._tolerance)
        return detector

    def _audio_callback(self, indata: np.ndarray, _frames: int, _time_info, status) -> None:
        """Called from the audio thread; keep it short."""
        if status:
            logger.warning(f"Audio callback status: {status}")

        audio_data = indata[:, 0] if indata.ndim > 1 else indata
        audio_data = np.ascontiguousarray(audio_data, dtype=np.float32)
        if len(audio_data) != self._hop_size:
            return
        if float(np.max(np.abs(audio_data))) < self.MIN_SIGNAL:
            return

        frequency = float(self._pitch_detector(audio_data)[0])
        confidence = float(self._pitch_detector.get_confidence())
        if confidence <= self._min_confidence:
            return

        self._emit(make_sample(frequency, confidence, time.monotonic() * 1000))

    def start(self, callback: Callable[[PitchSample], None]) -> bool:
        if self._running:
            logger.warning("Microphone pitch source already running")
            return False

        self._callback = callback
        try:
            self._stream = sd.InputStream(
                device=self._device_id,
                samplerate=self._sample_rate,
                blocksize=self._hop_size,
                channels=1,
                dtype="float32",
                callback=self._audio_callback,
            )
            self._stream.start()
        except Exception as e:
            logger.error(f"Could not open microphone: {e}", exc_info=True)
            self._stream = None
            return False

        self._running = True
        logger.info(f"Microphone pitch source started at {self._sample_rate} Hz")
        return True

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._stream:
            self._stream.stop()
            self._stream.close()
            self._stream = None
        logger.info("Microphone pitch source stopped")
