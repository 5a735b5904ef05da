"""Interactive range detection: record the lowest note, then the highest."""

import threading
from dataclasses import dataclass
from typing import List, Optional

from ..core.interfaces import IPitchSource
from ..errors import ImplausibleRangeError
from ..logger import get_logger
from ..note_types import PitchSample, RangeClassification, VocalRangeResult
from .range_analyzer import RangeAnalyzerConfig, analyze_vocal_range
from .range_validator import classify_range, validate_range

logger = get_logger(__name__)


@dataclass
class DetectedRange:
    low: str
    high: str
    classification: RangeClassification


class RangeDetectionSession:
    """Drives a pitch source through one "lowest"/"highest" recording each."""

    def __init__(
        self,
        source: IPitchSource,
        config: Optional[RangeAnalyzerConfig] = None,
        duration_s: float = 5.0,
    ):
        self.source = source
        self.config = config or RangeAnalyzerConfig()
        self.duration_s = duration_s

        self._samples: List[PitchSample] = []
        self._lock = threading.Lock()
        self._done = threading.Event()

    def _on_sample(self, sample: PitchSample) -> None:
        with self._lock:
            self._samples.append(sample)

    def collect(self) -> List[PitchSample]:
        """Record from the source for ``duration_s`` seconds.

        Returns early if the source stops on its own (e.g. end of file).
        """
        with self._lock:
            self._samples = []
        self._done.clear()

        if not self.source.start(self._on_sample):
            logger.error("Pitch source failed to start")
            return []

        try:
            remaining = self.duration_s
            while remaining > 0 and self.source.is_running():
                step = min(0.05, remaining)
                if self._done.wait(step):
                    logger.info("Recording cancelled")
                    break
                remaining -= step
        finally:
            self.source.stop()

        with self._lock:
            samples = list(self._samples)
        logger.info(f"Collected {len(samples)} pitch samples")
        return samples

    def record(self, which: str) -> Optional[VocalRangeResult]:
        """Collect and analyse one take.

        Returns:
            The detected note, or None when the take was inconclusive
        """
        return analyze_vocal_range(self.collect(), which, self.config)

    def cancel(self) -> None:
        self._done.set()
        self.source.stop()

    def finish(self, low: str, high: str) -> DetectedRange:
        """Validate and classify the two recorded notes.

        Raises:
            ImplausibleRangeError: the span is under one or over five octaves
        """
        if not validate_range(low, high):
            raise ImplausibleRangeError(low, high)
        classification = classify_range(low, high)
        logger.info(f"Detected range {low} - {high}: {classification.classification}")
        return DetectedRange(low=low, high=high, classification=classification)
