"""Vocal range analysis over a window of pitch samples.

Only sustained notes count. A note is a candidate extremum when it was held
for at least ``min_sustain_ms`` in each counted stretch and for at least
``min_total_ms`` across all of them, so a singer who breathes mid-note is
not penalised while short blips and glides are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..logger import get_logger
from ..note_types import ConsecutiveGroup, NoteOccurrence, PitchSample, VocalRangeResult

logger = get_logger(__name__)

LOWEST = "lowest"
HIGHEST = "highest"


@dataclass
class RangeAnalyzerConfig:
    """Thresholds expressed in time; sample counts are derived from the cadence."""

    sampling_interval_ms: float = 150.0
    min_sustain_ms: float = 2000.0
    min_total_ms: float = 4000.0
    full_confidence_ms: float = 7500.0
    min_samples: int = 10
    infer_interval: bool = True

    @classmethod
    def from_dict(cls, config: Dict) -> "RangeAnalyzerConfig":
        fields = cls.__dataclass_fields__
        return cls(**{key: value for key, value in config.items() if key in fields})

    def counts_for(self, interval_ms: float) -> "SampleThresholds":
        return SampleThresholds(
            min_consecutive=max(1, round(self.min_sustain_ms / interval_ms)),
            min_total=max(1, round(self.min_total_ms / interval_ms)),
            full_confidence=max(1, round(self.full_confidence_ms / interval_ms)),
        )

    def thresholds(self, samples: Optional[Sequence[PitchSample]] = None) -> "SampleThresholds":
        """Sample-count thresholds for a window.

        With ``infer_interval`` the cadence is the median gap between sample
        timestamps. The configured interval applies when inference is off or
        the timestamps give no usable gap.
        """
        interval = self.sampling_interval_ms
        if self.infer_interval and samples:
            measured = estimate_interval_ms(samples)
            if measured is not None:
                interval = measured
        return self.counts_for(interval)


@dataclass(frozen=True)
class SampleThresholds:
    min_consecutive: int
    min_total: int
    full_confidence: int


def estimate_interval_ms(samples: Sequence[PitchSample]) -> Optional[float]:
    """Median gap between consecutive sample timestamps, if it is usable."""
    if len(samples) < 2:
        return None
    deltas = np.diff(np.asarray([s.timestamp for s in samples], dtype=float))
    deltas = deltas[deltas > 0]
    if deltas.size == 0:
        logger.warning("Sample timestamps are not increasing; using configured interval")
        return None
    return float(np.median(deltas))


def build_consecutive_groups(samples: Sequence[PitchSample]) -> List[ConsecutiveGroup]:
    """Split samples into maximal runs of the same note and octave."""
    groups: List[ConsecutiveGroup] = []
    for sample in samples:
        if groups and groups[-1].note_name == sample.note_name:
            groups[-1].samples.append(sample)
        else:
            groups.append(ConsecutiveGroup(note_name=sample.note_name, samples=[sample]))
    return groups


def aggregate_occurrences(
    groups: Sequence[ConsecutiveGroup], min_consecutive: int
) -> Dict[str, NoteOccurrence]:
    """Combine the sustained groups of each note across the whole window."""
    occurrences: Dict[str, NoteOccurrence] = {}
    for group in groups:
        if len(group) < min_consecutive:
            continue
        occurrence = occurrences.setdefault(group.note_name, NoteOccurrence(group.note_name))
        occurrence.total_count += len(group)
        occurrence.frequencies.extend(sample.frequency for sample in group.samples)
    return occurrences


def analyze_vocal_range(
    samples: Sequence[PitchSample],
    which: str,
    config: Optional[RangeAnalyzerConfig] = None,
) -> Optional[VocalRangeResult]:
    """Find the lowest or highest sustained note in a recording.

    Args:
        samples: Time-ordered pitch samples
        which: "lowest" or "highest"
        config: Thresholds, defaults to a 150ms cadence

    Returns:
        The winning note, or None when there is not enough sustained
        evidence (the caller should ask the user to try again)
    """
    if which not in (LOWEST, HIGHEST):
        raise ValueError(f"which must be 'lowest' or 'highest', got {which!r}")

    config = config or RangeAnalyzerConfig()
    if len(samples) < config.min_samples:
        logger.info(f"Not enough samples to analyse: {len(samples)} < {config.min_samples}")
        return None

    thresholds = config.thresholds(samples)
    groups = build_consecutive_groups(samples)
    occurrences = aggregate_occurrences(groups, thresholds.min_consecutive)

    qualifying = [o for o in occurrences.values() if o.total_count >= thresholds.min_total]
    logger.debug(
        f"{len(samples)} samples -> {len(groups)} groups -> {len(occurrences)} sustained notes "
        f"-> {len(qualifying)} qualifying (min_consecutive={thresholds.min_consecutive}, "
        f"min_total={thresholds.min_total})"
    )

    if not qualifying:
        logger.info(f"No note was sustained long enough to pick the {which} note")
        return None

    pick = min if which == LOWEST else max
    best = pick(qualifying, key=lambda o: o.average_frequency)
    confidence = min(best.total_count / thresholds.full_confidence, 1.0)

    logger.info(
        f"Detected {which} note {best.note_name} "
        f"({best.average_frequency:.2f}Hz, {best.total_count} samples, confidence {confidence:.2f})"
    )
    return VocalRangeResult(
        note=best.note_name, frequency=best.average_frequency, confidence=confidence
    )
