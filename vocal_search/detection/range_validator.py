"""Plausibility check and voice-type classification for a detected range."""

from typing import Callable, List, Tuple

from ..errors import InvalidNoteError
from ..logger import get_logger
from ..note_types import RangeClassification
from ..note_utils import is_valid_value, note_to_value, parse_note

logger = get_logger(__name__)

MIN_RANGE_SEMITONES = 12  # one octave
MAX_RANGE_SEMITONES = 60  # five octaves

UNKNOWN = "Unknown"

# (label, condition on (low_octave, high_octave)); first match wins
CLASSIFICATION_BANDS: List[Tuple[str, Callable[[int, int], bool]]] = [
    ("Bass/Low Voice", lambda low, high: low <= 1),
    ("Bass", lambda low, high: low == 2 and high <= 4),
    ("Baritone", lambda low, high: low == 2 and high == 5),
    ("Baritone/Tenor", lambda low, high: low == 2 and high >= 6),
    ("Tenor", lambda low, high: low == 3 and high == 4),
    ("Countertenor/Alto", lambda low, high: low == 3 and high == 5),
    ("Mezzo-Soprano", lambda low, high: low == 3 and high >= 5),
    ("Alto", lambda low, high: low == 4 and high == 5),
    ("Soprano", lambda low, high: low == 4 and high == 6),
    ("Soprano/High Voice", lambda low, high: low >= 4 and high >= 6),
]


def validate_range(low: str, high: str) -> bool:
    """A range is plausible when it spans one to five octaves."""
    low_value = note_to_value(low)
    high_value = note_to_value(high)
    if not (is_valid_value(low_value) and is_valid_value(high_value)):
        return False
    semitones = high_value - low_value
    return MIN_RANGE_SEMITONES <= semitones <= MAX_RANGE_SEMITONES


def classify_voice(low_octave: int, high_octave: int) -> str:
    for label, matches in CLASSIFICATION_BANDS:
        if matches(low_octave, high_octave):
            return label
    return UNKNOWN


def describe_span(octaves: int, remaining_semitones: int) -> str:
    """e.g. "2 octaves, 1 semitone"."""
    description = f"{octaves} octave{'s' if octaves != 1 else ''}"
    if remaining_semitones > 0:
        description += f", {remaining_semitones} semitone{'s' if remaining_semitones != 1 else ''}"
    return description


def classify_range(low: str, high: str) -> RangeClassification:
    """Span statistics and a heuristic voice-type label.

    Malformed notes give a zero span classified as Unknown.
    """
    try:
        _, low_octave = parse_note(low)
        _, high_octave = parse_note(high)
    except InvalidNoteError as e:
        logger.error(f"Cannot classify range {low!r} - {high!r}: {e}")
        return RangeClassification(0, 0, 0, UNKNOWN, describe_span(0, 0))

    semitones = int(note_to_value(high) - note_to_value(low))
    octaves, remaining = divmod(semitones, 12)
    classification = classify_voice(low_octave, high_octave)

    return RangeClassification(
        semitones=semitones,
        octaves=octaves,
        remaining_semitones=remaining,
        classification=classification,
        range_description=describe_span(octaves, remaining),
    )
