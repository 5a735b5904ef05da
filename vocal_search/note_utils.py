"""Utility functions for working with musical notes and frequencies."""

import math
import re
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .errors import InvalidNoteError
from .logger import get_logger
from .note_types import Song

# Get logger for this module
logger = get_logger(__name__)

NOTE_PATTERN = re.compile(r"^([A-G]#?)(\d+)$")

SHARP_NOTES: List[str] = [
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
]

PITCH_CLASS_OFFSETS = {name: idx for idx, name in enumerate(SHARP_NOTES)}

# Returned by note_to_value for malformed notes; never compare it directly
NOTE_SENTINEL: float = float("nan")

# Frequencies outside this window are not treated as sung notes
MIN_VOCAL_FREQUENCY = 60.0  # ~B1 (low bass)
MAX_VOCAL_FREQUENCY = 1400.0  # ~F6 (high soprano)

A4_FREQUENCY = 440.0
C0_FREQUENCY = A4_FREQUENCY * 2 ** -4.75


def parse_note(note: str) -> Tuple[str, int]:
    """Split a note into pitch class and octave.

    Raises:
        InvalidNoteError: if the note does not match ``^[A-G]#?\\d+$``
    """
    match = NOTE_PATTERN.match(note) if isinstance(note, str) else None
    if not match:
        raise InvalidNoteError(note)
    return match.group(1), int(match.group(2))


def note_to_value(note: str) -> float:
    """Convert a note (e.g. 'C#4') to its semitone value.

    ``value = pitch_class_offset + (octave + 1) * 12`` so C4 is 60.

    Returns:
        The semitone value, or NOTE_SENTINEL (NaN) if the note is malformed
    """
    try:
        pitch_class, octave = parse_note(note)
    except InvalidNoteError:
        logger.error(f"Invalid note format: {note!r}")
        return NOTE_SENTINEL
    return PITCH_CLASS_OFFSETS[pitch_class] + (octave + 1) * 12


def is_valid_value(value: float) -> bool:
    """Check a note_to_value result against the sentinel."""
    return not math.isnan(value)


def value_to_note(value: float) -> str:
    """Convert a semitone value back to a note name (inverse of note_to_value)."""
    value = int(value)
    return f"{SHARP_NOTES[value % 12]}{value // 12 - 1}"


def format_note(note: str, octave: int) -> str:
    """Format a note for display (e.g. 'E2', 'A#4')."""
    return f"{note}{octave}"


def frequency_to_note(frequency: float) -> Optional[Tuple[str, int]]:
    """Convert a frequency in Hz to a (pitch class, octave) pair.

    Returns:
        None if the frequency is outside the vocal window
    """
    if frequency < MIN_VOCAL_FREQUENCY or frequency > MAX_VOCAL_FREQUENCY:
        return None

    half_steps = 12 * np.log2(frequency / C0_FREQUENCY)
    note_number = int(np.floor(half_steps + 0.5))

    return SHARP_NOTES[note_number % 12], note_number // 12


def parse_vocal_range(vocal_range: str) -> Optional[Tuple[str, str]]:
    """Split a "<Low> - <High>" range string into its two notes.

    Returns:
        (low, high), or None if either side is missing or malformed
    """
    if not isinstance(vocal_range, str):
        return None
    parts = [part.strip() for part in vocal_range.split(" - ")]
    if len(parts) != 2 or not all(parts):
        return None
    low, high = parts
    if not (NOTE_PATTERN.match(low) and NOTE_PATTERN.match(high)):
        return None
    return low, high


def calculate_overall_range(songs: Iterable[Song]) -> Optional[Tuple[str, str]]:
    """Lowest and highest note across a set of songs' vocal ranges.

    Songs with malformed ranges are skipped.

    Returns:
        (lowest, highest), or None if no song has a usable range
    """
    min_value = math.inf
    max_value = -math.inf

    for song in songs:
        parsed = parse_vocal_range(song.vocal_range)
        if parsed is None:
            logger.debug(f"Skipping unusable range {song.vocal_range!r} for song {song.id}")
            continue
        low, high = (note_to_value(n) for n in parsed)
        min_value = min(min_value, low)
        max_value = max(max_value, high)

    if math.isinf(min_value) or math.isinf(max_value):
        return None
    return value_to_note(min_value), value_to_note(max_value)
