"""Comparing songs against a singer's range and standard voice types."""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..logger import get_logger
from ..note_types import RangeFit, Song
from ..note_utils import calculate_overall_range, is_valid_value, note_to_value, parse_vocal_range

logger = get_logger(__name__)


@dataclass(frozen=True)
class VoiceBand:
    category: str
    low: str
    high: str
    weight: int


MALE_BANDS = (
    VoiceBand("Tenor", "C3", "A4", 3),
    VoiceBand("Baritone", "A2", "F4", 2),
    VoiceBand("Bass", "E2", "E4", 1),
)

FEMALE_BANDS = (
    VoiceBand("Soprano", "C4", "A5", 3),
    VoiceBand("Mezzo-Soprano", "A3", "F5", 2),
    VoiceBand("Alto", "F3", "D5", 1),
)


def _range_values(low: str, high: str) -> Optional[Tuple[float, float]]:
    low_value, high_value = note_to_value(low), note_to_value(high)
    if not (is_valid_value(low_value) and is_valid_value(high_value)):
        return None
    return low_value, high_value


def is_song_in_range(song_range: str, user_low: str, user_high: str) -> bool:
    """True when the whole song fits inside the user's range."""
    parsed = parse_vocal_range(song_range)
    if parsed is None:
        return False
    song = _range_values(*parsed)
    user = _range_values(user_low, user_high)
    if song is None or user is None:
        return False
    return song[0] >= user[0] and song[1] <= user[1]


def is_artist_in_range(songs: Iterable[Song], user_low: str, user_high: str) -> bool:
    """True when the artist's overall range fits inside the user's range."""
    overall = calculate_overall_range(songs)
    if overall is None:
        return False
    return is_song_in_range(f"{overall[0]} - {overall[1]}", user_low, user_high)


def _out_of_range(song_low: float, song_high: float, band_low: float, band_high: float) -> Optional[str]:
    lower = song_low < band_low
    higher = song_high > band_high
    if lower and higher:
        return "both"
    if higher:
        return "higher"
    if lower:
        return "lower"
    return None


def _best_fit(song_low: float, song_high: float, bands: Iterable[VoiceBand]) -> Tuple[str, Optional[str]]:
    best_category = "Unknown"
    best_score = float("-inf")
    out_of_range = None

    for band in bands:
        band_low, band_high = note_to_value(band.low), note_to_value(band.high)
        coverage = max(0.0, min(band_high, song_high) - max(band_low, song_low))
        deviation = abs(song_low - band_low) + abs(song_high - band_high)
        song_centre = (song_low + song_high) / 2
        band_centre = (band_low + band_high) / 2
        centre_bonus = max(0.0, 1 - abs(song_centre - band_centre) / 12) * band.weight * 10

        score = coverage * 2 - deviation + centre_bonus
        if score > best_score:
            best_score = score
            best_category = band.category
            out_of_range = _out_of_range(song_low, song_high, band_low, band_high)

    return best_category, out_of_range


def find_closest_vocal_range_fit(song_range: str) -> Optional[RangeFit]:
    """Closest male and female voice type for a song's range.

    Returns:
        None if the range string is malformed
    """
    parsed = parse_vocal_range(song_range)
    values = _range_values(*parsed) if parsed else None
    if values is None:
        logger.warning(f"Cannot fit malformed range {song_range!r}")
        return None

    male, male_out = _best_fit(*values, MALE_BANDS)
    female, female_out = _best_fit(*values, FEMALE_BANDS)
    return RangeFit(male=male, female=female, male_out_of_range=male_out, female_out_of_range=female_out)


def recommend_song(song_range: str, user_low: str, user_high: str) -> str:
    """Human-readable verdict on whether a user can sing a song."""
    parsed = parse_vocal_range(song_range)
    user = _range_values(user_low, user_high)
    if parsed is None or user is None:
        return "Invalid song vocal range provided."

    song_low, song_high = parsed
    low_value, high_value = _range_values(song_low, song_high)
    if low_value >= user[0] and high_value <= user[1]:
        return "This song is within your vocal range!"

    messages: List[str] = ["This song is out of your vocal range."]
    if low_value < user[0]:
        messages.append(f"It goes down to {song_low}, below your lowest note {user_low}.")
    if high_value > user[1]:
        messages.append(f"It goes up to {song_high}, above your highest note {user_high}.")
    return " ".join(messages)
