import unittest

from vocal_search.detection.range_fit import (
    find_closest_vocal_range_fit,
    is_artist_in_range,
    is_song_in_range,
    recommend_song,
)
from vocal_search.note_types import Song


class TestInRange(unittest.TestCase):
    def test_song(self):
        self.assertTrue(is_song_in_range("C3 - G4", "C3", "A4"))
        self.assertFalse(is_song_in_range("B2 - G4", "C3", "A4"))
        self.assertFalse(is_song_in_range("C3 - B4", "C3", "A4"))
        self.assertFalse(is_song_in_range("garbage", "C3", "A4"))
        self.assertFalse(is_song_in_range("C3 - G4", "C3", "nope"))

    def test_artist(self):
        songs = [Song(1, "a", "x", "C3 - E4"), Song(2, "b", "x", "D3 - G4"), Song(3, "c", "x", "?")]
        self.assertTrue(is_artist_in_range(songs, "C3", "A4"))
        self.assertFalse(is_artist_in_range(songs, "D3", "A4"))
        self.assertFalse(is_artist_in_range([], "C3", "A4"))


class TestClosestFit(unittest.TestCase):
    def test_tenor_song(self):
        fit = find_closest_vocal_range_fit("C3 - A4")
        self.assertEqual(fit.male, "Tenor")
        self.assertIsNone(fit.male_out_of_range)
        self.assertEqual(fit.female, "Alto")
        self.assertEqual(fit.female_out_of_range, "lower")

    def test_malformed(self):
        self.assertIsNone(find_closest_vocal_range_fit("C3 to A4"))


class TestRecommendSong(unittest.TestCase):
    def test_in_range(self):
        self.assertEqual(
            recommend_song("C3 - G4", "C3", "A4"), "This song is within your vocal range!"
        )

    def test_out_of_range(self):
        message = recommend_song("A2 - C5", "C3", "A4")
        self.assertTrue(message.startswith("This song is out of your vocal range."))
        self.assertIn("A2", message)
        self.assertIn("C5", message)

    def test_invalid(self):
        self.assertEqual(recommend_song("??", "C3", "A4"), "Invalid song vocal range provided.")


if __name__ == "__main__":
    unittest.main()
