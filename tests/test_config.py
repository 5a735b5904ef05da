import json
import os
import tempfile
import unittest
from unittest import mock

from vocal_search.audio.base import make_sample
from vocal_search.audio.synthetic import SyntheticPitchSource
from vocal_search.core.config import CONFIG_DIR_ENV, ConfigManager
from vocal_search.core.events import SearchEvents, SearchEventType
from vocal_search.core.factory import ComponentFactory
from vocal_search.detection.range_analyzer import LOWEST, analyze_vocal_range
from vocal_search.search.service import SearchService

from store_fixtures import build_store


class TestConfigManager(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.config_dir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_defaults_are_written(self):
        manager = ConfigManager(self.config_dir)
        self.assertEqual(manager.get_config("search")["max_results"], 15)
        self.assertEqual(manager.get_config("range_detection")["min_sustain_ms"], 2000.0)
        self.assertTrue(os.path.exists(os.path.join(self.config_dir, "search.json")))

    def test_update_is_persisted(self):
        ConfigManager(self.config_dir).update_config("search", {"max_results": 5})
        self.assertEqual(ConfigManager(self.config_dir).get_config("search")["max_results"], 5)

    def test_missing_keys_are_filled(self):
        with open(os.path.join(self.config_dir, "search.json"), "w") as f:
            json.dump({"max_results": 3}, f)
        config = ConfigManager(self.config_dir).get_config("search")
        self.assertEqual(config["max_results"], 3)
        self.assertEqual(config["min_score"], 5000)

    def test_corrupt_file_falls_back_to_defaults(self):
        with open(os.path.join(self.config_dir, "search.json"), "w") as f:
            f.write("{not json")
        self.assertEqual(ConfigManager(self.config_dir).get_config("search")["max_results"], 15)

    def test_reset(self):
        manager = ConfigManager(self.config_dir)
        manager.update_config("search", {"max_results": 5})
        manager.reset_config("search")
        self.assertEqual(manager.get_config("search")["max_results"], 15)

    def test_unknown_section(self):
        manager = ConfigManager(self.config_dir)
        self.assertFalse(manager.update_config("nope", {}))
        self.assertEqual(manager.get_config("nope"), {})


class TestComponentFactory(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.factory = ComponentFactory(ConfigManager(self._tmp.name))

    def tearDown(self):
        self._tmp.cleanup()

    def test_synthetic_pitch_source(self):
        source = self.factory.create_pitch_source("synthetic", realtime=False)
        self.assertIsInstance(source, SyntheticPitchSource)
        self.assertEqual(len(source.generate(3)), 3)

    def test_unknown_pitch_source(self):
        with self.assertRaises(ValueError):
            self.factory.create_pitch_source("theremin")

    def test_analyzer_config(self):
        config = self.factory.create_analyzer_config(min_samples=20)
        self.assertEqual(config.min_samples, 20)
        self.assertEqual(config.min_sustain_ms, 2000.0)

    def test_analyzer_config_follows_source_cadence(self):
        self.assertAlmostEqual(self.factory.source_interval_ms("microphone"), 1024 / 22050 * 1000)
        self.assertEqual(self.factory.source_interval_ms("synthetic"), 150.0)

        thresholds = self.factory.create_analyzer_config("microphone").thresholds()
        self.assertEqual(thresholds.min_consecutive, 43)
        self.assertEqual(thresholds.min_total, 86)
        self.assertEqual(thresholds.full_confidence, 161)

    def test_short_microphone_take_is_inconclusive(self):
        interval = 1024 / 22050 * 1000
        config = self.factory.create_analyzer_config()

        # 30 hops is about 1.4s of singing
        short = [make_sample(82.41, 0.95, i * interval) for i in range(30)]
        self.assertIsNone(analyze_vocal_range(short, LOWEST, config))

        held = [make_sample(82.41, 0.95, i * interval) for i in range(100)]
        result = analyze_vocal_range(held, LOWEST, config)
        self.assertEqual(result.note, "E2")
        self.assertAlmostEqual(result.confidence, 100 / 161)

    def test_song_store_uses_configured_path(self):
        store = self.factory.create_song_store()
        self.assertTrue(store.db_path.startswith(self._tmp.name))
        store.close()

    def test_search_service(self):
        service = self.factory.create_search_service(build_store(), max_results=3)
        self.assertIsInstance(service, SearchService)


class TestSearchEvents(unittest.TestCase):
    def test_failing_listener_does_not_stop_others(self):
        events = SearchEvents()
        received = []

        def broken(query, filter, results):
            raise RuntimeError("listener bug")

        events.on_results(broken)
        events.on_results(lambda query, filter, results: received.append((query, results)))
        events.emit_results("queen", "songs", [1])

        self.assertEqual(received, [("queen", [1])])

    def test_unsubscribe(self):
        events = SearchEvents()
        received = []
        unsubscribe = events.on_error(lambda query, filter, error: received.append(error))
        self.assertEqual(events.listener_count(SearchEventType.ERROR), 1)

        unsubscribe()
        events.emit_error("queen", "songs", RuntimeError("x"))

        self.assertEqual(received, [])
        self.assertEqual(events.listener_count(SearchEventType.ERROR), 0)

    def test_clear(self):
        events = SearchEvents()
        events.on_results(lambda *args: None)
        events.clear()
        self.assertEqual(events.listener_count(SearchEventType.RESULTS), 0)


class TestDefaultConfigDir(unittest.TestCase):
    def test_environment_override(self):
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {CONFIG_DIR_ENV: tmp}):
                manager = ConfigManager()
            self.assertEqual(str(manager.config_dir), tmp)
            self.assertEqual(
                manager.get_config("store")["db_path"], os.path.join(tmp, "songs.sqlite")
            )


if __name__ == "__main__":
    unittest.main()
