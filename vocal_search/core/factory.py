"""Factory for creating vocal_search components."""

import importlib
from typing import Dict, Optional, Tuple

from ..detection.range_analyzer import RangeAnalyzerConfig
from ..logger import get_logger
from ..search.cache import LRUCache
from ..search.service import SearchService
from ..store.sqlite_store import SQLiteSongStore
from .config import ConfigManager
from .interfaces import IPitchSource, ISongStore

logger = get_logger(__name__)

# Audio backends pull in optional native libraries, so they are imported on demand
PITCH_SOURCE_CLASSES: Dict[str, Tuple[str, str]] = {
    "synthetic": ("vocal_search.audio.synthetic", "SyntheticPitchSource"),
    "microphone": ("vocal_search.audio.microphone", "MicrophonePitchSource"),
    "wav": ("vocal_search.audio.wav_file", "WavFilePitchSource"),
}


class ComponentFactory:
    """Factory for creating vocal_search components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()
        self.pitch_source_classes = dict(PITCH_SOURCE_CLASSES)

    def create_song_store(self, db_path: Optional[str] = None) -> ISongStore:
        """Create the SQLite song store configured under ``store.db_path``."""
        path = (
            db_path
            or self.config_manager.get_config("store").get("db_path")
            or str(self.config_manager.config_dir / "songs.sqlite")
        )
        store = SQLiteSongStore(path)
        logger.info(f"Created song store: {path}")
        return store

    def create_pitch_source(self, implementation: Optional[str] = None, **kwargs) -> IPitchSource:
        """Create a pitch source.

        Args:
            implementation: "synthetic", "microphone" or "wav"; defaults to
                the configured implementation
            **kwargs: Additional parameters to pass to the constructor

        Returns:
            Pitch source instance

        Raises:
            ValueError: If the implementation is not registered
        """
        config = self.config_manager.get_config("pitch_source")
        implementation = implementation or config.get("implementation", "microphone")
        if implementation not in self.pitch_source_classes:
            raise ValueError(f"Unknown pitch source implementation: {implementation}")

        if implementation == "microphone":
            params = {
                "device_id": config.get("device_id"),
                "sample_rate": config.get("sample_rate"),
                "hop_size": config.get("hop_size"),
                "min_confidence": config.get("min_confidence"),
            }
        elif implementation == "wav":
            params = {
                "hop_size": config.get("hop_size", 1024),
                "min_confidence": config.get("min_confidence", 0.85),
            }
        else:
            params = {"interval_ms": config.get("interval_ms", 150.0)}
        params.update(kwargs)

        module_name, class_name = self.pitch_source_classes[implementation]
        cls = getattr(importlib.import_module(module_name), class_name)
        instance = cls(**params)

        logger.info(f"Created pitch source: {implementation}")
        return instance

    def source_interval_ms(self, implementation: Optional[str] = None) -> float:
        """Nominal gap between samples of a pitch source, in milliseconds.

        The aubio-backed sources emit one reading per hop, so their cadence is
        ``hop_size / sample_rate``; the synthetic source uses ``interval_ms``.
        """
        config = self.config_manager.get_config("pitch_source")
        implementation = implementation or config.get("implementation", "microphone")
        if implementation in ("microphone", "wav"):
            hop_size = config.get("hop_size") or 1024
            sample_rate = config.get("sample_rate") or 22050
            return hop_size / sample_rate * 1000.0
        return float(config.get("interval_ms", 150.0))

    def create_analyzer_config(self, implementation: Optional[str] = None, **kwargs) -> RangeAnalyzerConfig:
        """Analyzer thresholds for recordings from the given pitch source.

        Unless ``sampling_interval_ms`` is passed, the fallback cadence is the
        source's nominal one; timestamps still take precedence while
        ``infer_interval`` is on.
        """
        config = self.config_manager.get_config("range_detection")
        config["sampling_interval_ms"] = self.source_interval_ms(implementation)
        config.update(kwargs)
        return RangeAnalyzerConfig.from_dict(config)

    def create_search_service(self, store: Optional[ISongStore] = None, **kwargs) -> SearchService:
        """Create a search service with LRU caches sized from configuration."""
        config = self.config_manager.get_config("search")
        config.update(kwargs)

        service = SearchService(
            store or self.create_song_store(),
            max_results=config["max_results"],
            min_score=config["min_score"],
            multi_field_min_score=config["multi_field_min_score"],
            max_splits=config["max_splits"],
            artist_limit=config["artist_limit"],
            browse_limit=config["browse_limit"],
            result_cache=LRUCache(config["result_cache_size"]),
            artist_cache=LRUCache(config["artist_cache_size"]),
        )
        logger.info("Created search service")
        return service
