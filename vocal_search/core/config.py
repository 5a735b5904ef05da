"""JSON-backed settings for vocal_search components.

Each section lives in its own file (``search.json``, ``range_detection.json``
...) under the config directory, so users can tune one area without
touching the rest. Missing files are created with defaults; missing keys
in an existing file fall back to the defaults without rewriting it.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ..logger import get_logger

logger = get_logger(__name__)

CONFIG_DIR_ENV = "VOCAL_SEARCH_CONFIG_DIR"

DEFAULT_CONFIGS: Dict[str, Dict[str, Any]] = {
    "search": {
        "max_results": 15,
        "min_score": 5000,
        "multi_field_min_score": 3000,
        "max_splits": 6,
        "artist_limit": 20,
        "browse_limit": 25,
        "result_cache_size": 128,
        "artist_cache_size": 256,
    },
    "range_detection": {
        "min_sustain_ms": 2000.0,
        "min_total_ms": 4000.0,
        "full_confidence_ms": 7500.0,
        "min_samples": 10,
        "infer_interval": True,
        "recording_duration_s": 5.0,
    },
    "pitch_source": {
        "implementation": "microphone",  # "microphone", "synthetic" or "wav"
        "device_id": None,
        "sample_rate": 22050,
        "hop_size": 1024,
        "min_confidence": 0.85,
        "interval_ms": 150.0,
    },
    "store": {
        "db_path": None,  # None means <config_dir>/songs.sqlite
    },
}


def default_config_dir() -> Path:
    """``$VOCAL_SEARCH_CONFIG_DIR`` if set, else ``~/.config/vocal_search``."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return Path(os.path.expanduser("~")) / ".config" / "vocal_search"


class ConfigManager:
    """Loads, updates and persists the configuration sections."""

    def __init__(self, config_dir: Optional[str] = None):
        self.config_dir = Path(config_dir) if config_dir else default_config_dir()
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.default_configs = copy.deepcopy(DEFAULT_CONFIGS)
        self.default_configs["store"]["db_path"] = str(self.config_dir / "songs.sqlite")

        self.configs: Dict[str, Dict[str, Any]] = {
            name: self.load_config(name, defaults) for name, defaults in self.default_configs.items()
        }

    def _path(self, name: str) -> Path:
        return self.config_dir / f"{name}.json"

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Read one section, creating its file from defaults when absent.

        Unreadable or non-object files are logged and replaced in memory by
        the defaults; the file itself is left for the user to fix.
        """
        path = self._path(name)
        if not path.exists():
            self.save_config(name, default_config)
            return dict(default_config)

        try:
            with open(path, "r") as f:
                stored = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read {path}, using defaults: {e}")
            return dict(default_config)

        if not isinstance(stored, dict):
            logger.error(f"{path} does not hold a JSON object, using defaults")
            return dict(default_config)

        logger.info(f"Loaded {name} configuration from {path}")
        return {**default_config, **stored}

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Write one section; returns False if the file could not be written."""
        path = self._path(name)
        try:
            with open(path, "w") as f:
                json.dump(config, f, indent=2)
        except OSError as e:
            logger.error(f"Could not write {path}: {e}")
            return False
        logger.debug(f"Saved {name} configuration to {path}")
        return True

    def get_config(self, name: str) -> Dict[str, Any]:
        """A copy of a section, or ``{}`` for an unknown name."""
        return dict(self.configs.get(name, {}))

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        if name not in self.configs:
            logger.error(f"Unknown configuration section: {name}")
            return False
        self.configs[name].update(updates)
        return self.save_config(name, self.configs[name])

    def reset_config(self, name: str) -> bool:
        if name not in self.default_configs:
            logger.error(f"Unknown configuration section: {name}")
            return False
        self.configs[name] = dict(self.default_configs[name])
        return self.save_config(name, self.configs[name])
