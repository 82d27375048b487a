"""
Configuration loader for the read-along sync engine.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


class Config:
    """Configuration manager for playback synchronisation."""

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not self._config:
            self._load_config()

    def _get_project_root(self) -> Path:
        """Get the project root directory."""
        # Navigate up from syncreader/utils to project root
        current = Path(__file__).resolve()
        return current.parent.parent.parent

    def _get_config_path(self) -> Path:
        """Settings file, overridable with SYNCREADER_CONFIG."""
        override = os.environ.get("SYNCREADER_CONFIG")
        if override:
            return Path(override)
        return self._get_project_root() / "config" / "settings.yaml"

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        config_path = self._get_config_path()
        defaults = self._get_defaults()

        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
            self._config = _merge(defaults, loaded)
        else:
            # Use defaults if config doesn't exist
            self._config = defaults

    def reload(self) -> None:
        """Re-read the settings file."""
        self._config = {}
        self._load_config()

    def _get_defaults(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "sync": {
                "epsilon": 0.001,
                "mode": "persist",
                "balanced_index": True,
            },
            "playback": {
                "fps": 60,
                "rate": 1.0,
            },
            "logging": {
                "debug": False,
            },
        }

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Example:
            config.get("sync", "epsilon") -> 0.001
        """
        value = self._config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
            if value is None:
                return default
        return value

    @property
    def config_path(self) -> Path:
        """Get the settings file location."""
        return self._get_config_path()

    @property
    def epsilon(self) -> float:
        """Get the timestamp tolerance in seconds."""
        return float(self.get("sync", "epsilon", default=0.001))

    @property
    def default_mode(self) -> str:
        """Get the default activation mode name."""
        return self.get("sync", "mode", default="persist")

    @property
    def balanced_index(self) -> bool:
        """Check if the interval index should self-balance."""
        return bool(self.get("sync", "balanced_index", default=True))

    @property
    def fps(self) -> int:
        """Get the preview frame rate."""
        return int(self.get("playback", "fps", default=60))

    @property
    def rate(self) -> float:
        """Get the preview playback rate."""
        return float(self.get("playback", "rate", default=1.0))

    @property
    def debug(self) -> bool:
        """Check if debug logging is on."""
        return bool(self.get("logging", "debug", default=False))


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlay user settings on the defaults."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# Singleton instance
config = Config()
