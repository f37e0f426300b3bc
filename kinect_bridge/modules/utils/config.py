"""
Centralized configuration manager.
Loads the YAML config and provides typed access with defaults.
"""

import logging
import os

import yaml

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
_CONFIG_DIR = os.path.join(_BASE_DIR, "config")

# Schema: known sections and their expected field types
_CONFIG_SCHEMA = {
    "driver": {
        "module": str,
        "class": str,
    },
    "streams": {
        "enabled": list,
        "multi_source_frame_types": list,
        "include_joint_floor_data": bool,
    },
    "swipe": {
        "velocity_threshold": float,
        "min_movement_distance": float,
        "max_horizontal_change": float,
        "max_vertical_change": float,
        "tracking_duration": float,
        "cooldown_period": float,
    },
    "gestures": {
        "raise_head_tolerance": float,
        "jump_threshold": float,
    },
    "logging": {
        "level": str,
        "max_size_mb": int,
        "backup_count": int,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Singleton configuration manager."""

    _instance = None
    _data = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load(self, config_path=None):
        """Load configuration from a YAML file."""
        config_path = config_path or os.path.join(_CONFIG_DIR, "config.yaml")

        try:
            with open(config_path, "r") as f:
                self._data = yaml.safe_load(f) or {}
            logger.info("Loaded config from %s", config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using defaults", config_path)
            self._data = {}

        self._validate()
        return self

    def update(self, overrides: dict):
        """Merge overrides (e.g. from the command line) into the loaded config."""
        self._data = _deep_merge(self._data, overrides)
        return self

    def _validate(self):
        """Validate known config fields against schema."""
        warnings = []
        for section_name, fields in _CONFIG_SCHEMA.items():
            section = self._data.get(section_name)
            if section is None:
                continue
            if not isinstance(section, dict):
                warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
                continue
            for field_name, expected_type in fields.items():
                if field_name in section:
                    value = section[field_name]
                    # Allow int where float is expected
                    if expected_type is float and isinstance(value, (int, float)) and not isinstance(value, bool):
                        continue
                    if not isinstance(value, expected_type):
                        warnings.append(
                            f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                            f"got {type(value).__name__} ({value!r})"
                        )

        for w in warnings:
            logger.warning("Config validation: %s", w)
        if not warnings:
            logger.debug("Config validation passed")
        return warnings

    def get(self, key_path: str, default=None):
        """Get nested config value using dot notation: 'swipe.cooldown_period'."""
        value = self._data
        for key in key_path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_section(self, section: str) -> dict:
        """Get an entire config section."""
        return self._data.get(section) or {}

    @property
    def driver(self) -> dict:
        return self.get_section("driver")

    @property
    def streams(self) -> dict:
        return self.get_section("streams")

    @property
    def swipe(self) -> dict:
        return self.get_section("swipe")

    @property
    def gestures(self) -> dict:
        return self.get_section("gestures")

    @property
    def logging(self) -> dict:
        return self.get_section("logging")

    @property
    def base_dir(self) -> str:
        return _BASE_DIR

    @classmethod
    def reset(cls):
        """Reset singleton instance (for testing)."""
        cls._instance = None
        cls._data = {}
