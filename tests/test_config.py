"""
Tests for Configuration Loading
===============================
"""

import pytest

from kinect_bridge.modules.recognition import SwipeConfig
from kinect_bridge.modules.utils.config import Config


@pytest.fixture
def config():
    Config.reset()
    yield Config()
    Config.reset()


class TestConfig:
    """Test suite for Config."""

    def test_singleton(self, config):
        assert Config() is config

    def test_default_file_matches_swipe_defaults(self, config):
        config.load()

        assert SwipeConfig.from_dict(config.swipe) == SwipeConfig()
        assert config.streams["enabled"] == ["body"]

    def test_missing_file_uses_defaults(self, config, tmp_path):
        config.load(str(tmp_path / "missing.yaml"))

        assert config.swipe == {}
        assert config.get("swipe.cooldown_period", 800) == 800

    def test_dot_path_access(self, config, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("swipe:\n  cooldown_period: 500\nlogging:\n  level: DEBUG\n")

        config.load(str(path))

        assert config.get("swipe.cooldown_period") == 500
        assert config.get("swipe.missing") is None
        assert config.logging["level"] == "DEBUG"

    def test_validation_warns_on_bad_types(self, config, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text("swipe:\n  cooldown_period: soon\n")

        config.load(str(path))

        assert "swipe.cooldown_period" in caplog.text

    def test_update_merges(self, config, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("logging:\n  level: INFO\n  backup_count: 3\n")
        config.load(str(path))

        config.update({"logging": {"level": "DEBUG"}})

        assert config.logging == {"level": "DEBUG", "backup_count": 3}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
