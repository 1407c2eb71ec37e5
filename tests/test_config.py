"""
Tests for settings loading and logging setup.
"""

import json
import logging

import pytest

from planogram_core.utils.config import LayoutSettings, load_settings
from planogram_core.utils.error_handler import ConfigurationError
from planogram_core.utils.logger import configure_logging


class TestLayoutSettings:

    def test_defaults(self):
        settings = load_settings()
        assert settings.scale == 10.0
        assert settings.grid_size == 1.0
        assert settings.enforce_bounds is True

    @pytest.mark.parametrize("overrides", [
        {"scale": 0},
        {"grid_size": -1},
        {"snap_threshold": -5},
        {"io_timeout": 0},
        {"console_level": "LOUD"},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigurationError):
            LayoutSettings(**overrides)

    def test_unknown_keys_are_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown settings"):
            LayoutSettings.from_dict({"scale": 12, "colour": "red"})

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"scale": 12.5, "enforce_bounds": False}))
        settings = load_settings(str(path))
        assert settings.scale == 12.5
        assert not settings.enforce_bounds
        assert settings.to_dict()["io_timeout"] == 10.0

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_bad_files(self, tmp_path, content):
        path = tmp_path / "settings.json"
        path.write_text(content)
        with pytest.raises(ConfigurationError):
            load_settings(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings(str(tmp_path / "nope.json"))


class TestLogging:

    def test_file_handler_only_with_log_dir(self, tmp_path):
        logger = configure_logging()
        assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)

        logger = configure_logging(str(tmp_path / "logs"), "WARNING", "DEBUG")
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
        logger.debug("layout saved")
        assert list((tmp_path / "logs").iterdir())
        configure_logging()
