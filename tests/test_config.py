"""
Tests for configuration loading and validation.
"""

from datetime import time
from pathlib import Path

import pendulum
import pytest

from bookingslots.config import AppConfig, DefaultWindowConfig


class TestDefaultWindowConfig:
    def test_defaults(self):
        window = DefaultWindowConfig()

        assert window.get_start_time() == time(9, 0)
        assert window.get_end_time() == time(18, 0)

    def test_hour_out_of_range(self):
        with pytest.raises(ValueError, match="between 0 and 23"):
            DefaultWindowConfig(start_hour=24)

    def test_end_before_start(self):
        with pytest.raises(ValueError, match="later than start_hour"):
            DefaultWindowConfig(start_hour=17, end_hour=9)


class TestAppConfig:
    def test_default_timezone_is_plus_nine(self):
        tz = AppConfig().tzinfo()

        assert pendulum.datetime(2024, 6, 3, tz=tz).offset == 9 * 3600

    def test_offset_range(self):
        with pytest.raises(ValueError, match="utc_offset_hours"):
            AppConfig(utc_offset_hours=20)

    def test_log_level_is_normalised(self):
        assert AppConfig(log_level="debug").log_level == "DEBUG"

        with pytest.raises(ValueError, match="log_level"):
            AppConfig(log_level="chatty")

    def test_load_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "utc_offset_hours: 1\n"
            "default_window: {start_hour: 8, end_hour: 16}\n"
            "data_file: data.yaml\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(path)

        assert config.utc_offset_hours == 1
        assert config.default_window.end_hour == 16
        assert config.resolve_data_file(path) == tmp_path / "data.yaml"

    def test_absolute_data_file(self, tmp_path):
        config = AppConfig(data_file=tmp_path / "data.yaml")

        assert config.resolve_data_file(Path("/elsewhere/config.yaml")) == tmp_path / "data.yaml"

    def test_missing_data_file(self):
        with pytest.raises(ValueError, match="data_file"):
            AppConfig().resolve_data_file()

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "config.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("utc_offset_hours: [1\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(path)

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- 1\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(path)
