"""
Unit tests for config_loader module.
"""

import tempfile
from pathlib import Path

import pytest
import yaml

from src.scanning.config_loader import DEFAULT_CONFIG_PATH, load_config
from src.scanning.types import ScanConfig


def _raw_default():
    with open(DEFAULT_CONFIG_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _write_temp(raw):
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(raw, f)
        return Path(f.name)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_default_config(self):
        """Test loading the default configuration file."""
        config = load_config()

        assert isinstance(config, ScanConfig)
        assert config.filters.blur_radius == 1
        assert config.contours.edge_threshold == 100.0
        assert config.contours.min_contour_length == 50
        assert config.selection.epsilon == 10.0
        assert config.selection.min_size_ratio == 0.2
        assert config.selection.fallback_margin_ratio == 0.05
        assert config.selection.min_confidence == 30.0
        assert config.confidence.aspect_weight == 0.6
        assert config.confidence.size_weight == 0.4
        assert (config.confidence.aspect_min, config.confidence.aspect_max) == (0.5, 2.0)
        assert (config.output.width, config.output.height) == (800, 1000)
        assert config.output.format == "jpeg"
        assert config.output.quality == 90

    def test_load_custom_config(self):
        """Test loading a custom configuration file."""
        raw = _raw_default()
        raw["filters"]["blur_radius"] = 2
        raw["confidence"]["aspect_weight"] = 0.5
        raw["confidence"]["size_weight"] = 0.5
        raw["output"]["format"] = "PNG"

        temp_path = _write_temp(raw)
        try:
            config = load_config(temp_path)

            assert config.filters.blur_radius == 2
            assert config.confidence.aspect_weight == 0.5
            assert config.output.format == "png"
        finally:
            temp_path.unlink()

    def test_missing_file_raises_error(self):
        """Test that missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(Path("nonexistent_config.yaml"))

    def test_missing_section(self):
        raw = _raw_default()
        del raw["selection"]

        temp_path = _write_temp(raw)
        try:
            with pytest.raises(ValueError, match="Invalid configuration file"):
                load_config(temp_path)
        finally:
            temp_path.unlink()

    @pytest.mark.parametrize(
        "section, key, value, message",
        [
            ("filters", "blur_radius", 0, "blur_radius must be at least 1"),
            ("contours", "edge_threshold", 300, "edge_threshold"),
            ("selection", "min_size_ratio", 0, "min_size_ratio"),
            ("selection", "fallback_margin_ratio", 0.6, "fallback_margin_ratio"),
            ("confidence", "aspect_weight", 0.7, "must sum to 1"),
            ("confidence", "aspect_min", 3.0, "aspect_min"),
            ("output", "width", 0, "at least 1"),
            ("output", "quality", 101, "quality"),
            ("output", "format", "bmp", "Invalid output format"),
            ("output", "interpolation", "area", "Invalid interpolation"),
        ],
    )
    def test_invalid_values(self, section, key, value, message):
        raw = _raw_default()
        raw[section][key] = value

        temp_path = _write_temp(raw)
        try:
            with pytest.raises(ValueError, match=message):
                load_config(temp_path)
        finally:
            temp_path.unlink()
