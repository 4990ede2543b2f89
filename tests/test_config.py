"""Tests for settings and logging configuration."""

import pytest
import structlog

from py_isogen.config import Settings
from py_isogen.utils import configure_logging, create_rng


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Test default values."""
        for name in ("ISOGEN_MAX_WORKERS", "ISOGEN_DEFAULT_THRESHOLD", "ISOGEN_CHUNK_VOLUME_MODE"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()
        assert settings.default_threshold == 0.5
        assert settings.max_workers is None
        assert settings.chunk_volume_mode == "heightmap"

    def test_environment_override(self, monkeypatch):
        """Test ISOGEN_ prefixed overrides."""
        monkeypatch.setenv("ISOGEN_MAX_WORKERS", "3")
        monkeypatch.setenv("ISOGEN_DEFAULT_THRESHOLD", "0.25")
        monkeypatch.setenv("ISOGEN_CHUNK_VOLUME_MODE", "density")
        settings = Settings()
        assert settings.max_workers == 3
        assert settings.default_threshold == 0.25
        assert settings.chunk_volume_mode == "density"

    def test_invalid_worker_count(self, monkeypatch):
        """Test that max_workers below 1 is rejected."""
        monkeypatch.setenv("ISOGEN_MAX_WORKERS", "0")
        with pytest.raises(Exception):
            Settings()


class TestUtils:
    """Test shared helpers."""

    @pytest.mark.parametrize("fmt", ["json", "console"])
    def test_configure_logging(self, fmt):
        """Test that logging can be configured with either renderer."""
        configure_logging("DEBUG", fmt)
        structlog.get_logger().debug("configured", fmt=fmt)

    def test_rng_streams(self):
        """Test that generators replay per seed and differ per stream."""
        assert create_rng(4).random() == create_rng(4).random()
        assert create_rng(4, 1).random() != create_rng(4, 2).random()
        assert create_rng(-1).random() == create_rng(-1).random()
