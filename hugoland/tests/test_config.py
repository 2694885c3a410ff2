"""
Tests for configuration and logging setup.
"""

import logging
from pathlib import Path

from ..config import STORAGE_KEY, EngineConfig, configure_logging


class TestEngineConfig:
    """Tests for environment-driven config."""

    def test_defaults(self, monkeypatch):
        for name in ("HUGOLAND_SAVE_DIR", "HUGOLAND_STORAGE_KEY", "HUGOLAND_LOG_LEVEL", "HUGOLAND_SEED"):
            monkeypatch.delenv(name, raising=False)

        config = EngineConfig.from_env()

        assert config.save_dir == Path.home() / ".hugoland"
        assert config.storage_key == STORAGE_KEY
        assert config.log_level == "INFO"
        assert config.seed is None
        assert config.reveal_delay == 2.0

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HUGOLAND_SAVE_DIR", str(tmp_path))
        monkeypatch.setenv("HUGOLAND_STORAGE_KEY", "slot_2")
        monkeypatch.setenv("HUGOLAND_LOG_LEVEL", "debug")
        monkeypatch.setenv("HUGOLAND_SEED", "17")

        config = EngineConfig.from_env()

        assert config.save_dir == tmp_path
        assert config.storage_key == "slot_2"
        assert config.log_level == "DEBUG"
        assert config.seed == 17


class TestConfigureLogging:
    def test_single_handler(self):
        logger = configure_logging("DEBUG")
        try:
            configure_logging("DEBUG")

            assert logger.name == "hugoland"
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 1
        finally:
            logger.handlers.clear()
            logger.setLevel(logging.NOTSET)
