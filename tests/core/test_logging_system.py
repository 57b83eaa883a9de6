"""Tests for the logging bootstrap."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from geoatc.core.logging_system import (
    get_logger,
    initialize_logging,
    load_logging_config,
)


@pytest.fixture(autouse=True)
def restore_logger() -> Iterator[None]:
    """Undo configuration changes to the package logger."""
    logger = logging.getLogger("geoatc")
    saved = (logger.level, logger.propagate, list(logger.handlers))
    yield
    logger.setLevel(saved[0])
    logger.propagate = saved[1]
    logger.handlers = saved[2]


class TestLoggingSystem:
    """Tests for logging configuration."""

    def test_get_logger(self) -> None:
        """Test loggers are named after modules."""
        assert get_logger("geoatc.test").name == "geoatc.test"

    def test_default_config(self) -> None:
        """Test default configuration installs a console handler."""
        initialize_logging()

        logger = logging.getLogger("geoatc")
        assert logger.level == logging.INFO
        assert any(isinstance(h, logging.StreamHandler) for h in logger.handlers)

    def test_level_override(self) -> None:
        """Test level override."""
        initialize_logging(level="debug")
        assert logging.getLogger("geoatc").level == logging.DEBUG

    def test_yaml_config(self, tmp_path: Path) -> None:
        """Test loading a YAML dictConfig."""
        path = tmp_path / "logging.yaml"
        path.write_text(
            "version: 1\n"
            "disable_existing_loggers: false\n"
            "loggers:\n"
            "  geoatc:\n"
            "    level: WARNING\n"
        )

        initialize_logging(path)

        assert logging.getLogger("geoatc").level == logging.WARNING

    def test_missing_config_uses_default(self, tmp_path: Path) -> None:
        """Test missing file falls back to the default."""
        assert load_logging_config(tmp_path / "missing.yaml") is None
        initialize_logging(tmp_path / "missing.yaml")
        assert logging.getLogger("geoatc").level == logging.INFO

    def test_non_mapping_config(self, tmp_path: Path) -> None:
        """Test a YAML list is not a config."""
        path = tmp_path / "logging.yaml"
        path.write_text("- a\n- b\n")
        assert load_logging_config(path) is None

    def test_invalid_yaml_uses_default(self, tmp_path: Path) -> None:
        """Test malformed YAML falls back to the default."""
        path = tmp_path / "logging.yaml"
        path.write_text("version: [1\n")
        initialize_logging(path)
        assert logging.getLogger("geoatc").level == logging.INFO

    def test_bundled_config(self) -> None:
        """Test the shipped config parses."""
        path = Path(__file__).parents[2] / "config" / "logging.yaml"
        config = load_logging_config(path)
        assert config is not None
        assert config["version"] == 1
        assert "geoatc" in config["loggers"]
