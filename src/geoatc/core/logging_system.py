"""Logging bootstrap for geoatc.

Every module obtains its logger through :func:`get_logger` so that the
whole package shares one configuration. The configuration is a standard
``logging.config.dictConfig`` document, normally read from
``config/logging.yaml``.

Typical usage:
    from geoatc.core.logging_system import get_logger, initialize_logging

    initialize_logging("config/logging.yaml")
    logger = get_logger(__name__)
    logger.info("Radio tuned to %s", "KSEA")
"""

import copy
import logging
import logging.config
from pathlib import Path
from typing import Any

import yaml

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

DEFAULT_LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {"format": DEFAULT_LOG_FORMAT},
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": "INFO",
        },
    },
    "loggers": {
        "geoatc": {"level": "INFO", "handlers": ["console"], "propagate": False},
    },
}


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Logger name, usually ``__name__``.

    Returns:
        Configured logger instance.
    """
    return logging.getLogger(name)


def load_logging_config(config_path: str | Path) -> dict[str, Any] | None:
    """Read a YAML logging configuration.

    Args:
        config_path: Path to a YAML file holding a dictConfig document.

    Returns:
        The parsed configuration, or None if the file is missing or empty.
    """
    path = Path(config_path)
    if not path.exists():
        return None

    with open(path, encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if not isinstance(config, dict):
        return None
    return config


def initialize_logging(config_path: str | Path | None = None, level: str | None = None) -> None:
    """Configure logging for the package.

    Falls back to a console configuration when no usable config file is
    given.

    Args:
        config_path: Optional path to a YAML dictConfig file.
        level: Optional level override for the ``geoatc`` logger (e.g. "DEBUG").
    """
    config = None
    if config_path is not None:
        try:
            config = load_logging_config(config_path)
        except yaml.YAMLError as e:
            logging.getLogger(__name__).warning("Invalid logging config %s: %s", config_path, e)

    logging.config.dictConfig(config or copy.deepcopy(DEFAULT_LOGGING_CONFIG))

    if level:
        logging.getLogger("geoatc").setLevel(level.upper())

    get_logger(__name__).debug("Logging initialized (config=%s)", config_path)
