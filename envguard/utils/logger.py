"""Logging configuration for envguard."""

import logging
import os
import sys
from typing import Optional

ROOT_LOGGER_NAME = "envguard"
LOG_LEVEL_ENV_VAR = "ENVGUARD_LOG_LEVEL"


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv(LOG_LEVEL_ENV_VAR) or "WARNING").upper()
    return getattr(logging, name, logging.WARNING)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger instance.

    Loggers live under the ``envguard`` namespace, which owns the only
    handler. Output goes to stderr so machine-readable stdout stays clean.

    Args:
        name: Logger name (usually __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)

    # Only configure if no handlers exist
    if not root.handlers:
        root.setLevel(_resolve_level(level))

        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

        root.addHandler(handler)
    elif level:
        root.setLevel(_resolve_level(level))

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)


def set_log_level(level: str) -> None:
    """Change the level of every envguard logger at once."""
    get_logger(ROOT_LOGGER_NAME).setLevel(_resolve_level(level))
