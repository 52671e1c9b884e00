"""Structured logging configuration."""
import logging
import sys
from typing import Optional

from pocketpro.config import config

ROOT_LOGGER = "pocketpro"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        root.addHandler(handler)
        root.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
        root.propagate = False
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger that writes through the shared ``pocketpro`` handler.

    Args:
        name: Logger name, typically __name__ of the calling module. Names
            outside the ``pocketpro`` package are nested under it.

    Returns:
        Configured logger instance.
    """
    root = _configure_root()
    if not name or name == ROOT_LOGGER:
        return root
    if not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
