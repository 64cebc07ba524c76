"""Logging helpers shared by all civicpulse modules."""

import logging
import os

LOG_LEVEL_ENV = "CIVICPULSE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def _configure_root() -> None:
    global _configured
    if _configured:
        return
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger("civicpulse")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger under the civicpulse namespace.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Configured logger
    """
    _configure_root()
    return logging.getLogger(name)
