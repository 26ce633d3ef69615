"""
Logging utilities shared by the issuer, verifier and CLI.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str, log_level: int | None = None) -> logging.Logger:
    """
    Return a named logger with a stream handler attached once.

    Args:
        name: Logger name, usually the calling module's ``__name__``
        log_level: Level to apply; left unchanged when None
    """
    logger = logging.getLogger(name)
    if log_level is not None:
        logger.setLevel(log_level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
