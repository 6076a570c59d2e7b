"""Logging configuration helpers."""

import logging

LOGGER_NAME = "nutrichat"
LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the package logger and set its level.

    Repeated calls only update the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
