"""Logging configuration helpers."""

import logging

_ROOT_LOGGER = "health_advisor"
_FORMAT = "%(levelname)s: %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Attach one stream handler to the package logger.

    Later calls only adjust the level, so app factories can run repeatedly.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
