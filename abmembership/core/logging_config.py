"""Logging configuration helpers."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str | int = "INFO") -> logging.Logger:
    """Configure the package logger once; repeated calls only adjust the level."""

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("abmembership")
    logger.setLevel(level)

    if not any(getattr(handler, "_abmembership", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._abmembership = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
