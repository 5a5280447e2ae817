"""
Console and file logging for the launchpad.

Every module asks for its logger with get_logger(__name__) at import time.
The CLI then raises or lowers the level once the configuration is loaded,
and that level also applies to loggers created afterwards.
"""

import logging
import sys

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_loggers: dict[str, logging.Logger] = {}
_level = logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Get or create a stdout logger at the current launchpad level."""
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    logger.setLevel(_level)

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(console_handler)

    _loggers[name] = logger
    return logger


def set_level(level: int | str) -> None:
    """Apply `level` (e.g. "DEBUG" or logging.DEBUG) to all launchpad loggers.

    Raises:
        ValueError: Unknown level name
    """
    global _level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown logging level: {level}")
        level = resolved

    _level = level
    for logger in _loggers.values():
        logger.setLevel(level)


def setup_file_logging(filename: str, level: int | str = logging.INFO) -> None:
    """Also write log records to `filename`.

    The handler sits on the root logger, which every launchpad logger
    propagates to.
    """
    file_handler = logging.FileHandler(filename)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logging.getLogger().addHandler(file_handler)
