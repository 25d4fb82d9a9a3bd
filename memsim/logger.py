"""Loggers that write both to standard output and to a file."""

from __future__ import annotations

import itertools
import logging
import sys

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_FORMAT = 'time=%(asctime)s level=%(levelname)s msg="%(message)s"'
_ids = itertools.count()


class LogLevelError(ValueError):
    """Raised for a log level name that is not recognised."""


def parse_level(name: str) -> int:
    """Turn a level name such as ``debug`` or ``error`` into a logging level."""
    try:
        return _LEVELS[name.lower()]
    except KeyError:
        raise LogLevelError(f"unknown log level: {name}") from None


def new_logger(filename: str, level: int) -> logging.Logger:
    """Create a logger writing to stdout and to ``filename``, truncating it."""
    logger = logging.Logger(f"memsim.{filename}.{next(_ids)}", level)
    formatter = logging.Formatter(_FORMAT)
    file_handler = logging.FileHandler(filename, mode="w", encoding="utf-8")
    console_handler = logging.StreamHandler(sys.stdout)
    for handler in (console_handler, file_handler):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def close_logger(logger: logging.Logger) -> None:
    """Detach and close every handler of the logger."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()