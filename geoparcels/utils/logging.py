"""Logging utility for geoparcels"""

__all__ = ['LOGGER', 'set_log_level', 'warn_once']

import logging
from typing import Union

LOGGER = logging.getLogger('geoparcels')
LOGGER.setLevel(logging.WARNING)

if not LOGGER.handlers:
    _LOG_HANDLER = logging.StreamHandler()
    _LOG_HANDLER.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
    LOGGER.addHandler(_LOG_HANDLER)

_WARNINGS = set()


def set_log_level(level: Union[int, str]) -> None:
    """
    Sets the level of the package logger, e.g. 'DEBUG' to trace every page request
    made by the ingestion loop.
    """
    LOGGER.setLevel(level.upper() if isinstance(level, str) else level)


def warn_once(warning: str, *args):
    """Logs a warning the first time a given (formatted) message is seen"""
    message = warning % args if args else warning
    if message not in _WARNINGS:
        LOGGER.warning(message)
        _WARNINGS.add(message)
