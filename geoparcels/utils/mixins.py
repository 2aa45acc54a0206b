"""Utility mixin classes"""

__all__ = ['LoggingMixin']

import logging
from typing import Optional


class LoggingMixin:  # pylint: disable=too-few-public-methods
    """
    Gives each subclass its own logger, named '<module>.<ClassName>', so that
    loggers nest under the package logger (e.g. 'geoparcels.ingest.ParcelClient').
    """
    logger: logging.Logger

    WARNED_ONCE: set = set()

    def __init__(self, logstr: Optional[str] = None):
        _class = self.__class__
        name = _class.__name__ if not logstr else f'{_class.__name__}.{logstr}'
        if _class.__module__ != 'builtins':
            name = f'{_class.__module__}.{name}'

        self.logger = logging.getLogger(name)

    def warn_once(self, msg, *args, **kwargs):
        """Logs a warning only once per message, across all instances of all subclasses"""
        if msg in LoggingMixin.WARNED_ONCE:
            return

        self.logger.warning(msg, *args, **kwargs)
        LoggingMixin.WARNED_ONCE.add(msg)
