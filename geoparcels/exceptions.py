"""Exceptions raised by geoparcels"""

__all__ = [
    'ConfigurationError', 'GeoParcelsError', 'IngestionCancelled',
    'NumericDegeneracyError', 'TransportError',
]

from typing import Optional


class GeoParcelsError(Exception):
    """Base class for all geoparcels errors"""


class ConfigurationError(GeoParcelsError, ValueError):
    """The ingestion configuration can't be used (e.g. no API key)"""


class TransportError(GeoParcelsError):
    """
    The API answered a page request with a non-success HTTP status.

    Args:
        status_code:
            The HTTP status code

        body: (Optional)
            Best-effort response body text

        reason: (Optional)
            The HTTP reason phrase, reported when the body is empty
    """

    def __init__(self, status_code: int, body: Optional[str] = None, reason: Optional[str] = None):
        self.status_code = status_code
        self.body = body or ''
        super().__init__(f'API {status_code}: {self.body or reason or "request failed"}')


class IngestionCancelled(GeoParcelsError):
    """A page request was abandoned because cancellation had been signalled"""


class NumericDegeneracyError(GeoParcelsError, ArithmeticError):
    """A datum shift produced a non-finite intermediate result (strict mode only)"""
