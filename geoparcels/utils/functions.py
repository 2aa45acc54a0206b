"""Module for miscellaneous multi-use functions"""

__all__ = [
    'is_finite_number', 'normalize_longitude', 'parse_geo_number'
]

import math
from typing import Any, Optional


def is_finite_number(value: Any) -> bool:
    """True for ints and floats (but not bools) that are neither NaN nor infinite"""
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def normalize_longitude(longitude: float) -> float:
    """
    Wraps a longitude (degrees) into the half-open interval (-180, 180].

    Args:
        longitude:
            Any finite longitude, in degrees

    Returns:
        float
    """
    wrapped = math.fmod(longitude + 180., 360.)
    if wrapped <= 0:
        wrapped += 360.

    return wrapped - 180.


def parse_geo_number(value: Any, fallback: Optional[float] = None) -> Optional[float]:
    """
    Coerces a value found in a GIS record into a float.

    Municipal datasets routinely encode numbers as strings, sometimes with a comma
    as the decimal separator or with thousands separated by whitespace
    (e.g. '1 234,5'). Anything that can't be read as a finite number produces
    the fallback.

    Args:
        value:
            The raw value (number, string, or anything else)

        fallback: (Optional)
            The value returned when coercion fails. Default None.

    Returns:
        float, or the fallback
    """
    if value is None or isinstance(value, bool):
        return fallback

    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else fallback

    if isinstance(value, str):
        cleaned = ''.join(value.split()).replace(',', '.', 1)
        try:
            number = float(cleaned)
        except ValueError:
            return fallback

        return number if math.isfinite(number) else fallback

    return fallback
