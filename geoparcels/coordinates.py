"""
Point representations for each stage of the transformation chain: geodetic
(lon/lat/height on an ellipsoid), geocentric (earth-centered cartesian) and projected
(planar grid meters)
"""

__all__ = ['GeocentricPoint', 'GeodeticPoint', 'ProjectedPoint']

import math
from typing import Tuple, Union

from geoparcels.utils.functions import normalize_longitude


class GeodeticPoint:
    """
    A position on an ellipsoid: longitude and latitude in degrees plus ellipsoidal
    height in meters. Longitudes are wrapped into (-180, 180].
    """

    def __init__(
        self,
        longitude: Union[float, int, str],
        latitude: Union[float, int, str],
        height: Union[float, int, str, None] = 0.,
    ):
        lon = float(longitude)
        if math.isfinite(lon) and not -180 < lon <= 180:
            lon = normalize_longitude(lon)

        self.longitude = lon
        self.latitude = float(latitude)
        self.height = float(height) if height is not None else 0.

    def __eq__(self, other):
        if not isinstance(other, GeodeticPoint):
            return False

        return (
            self.longitude == other.longitude and
            self.latitude == other.latitude and
            self.height == other.height
        )

    def __hash__(self):
        return hash((self.longitude, self.latitude, self.height))

    def __repr__(self):
        return f'<GeodeticPoint({self.longitude}, {self.latitude}, {self.height})>'

    def to_float(self) -> Tuple[float, float, float]:
        """Returns (longitude, latitude, height)"""
        return self.longitude, self.latitude, self.height


class GeocentricPoint:
    """Earth-centered, earth-fixed cartesian coordinates in meters (z toward the pole)"""

    def __init__(self, x: float, y: float, z: float):
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)

    def __eq__(self, other):
        if not isinstance(other, GeocentricPoint):
            return False

        return self.x == other.x and self.y == other.y and self.z == other.z

    def __hash__(self):
        return hash((self.x, self.y, self.z))

    def __repr__(self):
        return f'<GeocentricPoint({self.x}, {self.y}, {self.z})>'

    def to_float(self) -> Tuple[float, float, float]:
        return self.x, self.y, self.z


class ProjectedPoint:
    """
    A planar grid position in meters: x is easting, y is northing.

    Supports + and - with other ProjectedPoints, which is how local-origin offsets
    are applied.
    """

    def __init__(self, x: float, y: float):
        self.x = float(x)
        self.y = float(y)

    def __add__(self, other: 'ProjectedPoint') -> 'ProjectedPoint':
        return ProjectedPoint(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'ProjectedPoint') -> 'ProjectedPoint':
        return ProjectedPoint(self.x - other.x, self.y - other.y)

    def __eq__(self, other):
        if not isinstance(other, ProjectedPoint):
            return False

        return self.x == other.x and self.y == other.y

    def __hash__(self):
        return hash((self.x, self.y))

    def __repr__(self):
        return f'<ProjectedPoint({self.x}, {self.y})>'

    def to_float(self) -> Tuple[float, float]:
        """Returns (x, y), i.e. (easting, northing)"""
        return self.x, self.y
