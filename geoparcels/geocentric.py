"""
Conversion between geodetic (lon/lat/height) and geocentric cartesian coordinates
on an arbitrary ellipsoid
"""

__all__ = ['to_geocentric', 'to_geodetic', 'BOWRING_ITERATIONS']

import math

from geoparcels._const import DEG2RAD, RAD2DEG
from geoparcels.coordinates import GeocentricPoint, GeodeticPoint
from geoparcels.params import EllipsoidParams

BOWRING_ITERATIONS = 5


def to_geocentric(point: GeodeticPoint, ellipsoid: EllipsoidParams) -> GeocentricPoint:
    """
    Converts a geodetic position to earth-centered cartesian coordinates.

    Args:
        point:
            The geodetic position (degrees, meters)

        ellipsoid:
            The ellipsoid the position is expressed on

    Returns:
        GeocentricPoint
    """
    a, e2 = ellipsoid.semi_major_axis, ellipsoid.e2
    lon, lat = point.longitude * DEG2RAD, point.latitude * DEG2RAD
    sin_lat, cos_lat = math.sin(lat), math.cos(lat)

    # Prime vertical radius of curvature
    n = a / math.sqrt(1 - e2 * sin_lat * sin_lat)

    return GeocentricPoint(
        (n + point.height) * cos_lat * math.cos(lon),
        (n + point.height) * cos_lat * math.sin(lon),
        (n * (1 - e2) + point.height) * sin_lat,
    )


def to_geodetic(point: GeocentricPoint, ellipsoid: EllipsoidParams) -> GeodeticPoint:
    """
    Converts earth-centered cartesian coordinates to a geodetic position.

    Latitude is refined with a fixed number of Bowring iterations, starting from the
    spherical-ish estimate atan2(Z, p(1 - e2)). Points on the polar axis (p == 0)
    are resolved directly to latitude +/-90 with longitude 0.

    Args:
        point:
            The geocentric position (meters)

        ellipsoid:
            The ellipsoid to express the result on

    Returns:
        GeodeticPoint, with longitude in (-180, 180]
    """
    a, f = ellipsoid.semi_major_axis, ellipsoid.flattening
    e2, ep2 = ellipsoid.e2, ellipsoid.ep2
    b = a * (1 - f)
    x, y, z = point.x, point.y, point.z

    p = math.sqrt(x * x + y * y)
    if p == 0:
        return GeodeticPoint(0., 90. if z >= 0 else -90., abs(z) - b)

    lat = math.atan2(z, p * (1 - e2))
    for _ in range(BOWRING_ITERATIONS):
        # Parametric (reduced) latitude of the current estimate
        beta = math.atan2((1 - f) * math.sin(lat), math.cos(lat))
        lat = math.atan2(
            z + ep2 * b * math.sin(beta) ** 3,
            p - e2 * a * math.cos(beta) ** 3
        )

    sin_lat, cos_lat = math.sin(lat), math.cos(lat)
    w = math.sqrt(1 - e2 * sin_lat * sin_lat)

    # Valid at every latitude, unlike p / cos(lat) - N
    height = p * cos_lat + z * sin_lat - a * w

    return GeodeticPoint(math.atan2(y, x) * RAD2DEG, lat * RAD2DEG, height)
