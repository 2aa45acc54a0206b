"""
Gauss-Krüger (transverse Mercator) projection by series expansion
"""

__all__ = ['meridian_arc', 'project']

import math

from geoparcels._const import DEG2RAD
from geoparcels.coordinates import GeodeticPoint, ProjectedPoint
from geoparcels.params import EllipsoidParams, ProjectionParams


def meridian_arc(latitude: float, ellipsoid: EllipsoidParams) -> float:
    """
    Length of the meridian arc from the equator to a latitude, using the series

        sigma = a * (A0*B - A2*sin(2B) + A4*sin(4B) - A6*sin(6B))

    truncated after the e^6 terms.

    Args:
        latitude:
            The latitude B, in radians

        ellipsoid:
            The ellipsoid

    Returns:
        float, meters
    """
    e2 = ellipsoid.e2
    e4 = e2 * e2
    e6 = e4 * e2

    a0 = 1 - e2 / 4 - 3 * e4 / 64 - 5 * e6 / 256
    a2 = (3 / 8) * (e2 + e4 / 4 + 15 * e6 / 128)
    a4 = (15 / 256) * (e4 + 3 * e6 / 4)
    a6 = (35 * e6) / 3072

    return ellipsoid.semi_major_axis * (
        a0 * latitude
        - a2 * math.sin(2 * latitude)
        + a4 * math.sin(4 * latitude)
        - a6 * math.sin(6 * latitude)
    )


def project(point: GeodeticPoint, params: ProjectionParams) -> ProjectedPoint:
    """
    Projects a geodetic position onto a Gauss-Krüger grid.

    Northing is the meridian arc plus corrections through l^6, easting a series
    through l^7, where l is the longitude difference from the central meridian
    (wrapped across the antimeridian). Both are multiplied by the scale factor.
    False easting/northing are NOT applied here.

    Precision degrades quickly beyond a few degrees from the central meridian; no
    range check is performed.

    Args:
        point:
            A geodetic position on the grid's ellipsoid

        params:
            The grid definition

    Returns:
        ProjectedPoint (x = easting, y = northing), in meters
    """
    ellipsoid = params.ellipsoid
    a, e2, ep2 = ellipsoid.semi_major_axis, ellipsoid.e2, ellipsoid.ep2

    b = point.latitude * DEG2RAD
    d_lon = (point.longitude - params.central_meridian) * DEG2RAD
    l = math.atan2(math.sin(d_lon), math.cos(d_lon))  # noqa: E741

    sin_b, cos_b = math.sin(b), math.cos(b)
    t = math.tan(b)
    t2 = t * t
    t4 = t2 * t2
    t6 = t4 * t2
    eta2 = ep2 * cos_b * cos_b

    cos_b2 = cos_b * cos_b
    cos_b3 = cos_b2 * cos_b
    cos_b4 = cos_b2 * cos_b2
    cos_b5 = cos_b4 * cos_b
    cos_b6 = cos_b3 * cos_b3
    cos_b7 = cos_b6 * cos_b

    n = a / math.sqrt(1 - e2 * sin_b * sin_b)

    l2 = l * l
    l3 = l2 * l
    l4 = l2 * l2
    l5 = l4 * l
    l6 = l4 * l2
    l7 = l6 * l

    northing = (
        meridian_arc(b, ellipsoid)
        + n * t * cos_b2 * l2 / 2
        + (n * t * cos_b4 * l4 / 24) * (5 - t2 + 9 * eta2 + 4 * eta2 * eta2)
        + (n * t * cos_b6 * l6 / 720) * (61 - 58 * t2 + t4 + 270 * eta2 - 330 * t2 * eta2)
    )

    easting = (
        n * cos_b * l
        + (n * cos_b3 * l3 / 6) * (1 - t2 + eta2)
        + (n * cos_b5 * l5 / 120) * (5 - 18 * t2 + t4 + 14 * eta2 - 58 * t2 * eta2)
        + (n * cos_b7 * l7 / 5040) * (61 - 479 * t2 + 179 * t4 - t6)
    )

    return ProjectedPoint(easting * params.scale_factor, northing * params.scale_factor)
