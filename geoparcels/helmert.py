""" Seven-parameter Helmert datum shifts between geocentric frames """

__all__ = ['apply_helmert', 'helmert_matrix', 'wgs84_to_bessel']

import numpy as np

from geoparcels.coordinates import GeocentricPoint, GeodeticPoint
from geoparcels.geocentric import to_geocentric, to_geodetic
from geoparcels.params import (
    BESSEL_MSK77, EllipsoidParams, HELMERT_WGS84_TO_BESSEL, HelmertParams, WGS84
)


def helmert_matrix(params: HelmertParams) -> np.ndarray:
    """
    Builds the 3x3 small-angle rotation/scale matrix of a Helmert transform, i.e.

        | 1+s  -rz   ry |
        |  rz  1+s  -rx |
        | -ry   rx  1+s |

    with rotations in radians and s the unitless scale correction.

    Args:
        params:
            The Helmert parameter set

    Returns:
        np.ndarray of shape (3, 3)
    """
    rx, ry, rz = params.rotation_radians
    m = 1 + params.scale
    return np.array([
        [m, -rz, ry],
        [rz, m, -rx],
        [-ry, rx, m],
    ])


def apply_helmert(point: GeocentricPoint, params: HelmertParams) -> GeocentricPoint:
    """
    Applies a Helmert similarity transform to a geocentric point:

        x' = dx + (1+s)x - rz*y + ry*z
        y' = dy + rz*x + (1+s)y - rx*z
        z' = dz - ry*x + rx*y + (1+s)z

    Args:
        point:
            A geocentric point in the source frame

        params:
            The Helmert parameters (source -> target)

    Returns:
        GeocentricPoint in the target frame
    """
    shifted = np.array(params.translation) + helmert_matrix(params) @ np.array(point.to_float())
    return GeocentricPoint(*shifted.tolist())


def wgs84_to_bessel(
    point: GeodeticPoint,
    helmert: HelmertParams = HELMERT_WGS84_TO_BESSEL,
    source: EllipsoidParams = WGS84,
    target: EllipsoidParams = BESSEL_MSK77,
) -> GeodeticPoint:
    """
    Shifts a geodetic position from one datum to another via a geocentric round trip:
    geodetic -> geocentric on the source ellipsoid, Helmert transform, geocentric ->
    geodetic on the target ellipsoid. Defaults to WGS84 -> Bessel (MSK-77).

    Args:
        point:
            The position on the source datum

        helmert: (Default HELMERT_WGS84_TO_BESSEL)
            The datum shift parameters

        source: (Default WGS84)
            The source ellipsoid

        target: (Default BESSEL_MSK77)
            The target ellipsoid

    Returns:
        GeodeticPoint on the target datum
    """
    return to_geodetic(apply_helmert(to_geocentric(point, source), helmert), target)
