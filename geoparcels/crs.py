"""
The local projected coordinate system: WGS84 lon/lat in, local grid meters out
"""

__all__ = ['LocalProjectedCrs']

import math
import threading
from typing import Optional

from geoparcels.coordinates import GeodeticPoint, ProjectedPoint
from geoparcels.exceptions import NumericDegeneracyError
from geoparcels.helmert import wgs84_to_bessel
from geoparcels.params import (
    EllipsoidParams, HELMERT_WGS84_TO_BESSEL, HelmertParams, MSK77, ProjectionParams, WGS84
)
from geoparcels.projection import project
from geoparcels.utils.logging import warn_once


class LocalProjectedCrs:
    """
    Converts WGS84 longitude/latitude into meters on a local Gauss-Krüger grid
    (MSK-77 by default), expressed relative to a cached origin.

    The origin is the grid's own origin (central meridian, latitude of origin)
    projected and shifted by the false easting/northing. It is computed on first
    use and then reused by every conversion made through this instance, so points
    converted at different times stay consistent with one another. Only
    reset_origin() discards it.

    Origin initialization is guarded by a lock; instances may be shared between
    threads.

    Args:
        projection: (Default MSK77)
            The local grid definition. Its ellipsoid is the datum-shift target.

        helmert: (Default HELMERT_WGS84_TO_BESSEL)
            Datum shift from the source ellipsoid to the grid's ellipsoid

        source: (Default WGS84)
            The ellipsoid input coordinates are expressed on

        strict: (Default False)
            If True, a non-finite datum-shift result raises NumericDegeneracyError.
            Otherwise the raw input lon/lat are projected instead.
    """

    def __init__(
        self,
        projection: ProjectionParams = MSK77,
        helmert: HelmertParams = HELMERT_WGS84_TO_BESSEL,
        source: EllipsoidParams = WGS84,
        strict: bool = False,
    ):
        self.projection = projection
        self.helmert = helmert
        self.source = source
        self.strict = strict
        self._origin: Optional[ProjectedPoint] = None
        self._origin_lock = threading.Lock()

    def __repr__(self):
        return (
            f'<LocalProjectedCrs(central_meridian={self.projection.central_meridian}, '
            f'latitude_of_origin={self.projection.latitude_of_origin})>'
        )

    @property
    def false_origin(self) -> ProjectedPoint:
        """The configured false easting/northing, as a ProjectedPoint"""
        return ProjectedPoint(self.projection.false_easting, self.projection.false_northing)

    @property
    def origin(self) -> ProjectedPoint:
        """The cached local origin, computed on first access"""
        origin = self._origin
        if origin is not None:
            return origin

        with self._origin_lock:
            if self._origin is None:
                anchor = GeodeticPoint(
                    self.projection.central_meridian,
                    self.projection.latitude_of_origin,
                )
                self._origin = project(anchor, self.projection) - self.false_origin

            return self._origin

    @property
    def has_origin(self) -> bool:
        return self._origin is not None

    def reset_origin(self) -> None:
        """Discards the cached origin; the next conversion recomputes it"""
        with self._origin_lock:
            self._origin = None

    def to_grid_datum(self, longitude: float, latitude: float) -> GeodeticPoint:
        """
        Shifts a WGS84 lon/lat onto the grid's datum. Falls back to the input
        coordinates when the shift produces a non-finite longitude or latitude
        (or raises NumericDegeneracyError, in strict mode).

        Args:
            longitude:
                WGS84 longitude, in degrees

            latitude:
                WGS84 latitude, in degrees

        Returns:
            GeodeticPoint on the grid's ellipsoid
        """
        try:
            shifted = wgs84_to_bessel(
                GeodeticPoint(longitude, latitude),
                self.helmert,
                self.source,
                self.projection.ellipsoid,
            )
        except (ValueError, OverflowError):
            shifted = None

        if shifted is not None and math.isfinite(shifted.longitude) and math.isfinite(shifted.latitude):
            return shifted

        if self.strict:
            raise NumericDegeneracyError(
                f'Datum shift of ({longitude}, {latitude}) produced a non-finite result'
            )

        warn_once(
            'Datum shift produced a non-finite result; projecting raw WGS84 coordinates '
            'instead. (this warning will not repeat)'
        )
        return GeodeticPoint(longitude, latitude)

    def lon_lat_to_local_meters(self, longitude: float, latitude: float) -> ProjectedPoint:
        """
        Converts a WGS84 longitude/latitude (degrees) into local grid meters.

        The result is the grid projection of the datum-shifted point, minus the
        cached origin. The origin already carries the false easting/northing, so
        the grid's own origin converts to exactly (false_easting, false_northing).

        Args:
            longitude:
                WGS84 longitude, in degrees

            latitude:
                WGS84 latitude, in degrees

        Returns:
            ProjectedPoint
        """
        origin = self.origin
        projected = project(self.to_grid_datum(longitude, latitude), self.projection)
        return projected - origin
