"""
Ellipsoid, datum-shift and grid parameter sets
"""

__all__ = [
    'BESSEL_MSK77', 'EllipsoidParams', 'HELMERT_WGS84_TO_BESSEL', 'HelmertParams',
    'MSK77', 'ProjectionParams', 'WGS84',
]

from typing import Tuple

from pydantic import validate_call

from geoparcels import _const
from geoparcels._const import ARCSEC2RAD


class _FrozenParams:
    """Value-object base: attributes are set once in __init__ and compared by value"""

    __slots__: Tuple[str, ...] = ()

    def _freeze(self, **attrs):
        for key, value in attrs.items():
            object.__setattr__(self, key, value)

    def __setattr__(self, key, value):
        raise AttributeError(f'{self.__class__.__name__} is immutable')

    def _values(self) -> tuple:
        return tuple(getattr(self, slot) for slot in self.__slots__)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False

        return self._values() == other._values()

    def __hash__(self):
        return hash((self.__class__.__name__, *self._values()))

    def __repr__(self):
        args = ', '.join(f'{slot}={getattr(self, slot)!r}' for slot in self.__slots__)
        return f'<{self.__class__.__name__}({args})>'


class EllipsoidParams(_FrozenParams):
    """
    A reference ellipsoid, described by its semi-major axis and inverse flattening.

    Derived quantities used throughout the geodesy code are computed once:
        flattening: f = 1 / inverse_flattening
        e2: first eccentricity squared, 2f - f^2
        ep2: second eccentricity squared, e2 / (1 - e2)
    """

    __slots__ = ('semi_major_axis', 'inverse_flattening', 'flattening', 'e2', 'ep2')

    @validate_call
    def __init__(self, semi_major_axis: float, inverse_flattening: float):
        if not inverse_flattening > 0:
            raise ValueError(
                f'inverse flattening must be positive, received {inverse_flattening}'
            )
        if not semi_major_axis > 0:
            raise ValueError(f'semi-major axis must be positive, received {semi_major_axis}')

        f = 1 / inverse_flattening
        e2 = 2 * f - f * f
        self._freeze(
            semi_major_axis=semi_major_axis,
            inverse_flattening=inverse_flattening,
            flattening=f,
            e2=e2,
            ep2=e2 / (1 - e2),
        )

    def _values(self) -> tuple:
        return self.semi_major_axis, self.inverse_flattening

    def __repr__(self):
        return f'<EllipsoidParams(a={self.semi_major_axis}, 1/f={self.inverse_flattening})>'


class HelmertParams(_FrozenParams):
    """
    A 7-parameter (position vector) similarity transform between two geocentric frames.

    Translations are in meters, rotations in arcseconds and scale in parts per million.
    A positive rotation is counter-clockwise about its axis, viewed from the positive
    end of that axis.
    """

    __slots__ = ('dx', 'dy', 'dz', 'rx', 'ry', 'rz', 'scale_ppm')

    @validate_call
    def __init__(
        self,
        dx: float = 0.,
        dy: float = 0.,
        dz: float = 0.,
        rx: float = 0.,
        ry: float = 0.,
        rz: float = 0.,
        scale_ppm: float = 0.,
    ):
        self._freeze(dx=dx, dy=dy, dz=dz, rx=rx, ry=ry, rz=rz, scale_ppm=scale_ppm)

    @property
    def scale(self) -> float:
        """The scale correction as a unitless factor (ppm * 1e-6)"""
        return self.scale_ppm * 1e-6

    @property
    def rotation_radians(self) -> Tuple[float, float, float]:
        """(rx, ry, rz) in radians"""
        return self.rx * ARCSEC2RAD, self.ry * ARCSEC2RAD, self.rz * ARCSEC2RAD

    @property
    def translation(self) -> Tuple[float, float, float]:
        return self.dx, self.dy, self.dz


class ProjectionParams(_FrozenParams):
    """
    Definition of a Gauss-Krüger grid: the ellipsoid it is computed on, its central
    meridian and latitude of origin (degrees), scale factor on the central meridian,
    and the false easting/northing (meters) added to the nominal origin.
    """

    __slots__ = (
        'ellipsoid', 'central_meridian', 'latitude_of_origin', 'scale_factor',
        'false_easting', 'false_northing',
    )

    @validate_call(config=dict(arbitrary_types_allowed=True))
    def __init__(
        self,
        ellipsoid: EllipsoidParams,
        central_meridian: float,
        latitude_of_origin: float = 0.,
        scale_factor: float = 1.,
        false_easting: float = 0.,
        false_northing: float = 0.,
    ):
        if not scale_factor > 0:
            raise ValueError(f'scale factor must be positive, received {scale_factor}')

        self._freeze(
            ellipsoid=ellipsoid,
            central_meridian=central_meridian,
            latitude_of_origin=latitude_of_origin,
            scale_factor=scale_factor,
            false_easting=false_easting,
            false_northing=false_northing,
        )


WGS84 = EllipsoidParams(_const.WGS84_A, _const.WGS84_INV_F)

BESSEL_MSK77 = EllipsoidParams(_const.BESSEL_A, _const.BESSEL_INV_F)

HELMERT_WGS84_TO_BESSEL = HelmertParams(
    dx=_const.HELMERT_DX,
    dy=_const.HELMERT_DY,
    dz=_const.HELMERT_DZ,
    rx=_const.HELMERT_RX,
    ry=_const.HELMERT_RY,
    rz=_const.HELMERT_RZ,
    scale_ppm=_const.HELMERT_SCALE_PPM,
)

MSK77 = ProjectionParams(
    BESSEL_MSK77,
    central_meridian=_const.MSK77_CENTRAL_MERIDIAN,
    latitude_of_origin=_const.MSK77_LATITUDE_OF_ORIGIN,
    scale_factor=_const.MSK77_SCALE_FACTOR,
    false_easting=_const.MSK77_FALSE_EASTING,
    false_northing=_const.MSK77_FALSE_NORTHING,
)
