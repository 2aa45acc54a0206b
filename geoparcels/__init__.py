import sys

from geoparcels._version import __version__  # noqa: F401
from geoparcels.utils.logging import LOGGER
from geoparcels.coordinates import GeocentricPoint, GeodeticPoint, ProjectedPoint
from geoparcels.params import (
    BESSEL_MSK77, EllipsoidParams, HELMERT_WGS84_TO_BESSEL, HelmertParams, MSK77,
    ProjectionParams, WGS84
)
from geoparcels.geocentric import to_geocentric, to_geodetic
from geoparcels.helmert import apply_helmert, wgs84_to_bessel
from geoparcels.projection import project
from geoparcels.crs import LocalProjectedCrs
from geoparcels.features import ParcelFeature
from geoparcels.config import IngestionConfig
from geoparcels.exceptions import (
    ConfigurationError, GeoParcelsError, IngestionCancelled, NumericDegeneracyError,
    TransportError,
)
from geoparcels.ingest import IngestionResult, ParcelClient, TerminationReason
from geoparcels.utils.conditional_imports import ConditionalPackageInterceptor


ConditionalPackageInterceptor.permit_packages(
    {
        'shapely': 'geoparcels[shapely]',
    }
)
sys.meta_path.append(ConditionalPackageInterceptor)  # type: ignore

__all__ = [
    'BESSEL_MSK77',
    'ConfigurationError',
    'EllipsoidParams',
    'GeoParcelsError',
    'GeocentricPoint',
    'GeodeticPoint',
    'HELMERT_WGS84_TO_BESSEL',
    'HelmertParams',
    'IngestionCancelled',
    'IngestionConfig',
    'IngestionResult',
    'LOGGER',
    'LocalProjectedCrs',
    'MSK77',
    'NumericDegeneracyError',
    'ParcelClient',
    'ParcelFeature',
    'ProjectedPoint',
    'ProjectionParams',
    'TerminationReason',
    'TransportError',
    'WGS84',
    'apply_helmert',
    'project',
    'to_geocentric',
    'to_geodetic',
    'wgs84_to_bessel',
]
