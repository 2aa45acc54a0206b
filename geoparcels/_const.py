"""
Constants declarations for geoparcels
"""
import math

DEG2RAD = math.pi / 180
RAD2DEG = 180 / math.pi
ARCSEC2RAD = math.pi / (180 * 3600)

# WGS84 Ellipsoid Constants
WGS84_A = 6378137.0  # Major axis (meters)
WGS84_INV_F = 298.257223563

# Bessel 1841, as used by the MSK-77 local grid
BESSEL_A = 6377397.155
BESSEL_INV_F = 299.1528128

# WGS84 -> Bessel (MSK-77) datum shift
HELMERT_DX = -23.92  # meters
HELMERT_DY = 141.27
HELMERT_DZ = -80.9
HELMERT_RX = 0.0  # arcseconds
HELMERT_RY = 0.0
HELMERT_RZ = -0.35
HELMERT_SCALE_PPM = 0.12

# MSK-77 grid definition
MSK77_CENTRAL_MERIDIAN = 37.5  # degrees
MSK77_LATITUDE_OF_ORIGIN = 55 + 40 / 60  # degrees
MSK77_SCALE_FACTOR = 1.0
MSK77_FALSE_EASTING = 5.0  # meters
MSK77_FALSE_NORTHING = 0.0

# apidata.mos.ru
DEFAULT_DATASET_ID = 1497
DEFAULT_BASE_URL = 'https://apidata.mos.ru/v1/datasets'
MAX_PAGE_SIZE = 1000
