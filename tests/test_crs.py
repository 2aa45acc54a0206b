import math
import threading
from unittest import mock

import pytest
from pytest import approx

from geoparcels import (
    BESSEL_MSK77, GeodeticPoint, HelmertParams, LocalProjectedCrs, MSK77,
    NumericDegeneracyError, ProjectedPoint
)
from geoparcels.projection import meridian_arc, project
from tests.functions import assert_projected_equal

MSK77_LAT0 = 55 + 40 / 60


def test_origin_is_lazy_and_cached():
    crs = LocalProjectedCrs()
    assert not crs.has_origin

    origin = crs.origin
    assert crs.has_origin
    assert origin.x == -MSK77.false_easting
    assert origin.y == approx(meridian_arc(math.radians(MSK77_LAT0), BESSEL_MSK77))
    assert crs.origin is origin


def test_origin_zeroing():
    # Without a datum shift, the grid origin lands exactly on the false origin
    crs = LocalProjectedCrs(helmert=HelmertParams(), source=BESSEL_MSK77)
    result = crs.lon_lat_to_local_meters(37.5, MSK77_LAT0)
    assert_projected_equal(result, ProjectedPoint(MSK77.false_easting, MSK77.false_northing))


def test_local_meters_moscow():
    crs = LocalProjectedCrs()
    # Red Square: ~7.5km east and ~9.7km north of the MSK-77 origin
    result = crs.lon_lat_to_local_meters(37.6206, 55.7539)
    assert 7_000. < result.x < 8_500.
    assert 9_000. < result.y < 10_500.

    # Distances between nearby points are preserved to well under a meter per km
    other = crs.lon_lat_to_local_meters(37.6206, 55.7629)  # ~1km north
    assert other.y - result.y == approx(1_001., abs=5.)
    assert other.x - result.x == approx(0., abs=3.)  # meridian convergence


def test_cache_stability():
    crs = LocalProjectedCrs()
    first = crs.lon_lat_to_local_meters(37.61, 55.74)
    second = crs.lon_lat_to_local_meters(37.61, 55.74)
    assert first == second
    assert first.to_float() == second.to_float()


def test_reset_origin():
    crs = LocalProjectedCrs()
    before = crs.lon_lat_to_local_meters(37.61, 55.74)

    crs.reset_origin()
    assert not crs.has_origin

    after = crs.lon_lat_to_local_meters(37.61, 55.74)
    assert crs.has_origin
    assert after == LocalProjectedCrs().lon_lat_to_local_meters(37.61, 55.74)
    assert_projected_equal(before, after)


def test_origin_computed_once_across_threads():
    crs = LocalProjectedCrs()
    barrier = threading.Barrier(8)
    origins = []

    def worker():
        barrier.wait()
        origins.append(crs.origin)

    with mock.patch('geoparcels.crs.project', wraps=project) as wrapped:
        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    assert wrapped.call_count == 1
    assert all(origin is origins[0] for origin in origins)


def test_numeric_degeneracy_fallback(caplog):
    crs = LocalProjectedCrs()
    nan_point = GeodeticPoint(float('nan'), float('nan'))
    with mock.patch('geoparcels.crs.wgs84_to_bessel', return_value=nan_point):
        result = crs.lon_lat_to_local_meters(37.61, 55.74)

    expected = project(GeodeticPoint(37.61, 55.74), MSK77) - crs.origin
    assert result == expected
    assert 'non-finite' in caplog.text


def test_numeric_degeneracy_strict():
    crs = LocalProjectedCrs(strict=True)
    with mock.patch(
        'geoparcels.crs.wgs84_to_bessel',
        return_value=GeodeticPoint(37.61, float('inf'))
    ):
        with pytest.raises(NumericDegeneracyError):
            crs.lon_lat_to_local_meters(37.61, 55.74)


def test_to_grid_datum():
    crs = LocalProjectedCrs()
    shifted = crs.to_grid_datum(37.61, 55.74)
    assert isinstance(shifted, GeodeticPoint)
    assert shifted.latitude == approx(55.74, abs=0.01)
