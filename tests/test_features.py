import pytest
from pytest import approx

from geoparcels import LocalProjectedCrs, ParcelFeature
from tests.functions import square_ring


def _polygon(*rings):
    return {'type': 'Polygon', 'coordinates': list(rings)}


def test_parcelfeature_init():
    parcel = ParcelFeature(_polygon(square_ring(37.6, 55.7)), height=1., global_id='a')
    assert parcel.geometry_type == 'Polygon'
    assert parcel.properties == {}
    assert repr(parcel) == "<ParcelFeature Polygon with 1 polygon(s), global_id='a'>"

    with pytest.raises(ValueError):
        ParcelFeature({'type': 'Point', 'coordinates': [1, 2]})


def test_parcelfeature_rings():
    outer, hole = square_ring(37.6, 55.7, 0.01), square_ring(37.601, 55.701)
    parcel = ParcelFeature({
        'type': 'MultiPolygon',
        'coordinates': [[outer, hole], [square_ring(37.7, 55.8)]],
    })
    assert len(parcel.polygons) == 2
    assert list(parcel.rings()) == [outer, hole, square_ring(37.7, 55.8)]


def test_parcelfeature_to_geojson():
    parcel = ParcelFeature(
        _polygon(square_ring(37.6, 55.7)), height=150., global_id='a', properties={'k': 'v'}
    )
    assert parcel.to_geojson() == {
        'type': 'Feature',
        'geometry': _polygon(square_ring(37.6, 55.7)),
        'properties': {'k': 'v', 'height': 150., 'global_id': 'a'},
    }
    assert parcel.to_geojson(properties={'extra': 1})['properties']['extra'] == 1


def test_parcelfeature_to_shapely():
    shapely_geometry = pytest.importorskip('shapely.geometry')
    parcel = ParcelFeature(_polygon(square_ring(0., 0., 1.)))
    polygon = parcel.to_shapely()
    assert isinstance(polygon, shapely_geometry.Polygon)
    assert polygon.area == approx(1.)


def test_parcelfeature_to_local():
    crs = LocalProjectedCrs()
    parcel = ParcelFeature(_polygon(square_ring(37.6, 55.75)), global_id='a', properties={'k': 1})
    local = parcel.to_local(crs)

    assert local is not parcel
    assert local.global_id == 'a'
    assert local.properties == {'k': 1}
    ring = local.geometry['coordinates'][0]
    assert len(ring) == 5
    for (lon, lat), position in zip(square_ring(37.6, 55.75), ring):
        assert position == list(crs.lon_lat_to_local_meters(lon, lat).to_float())

    # ~0.001 degrees is ~63m east-west at this latitude, ~111m north-south
    assert ring[1][0] - ring[0][0] == approx(62.7, abs=1.)
    assert ring[3][1] - ring[0][1] == approx(111.3, abs=1.)

    # Original is untouched
    assert parcel.geometry['coordinates'][0] == square_ring(37.6, 55.75)


def test_parcelfeature_to_local_passthrough_and_altitude():
    crs = LocalProjectedCrs()
    projected = [[7_500., 9_700., 140.], [7_600., 9_700., 140.], [7_600., 9_800., 140.], [7_500., 9_700., 140.]]
    local = ParcelFeature(_polygon(projected)).to_local(crs)
    assert local.geometry['coordinates'] == [projected]
    assert local.height == 140.

    # An explicit height wins over ring altitudes
    assert ParcelFeature(_polygon(projected), height=5.).to_local(crs).height == 5.


def test_parcelfeature_to_local_drops_degenerate_rings():
    crs = LocalProjectedCrs()
    outer = square_ring(37.6, 55.75, 0.01)
    degenerate = [[37.601, 55.751], [37.602, 55.751], [37.601, 55.751]]

    local = ParcelFeature(_polygon(outer, degenerate)).to_local(crs)
    assert len(local.geometry['coordinates']) == 1

    # The only polygon is degenerate
    assert ParcelFeature(_polygon(degenerate)).to_local(crs) is None

    # Degenerate polygons are dropped from multipolygons
    multi = ParcelFeature({'type': 'MultiPolygon', 'coordinates': [[degenerate], [outer]]})
    local = multi.to_local(crs)
    assert local.geometry_type == 'MultiPolygon'
    assert len(local.polygons) == 1
