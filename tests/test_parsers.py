import copy
import json

from geoparcels.parsers import *
from tests.functions import make_feature, square_ring


def test_classify_geometry():
    assert classify_geometry(make_feature('1')) is GeometryShape.GEOJSON
    assert classify_geometry(
        {'properties': {'geoData': '{"type": "Polygon"}'}}
    ) is GeometryShape.EMBEDDED_JSON
    assert classify_geometry(
        {'properties': {'GeoData': {'type': 'Polygon'}}}
    ) is GeometryShape.EMBEDDED_OBJECT
    assert classify_geometry({'geometry': {'rings': []}}) is GeometryShape.ESRI_RINGS
    assert classify_geometry({'geometry': None}) is GeometryShape.UNKNOWN
    assert classify_geometry('not a feature') is GeometryShape.UNKNOWN


def test_normalize_geometry_geojson():
    feature = {
        'geometry': {
            'type': 'Polygon',
            'coordinates': [[['37.6', '55.7'], [37.7, '55,7'], [37.7, 55.8], ['37.6', '55.7']]],
        }
    }
    original = copy.deepcopy(feature)
    assert normalize_geometry(feature) == {
        'type': 'Polygon',
        'coordinates': [[[37.6, 55.7], [37.7, 55.7], [37.7, 55.8], [37.6, 55.7]]],
    }
    # Input untouched
    assert feature == original


def test_normalize_geometry_multipolygon_keeps_altitude():
    feature = {
        'geometry': {
            'type': 'MultiPolygon',
            'coordinates': [[[[1, 2, '150.5'], [3, 4, 150.5], [5, 6, 150.5], [1, 2, 150.5]]]],
        }
    }
    assert normalize_geometry(feature) == {
        'type': 'MultiPolygon',
        'coordinates': [[[[1., 2., 150.5], [3., 4., 150.5], [5., 6., 150.5], [1., 2., 150.5]]]],
    }


def test_normalize_geometry_embedded_esri_json():
    rings = [[['37.61', '55.75'], ['37.62', '55.75'], ['37.62', '55.76'], ['37.61', '55.75']]]
    feature = {'properties': {'geoData': json.dumps({'rings': rings})}}
    assert normalize_geometry(feature) == {
        'type': 'Polygon',
        'coordinates': [[[37.61, 55.75], [37.62, 55.75], [37.62, 55.76], [37.61, 55.75]]],
    }


def test_normalize_geometry_embedded_object():
    geometry = {'type': 'Polygon', 'coordinates': [square_ring(37.6, 55.7)]}
    for key in ('geoData', 'GeoData', 'geom', 'geometry'):
        feature = {'geometry': None, 'properties': {key: geometry}}
        assert normalize_geometry(feature) == geometry


def test_normalize_geometry_esri_point_objects():
    feature = {
        'geometry': {'rings': [[
            {'x': 1, 'y': 2}, {'x': '3', 'y': 2}, {'x': 3, 'y': 4}, {'x': 1, 'y': 2}
        ]]},
        'attributes': {'global_id': 5},
    }
    assert normalize_geometry(feature) == {
        'type': 'Polygon',
        'coordinates': [[[1., 2.], [3., 2.], [3., 4.], [1., 2.]]],
    }


def test_normalize_geometry_failures():
    assert normalize_geometry(None) is None
    assert normalize_geometry({}) is None
    assert normalize_geometry({'properties': {'geoData': 'not json'}}) is None
    assert normalize_geometry({'properties': {'geoData': '[1, 2]'}}) is None
    assert normalize_geometry(
        {'geometry': {'type': 'Polygon', 'coordinates': [[['abc', 1]]]}}
    ) is None
    assert normalize_geometry(
        {'geometry': {'type': 'Polygon', 'coordinates': [[[1]]]}}
    ) is None


def test_normalize_geometry_bad_embedded_json_falls_back_to_esri():
    feature = {
        'geometry': {'rings': [[[1, 2], [3, 2], [3, 4], [1, 2]]]},
        'properties': {'geoData': '{broken'},
    }
    assert normalize_geometry(feature)['type'] == 'Polygon'


def test_normalize_geometry_other_types_passthrough():
    feature = {'geometry': {'type': 'Point', 'coordinates': [1, 2, 3]}}
    assert normalize_geometry(feature) == {'type': 'Point', 'coordinates': [1, 2, 3]}


def test_extract_height():
    assert extract_height(make_feature('1', h_relief='151,25')) == 151.25
    assert extract_height(make_feature('1', HEIGHT=12)) == 12.

    # Key order decides
    assert extract_height(make_feature('1', height=2, H_RELIEF=1)) == 1.

    # Non-numeric values are skipped
    assert extract_height(make_feature('1', relief='n/a', elevation=7)) == 7.

    # Attributes directly in properties
    assert extract_height({'properties': {'H_BALT': 140}}) == 140.

    # 3D Point fallback
    assert extract_height({'geometry': {'type': 'Point', 'coordinates': [1, 2, 3]}}) == 3.
    assert extract_height({'geometry': {'type': 'Point', 'coordinates': [1, 2]}}) is None
    assert extract_height(make_feature('1')) is None
    assert extract_height(None) is None


def test_extract_global_id():
    assert extract_global_id(make_feature(123)) == '123'
    assert extract_global_id(make_feature(123.0)) == '123'
    assert extract_global_id({'properties': {'Attributes': {'GLOBAL_ID': 'abc'}}}) == 'abc'
    assert extract_global_id({'properties': {'global_id': 7}}) == '7'
    assert extract_global_id({'id': 9, 'properties': {}}) == '9'
    assert extract_global_id({'GLOBAL_ID': 'x'}) == 'x'
    assert extract_global_id({'attributes': {'global_id': 5}}) == '5'
    assert extract_global_id({'properties': {}}) is None


def test_matches_target():
    feature = make_feature(272_613_470)
    assert matches_target(feature, None)
    assert matches_target(feature, '')
    assert matches_target(feature, '272613470')
    assert matches_target(feature, 272_613_470)
    assert not matches_target(feature, '27261347')
    assert not matches_target({'properties': {}}, '1')

    # Case-sensitive
    assert matches_target(make_feature('AbC'), 'AbC')
    assert not matches_target(make_feature('AbC'), 'abc')


def test_parse_feature():
    feature = make_feature(42, h_relief=150)
    parcel = parse_feature(feature)
    assert parcel.global_id == '42'
    assert parcel.height == 150.
    assert parcel.geometry_type == 'Polygon'
    assert parcel.properties == feature['properties']

    assert parse_feature({'geometry': {'type': 'Point', 'coordinates': [1, 2]}}) is None
    assert parse_feature({'properties': {}}) is None


def test_extract_features():
    features = [make_feature('1'), make_feature('2')]
    assert extract_features({'type': 'FeatureCollection', 'features': features}) == features
    assert extract_features(features) == features
    assert extract_features({'type': 'FeatureCollection'}) == []
    assert extract_features({'features': 'nope'}) == []
    assert extract_features(None) == []
    assert extract_features('text') == []
