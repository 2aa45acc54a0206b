"""
Module for normalizing the heterogeneous feature records returned by municipal GIS
APIs into ParcelFeatures
"""

__all__ = [
    'GeometryShape', 'HEIGHT_KEYS', 'classify_geometry', 'extract_features',
    'extract_global_id', 'extract_height', 'matches_target', 'normalize_geometry',
    'parse_feature',
]

from enum import Enum
import json
from typing import Any, Callable, Dict, List, Optional

from geoparcels.features import ParcelFeature
from geoparcels.utils.functions import parse_geo_number
from geoparcels.utils.logging import LOGGER


# Attribute names known to carry a parcel's height, in order of preference
HEIGHT_KEYS = (
    'h_relief', 'H_RELIEF', 'HRelief', 'relief', 'RELIEF', 'height', 'HEIGHT',
    'Elevation', 'elevation', 'H_GEOM', 'H_BALT',
)

# Properties that may hold a geometry when the feature's own geometry is absent
_EMBEDDED_GEOMETRY_KEYS = ('geoData', 'GeoData', 'geom', 'geometry')

_ATTRIBUTE_ID_KEYS = ('global_id', 'GLOBAL_ID')
_FEATURE_ID_KEYS = ('global_id', 'GLOBAL_ID', 'id')


class GeometryShape(Enum):
    """The ways a feature record can carry its geometry"""
    GEOJSON = 'geojson'  # feature.geometry.coordinates
    EMBEDDED_JSON = 'embedded_json'  # properties.<key> as a JSON string
    EMBEDDED_OBJECT = 'embedded_object'  # properties.<key> as an object
    ESRI_RINGS = 'esri_rings'  # feature.geometry.rings
    UNKNOWN = 'unknown'


def _first_present(mapping: Dict[str, Any], keys) -> Any:
    """Returns the value of the first key whose value is not None"""
    for key in keys:
        if mapping.get(key) is not None:
            return mapping[key]

    return None


def _attributes(feature: Dict[str, Any]) -> Dict[str, Any]:
    """The attribute table of a feature, wherever the API chose to put it"""
    props = feature.get('properties') or {}
    if not isinstance(props, dict):
        props = {}

    attrs = (
        props.get('attributes') or props.get('Attributes') or props
        or feature.get('attributes') or {}
    )
    return attrs if isinstance(attrs, dict) else {}


def _embedded_geometry(feature: Dict[str, Any]) -> Any:
    props = feature.get('properties') or {}
    if not isinstance(props, dict):
        return None

    for key in _EMBEDDED_GEOMETRY_KEYS:
        if props.get(key):
            return props[key]

    return None


def _coerce_position(position: Any) -> List[float]:
    """
    Coerces a position to [x, y] or [x, y, altitude] floats. Accepts sequences and
    Esri-style {'x': ..., 'y': ..., 'z': ...} objects.
    """
    if isinstance(position, dict):
        values = [position.get('x'), position.get('y'), position.get('z')]
    else:
        values = list(position)

    x, y = parse_geo_number(values[0]), parse_geo_number(values[1])
    if x is None or y is None:
        raise ValueError(f'Non-numeric coordinate: {position!r}')

    z = parse_geo_number(values[2]) if len(values) > 2 else None
    return [x, y] if z is None else [x, y, z]


def _coerce_rings(rings: Any) -> List[List[List[float]]]:
    return [[_coerce_position(position) for position in ring] for ring in rings]


def _from_geometry_object(geometry: Any) -> Optional[Dict[str, Any]]:
    """Normalizes a GeoJSON or Esri geometry object"""
    if not isinstance(geometry, dict):
        return None

    if geometry.get('coordinates') is not None:
        geom_type = geometry.get('type')
        if geom_type == 'Polygon':
            return {'type': 'Polygon', 'coordinates': _coerce_rings(geometry['coordinates'])}

        if geom_type == 'MultiPolygon':
            return {
                'type': 'MultiPolygon',
                'coordinates': [_coerce_rings(polygon) for polygon in geometry['coordinates']],
            }

        # Not a parcel shape; handed back as-is so callers can inspect it
        return dict(geometry)

    if isinstance(geometry.get('rings'), list):
        return {'type': 'Polygon', 'coordinates': _coerce_rings(geometry['rings'])}

    return None


def _normalize_geojson(feature: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return _from_geometry_object(feature['geometry'])


def _normalize_embedded_json(feature: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    try:
        geometry = json.loads(_embedded_geometry(feature))
    except ValueError:
        # Unparseable text; the feature's own geometry (if any) still gets a chance
        return _from_geometry_object(feature.get('geometry'))

    return _from_geometry_object(geometry)


def _normalize_embedded_object(feature: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return _from_geometry_object(_embedded_geometry(feature))


def _normalize_esri_rings(feature: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return _from_geometry_object(feature['geometry'])


_NORMALIZERS: Dict[GeometryShape, Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]] = {
    GeometryShape.GEOJSON: _normalize_geojson,
    GeometryShape.EMBEDDED_JSON: _normalize_embedded_json,
    GeometryShape.EMBEDDED_OBJECT: _normalize_embedded_object,
    GeometryShape.ESRI_RINGS: _normalize_esri_rings,
    GeometryShape.UNKNOWN: lambda _: None,
}


def classify_geometry(feature: Any) -> GeometryShape:
    """
    Determines how a feature record carries its geometry. A standard GeoJSON
    geometry wins; otherwise a geometry embedded in the properties; otherwise an
    Esri {'rings': [...]} geometry.

    Args:
        feature:
            A raw feature record

    Returns:
        GeometryShape
    """
    if not isinstance(feature, dict):
        return GeometryShape.UNKNOWN

    geometry = feature.get('geometry')
    if isinstance(geometry, dict) and geometry.get('coordinates') is not None:
        return GeometryShape.GEOJSON

    embedded = _embedded_geometry(feature)
    if isinstance(embedded, str):
        return GeometryShape.EMBEDDED_JSON

    if isinstance(embedded, dict):
        return GeometryShape.EMBEDDED_OBJECT

    if isinstance(geometry, dict) and isinstance(geometry.get('rings'), list):
        return GeometryShape.ESRI_RINGS

    return GeometryShape.UNKNOWN


def normalize_geometry(feature: Any) -> Optional[Dict[str, Any]]:
    """
    Extracts a feature's geometry as a GeoJSON geometry dict, whichever way the
    record carries it (see GeometryShape). Esri rings become a Polygon. Polygon
    and MultiPolygon coordinates are coerced to floats, so numeric strings such as
    '37,61' are accepted. The input is never mutated.

    Args:
        feature:
            A raw feature record

    Returns:
        A GeoJSON geometry dict, or None if no usable geometry was found
    """
    shape = classify_geometry(feature)
    try:
        return _NORMALIZERS[shape](feature)
    except (TypeError, ValueError, IndexError, KeyError) as exc:
        LOGGER.debug('Malformed %s geometry skipped: %s', shape.value, exc)
        return None


def extract_height(feature: Any) -> Optional[float]:
    """
    Finds a feature's height: the first finite value among the HEIGHT_KEYS
    attributes, else the third coordinate of a 3D Point geometry.

    Args:
        feature:
            A raw feature record

    Returns:
        float, or None if no height is available
    """
    if not isinstance(feature, dict):
        return None

    attrs = _attributes(feature)
    for key in HEIGHT_KEYS:
        height = parse_geo_number(attrs.get(key))
        if height is not None:
            return height

    geometry = feature.get('geometry')
    if isinstance(geometry, dict) and geometry.get('type') == 'Point':
        coords = geometry.get('coordinates')
        if isinstance(coords, (list, tuple)) and len(coords) >= 3:
            return parse_geo_number(coords[2])

    return None


def _id_to_str(value: Any) -> str:
    # Integral floats (e.g. 123.0 from a JSON number) compare as their integer form
    if isinstance(value, float) and value.is_integer():
        return str(int(value))

    return str(value)


def extract_global_id(feature: Any) -> Optional[str]:
    """
    Finds a feature's identifier: global_id/GLOBAL_ID among its attributes, else
    global_id/GLOBAL_ID/id on the record itself.

    Args:
        feature:
            A raw feature record

    Returns:
        str, or None
    """
    if not isinstance(feature, dict):
        return None

    candidate = _first_present(_attributes(feature), _ATTRIBUTE_ID_KEYS)
    if candidate is None:
        candidate = _first_present(feature, _FEATURE_ID_KEYS)

    return None if candidate is None else _id_to_str(candidate)


def matches_target(feature: Any, target_id: Optional[Any]) -> bool:
    """
    Tests whether a feature is the configured target parcel. With no target
    (None or ''), every feature matches. Comparison is exact and case-sensitive.

    Args:
        feature:
            A raw feature record

        target_id: (Optional)
            The global id being searched for

    Returns:
        bool
    """
    if target_id is None or target_id == '':
        return True

    candidate = extract_global_id(feature)
    return candidate is not None and candidate == _id_to_str(target_id)


def parse_feature(feature: Any) -> Optional[ParcelFeature]:
    """
    Normalizes a raw feature record into a ParcelFeature. Records without a
    usable Polygon/MultiPolygon geometry produce None and are meant to be skipped.

    Args:
        feature:
            A raw feature record

    Returns:
        ParcelFeature, or None
    """
    geometry = normalize_geometry(feature)
    if geometry is None or geometry.get('type') not in ('Polygon', 'MultiPolygon'):
        LOGGER.debug(
            'Skipping feature %s: no polygon geometry', extract_global_id(feature)
        )
        return None

    properties = feature.get('properties')
    return ParcelFeature(
        geometry,
        height=extract_height(feature),
        global_id=extract_global_id(feature),
        properties=dict(properties) if isinstance(properties, dict) else {},
    )


def extract_features(payload: Any) -> List[Any]:
    """
    Pulls the raw feature list out of an API response body: the 'features' of a
    FeatureCollection, or a bare list. Anything else yields no features.

    Args:
        payload:
            The decoded response body

    Returns:
        list
    """
    if isinstance(payload, dict) and isinstance(payload.get('features'), list):
        return payload['features']

    if isinstance(payload, list):
        return payload

    return []
