"""
Parcel feature records, and their conversion into local grid meters
"""

from __future__ import annotations

__all__ = ['ParcelFeature', 'MIN_RING_POSITIONS']

import copy
from typing import Any, Dict, Iterator, List, Optional, TYPE_CHECKING

from geoparcels.utils.functions import is_finite_number

if TYPE_CHECKING:  # pragma: no cover
    import shapely
    from geoparcels.crs import LocalProjectedCrs

# A closed ring needs at least 3 distinct vertices plus the closing one
MIN_RING_POSITIONS = 4

_POLYGON_TYPES = ('Polygon', 'MultiPolygon')


class ParcelFeature:
    """
    A cadastral parcel: Polygon or MultiPolygon geometry (GeoJSON structure) plus
    the attributes the rest of the pipeline cares about.

    Rings are lists of [x, y] or [x, y, altitude] positions; in each polygon the
    first ring is the outer boundary and any further rings are holes. Positions are
    lon/lat degrees as ingested, or local meters after .to_local().

    Args:
        geometry:
            A GeoJSON Polygon or MultiPolygon geometry dict

        height: (Optional)
            The parcel's height/elevation in meters, if known

        global_id: (Optional)
            The dataset's identifier for this parcel

        properties: (Optional)
            The original feature properties
    """

    def __init__(
        self,
        geometry: Dict[str, Any],
        height: Optional[float] = None,
        global_id: Optional[str] = None,
        properties: Optional[Dict[str, Any]] = None,
    ):
        if geometry.get('type') not in _POLYGON_TYPES:
            raise ValueError(
                f'Geometry represents a {geometry.get("type")}; expected Polygon or MultiPolygon.'
            )

        self.geometry = geometry
        self.height = height
        self.global_id = global_id
        self._properties = properties or {}

    def __eq__(self, other):
        if not isinstance(other, ParcelFeature):
            return False

        return (
            self.geometry == other.geometry and
            self.height == other.height and
            self.global_id == other.global_id
        )

    def __repr__(self):
        return (
            f'<ParcelFeature {self.geometry_type} with {len(self.polygons)} polygon(s), '
            f'global_id={self.global_id!r}>'
        )

    @property
    def geometry_type(self) -> str:
        return self.geometry['type']

    @property
    def polygons(self) -> List[List[List[List[float]]]]:
        """The geometry as a list of polygons, each a list of rings"""
        if self.geometry_type == 'Polygon':
            return [self.geometry['coordinates']]

        return self.geometry['coordinates']

    @property
    def properties(self) -> Dict[str, Any]:
        return self._properties

    def rings(self) -> Iterator[List[List[float]]]:
        """Yields every ring (outer boundaries and holes) of every polygon"""
        for polygon in self.polygons:
            yield from polygon

    def to_geojson(self, **kwargs) -> Dict[str, Any]:
        """
        Converts this parcel to a GeoJSON feature.

        Keyword Args:
            properties: (dict)
                Additional properties to merge into the feature's properties

        Returns:
            dict
        """
        properties = {**self._properties, **kwargs.get('properties', {})}
        if self.height is not None:
            properties['height'] = self.height
        if self.global_id is not None:
            properties['global_id'] = self.global_id

        return {
            'type': 'Feature',
            'geometry': copy.deepcopy(self.geometry),
            'properties': properties,
        }

    def to_shapely(self) -> 'shapely.geometry.base.BaseGeometry':
        """Converts the geometry to a shapely Polygon/MultiPolygon (requires shapely)"""
        import shapely.geometry  # pylint: disable=import-outside-toplevel

        return shapely.geometry.shape(self.geometry)

    def to_local(self, crs: 'LocalProjectedCrs') -> Optional['ParcelFeature']:
        """
        Converts every ring into local grid meters.

        Positions whose longitude exceeds 180 or latitude exceeds 90 (in magnitude)
        are assumed to be projected already and are passed through unchanged.
        Altitudes are preserved. Rings with fewer than MIN_RING_POSITIONS positions
        are dropped; a polygon whose outer ring is dropped is dropped entirely.
        When the parcel carries no height, the first finite ring altitude is used.

        Args:
            crs:
                The LocalProjectedCrs to convert with

        Returns:
            A new ParcelFeature, or None if no polygon survives
        """
        height = self.height
        polygons = []
        for polygon in self.polygons:
            if not polygon or len(polygon[0]) < MIN_RING_POSITIONS:
                continue

            rings = []
            for ring in polygon:
                if len(ring) < MIN_RING_POSITIONS:
                    continue

                converted = []
                for position in ring:
                    lon, lat = position[0], position[1]
                    if abs(lon) > 180 or abs(lat) > 90:
                        x, y = lon, lat
                    else:
                        x, y = crs.lon_lat_to_local_meters(lon, lat).to_float()

                    if len(position) > 2:
                        converted.append([x, y, position[2]])
                        if height is None and is_finite_number(position[2]):
                            height = float(position[2])
                    else:
                        converted.append([x, y])

                rings.append(converted)

            polygons.append(rings)

        if not polygons:
            return None

        if self.geometry_type == 'Polygon':
            geometry = {'type': 'Polygon', 'coordinates': polygons[0]}
        else:
            geometry = {'type': 'MultiPolygon', 'coordinates': polygons}

        return ParcelFeature(geometry, height, self.global_id, dict(self._properties))
