"""
Geometry primitives for zone records.

Every function here branches on the two Geometry cases, PolygonGeometry and
MultiPolygonGeometry, and raises TypeError for anything else. Conversion to
and from shapely lives here so the rest of the package never needs to know
how rings are stored.
"""

import math
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from shapely.geometry import GeometryCollection, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from geozones.zonemerge.models import (
    BBox,
    Coordinate,
    Geometry,
    MultiPolygonGeometry,
    PolygonGeometry,
    Ring,
)

Edge = Tuple[Coordinate, Coordinate]

MIN_RING_POINTS = 4


def _unknown_geometry(geometry) -> TypeError:
    return TypeError(f"Unsupported geometry type: {type(geometry).__name__}")


def bounding_box_of(geometry: Geometry) -> BBox:
    """
    Compute the bounding box of a geometry.

    For a Polygon only the exterior ring is considered, since holes lie
    inside it. A MultiPolygon's box is the union of its members' boxes.

    Raises:
        ValueError: If the geometry has no coordinates to measure
    """
    if isinstance(geometry, PolygonGeometry):
        if not geometry.rings or not geometry.exterior:
            raise ValueError("Cannot compute the bounding box of an empty polygon")
        lons = [lon for lon, _ in geometry.exterior]
        lats = [lat for _, lat in geometry.exterior]
        return BBox(min(lons), min(lats), max(lons), max(lats))
    elif isinstance(geometry, MultiPolygonGeometry):
        if not geometry.polygons:
            raise ValueError("Cannot compute the bounding box of an empty multipolygon")
        boxes = [bounding_box_of(polygon) for polygon in geometry.polygons]
        return BBox(
            min(box.min_lon for box in boxes),
            min(box.min_lat for box in boxes),
            max(box.max_lon for box in boxes),
            max(box.max_lat for box in boxes),
        )
    else:
        raise _unknown_geometry(geometry)


def bbox_from_sequence(values: Any) -> Optional[BBox]:
    """
    Read a [min_lon, min_lat, max_lon, max_lat] sequence as a BBox.

    Returns None for anything that is not four numbers with min <= max on
    both axes, so callers can fall back to bounding_box_of.
    """
    if values is None or isinstance(values, (str, bytes)):
        return None
    try:
        bbox = BBox(*(float(value) for value in values))
    except (TypeError, ValueError):
        return None
    if any(math.isnan(value) for value in bbox):
        return None
    if bbox.min_lon > bbox.max_lon or bbox.min_lat > bbox.max_lat:
        return None
    return bbox


def is_valid_geometry(geometry: Any) -> bool:
    """
    Check the structural rules the merge engine relies on.

    A Polygon needs at least one ring and every ring, holes included, needs
    at least four points. A MultiPolygon needs at least one member and every
    member must be a valid Polygon. Anything else is invalid; this never
    raises.
    """
    if isinstance(geometry, PolygonGeometry):
        return len(geometry.rings) > 0 and all(
            len(ring) >= MIN_RING_POINTS for ring in geometry.rings
        )
    elif isinstance(geometry, MultiPolygonGeometry):
        return len(geometry.polygons) > 0 and all(
            is_valid_geometry(polygon) for polygon in geometry.polygons
        )
    return False


def close_ring(ring: Sequence[Sequence[float]]) -> Ring:
    """Return the ring as (lon, lat) tuples, repeating the first point if needed."""
    points = tuple((float(point[0]), float(point[1])) for point in ring)
    if points and points[0] != points[-1]:
        points = points + (points[0],)
    return points


def _polygon_edges(polygon: PolygonGeometry) -> List[Edge]:
    closed = [close_ring(ring) for ring in polygon.rings]
    return [(ring[i], ring[i + 1]) for ring in closed for i in range(len(ring) - 1)]


def edges_of(geometry: Geometry) -> List[Edge]:
    """
    Decompose a geometry into directed edges.

    One edge per consecutive coordinate pair of every ring, holes included;
    a MultiPolygon contributes the edges of all of its members. Rings left
    open are treated as closed, so the closing edge is always present.
    """
    if isinstance(geometry, PolygonGeometry):
        return _polygon_edges(geometry)
    elif isinstance(geometry, MultiPolygonGeometry):
        return [edge for polygon in geometry.polygons for edge in _polygon_edges(polygon)]
    else:
        raise _unknown_geometry(geometry)


def to_shape(geometry: Geometry) -> BaseGeometry:
    """Build the shapely equivalent of a zone geometry."""
    if isinstance(geometry, PolygonGeometry):
        return Polygon(geometry.exterior, geometry.holes)
    elif isinstance(geometry, MultiPolygonGeometry):
        return MultiPolygon(
            [Polygon(polygon.exterior, polygon.holes) for polygon in geometry.polygons]
        )
    else:
        raise _unknown_geometry(geometry)


def _ring_from_coords(coords) -> Ring:
    return tuple((float(c[0]), float(c[1])) for c in coords)


def _polygon_from_shape(polygon: Polygon) -> PolygonGeometry:
    return PolygonGeometry(
        (_ring_from_coords(polygon.exterior.coords),)
        + tuple(_ring_from_coords(interior.coords) for interior in polygon.interiors)
    )


def _polygonal_parts(shape: BaseGeometry) -> List[Polygon]:
    if isinstance(shape, Polygon):
        return [] if shape.is_empty else [shape]
    elif isinstance(shape, (MultiPolygon, GeometryCollection)):
        return [part for geom in shape.geoms for part in _polygonal_parts(geom)]
    return []


def from_shape(shape: BaseGeometry) -> Geometry:
    """
    Convert a shapely result back into a zone geometry.

    Only polygonal parts are kept, so a GeometryCollection produced by a
    union or a repair still converts. A single part becomes a Polygon,
    several parts a MultiPolygon.

    Raises:
        ValueError: If the shape has no polygonal area at all
    """
    parts = _polygonal_parts(shape)
    if not parts:
        raise ValueError(f"No polygonal parts in {shape.geom_type}")
    if len(parts) == 1:
        return _polygon_from_shape(parts[0])
    return MultiPolygonGeometry(tuple(_polygon_from_shape(part) for part in parts))


def geometry_from_mapping(mapping: Mapping[str, Any]) -> Geometry:
    """
    Build a zone geometry from a GeoJSON-like mapping.

    Objects exposing __geo_interface__ (shapely geometries, for example) are
    accepted too. Rings are closed if the input left them open; otherwise
    the data is taken as given, so invalid rings survive to be reported by
    is_valid_geometry.

    Raises:
        ValueError: If the mapping is not a Polygon or MultiPolygon
    """
    if hasattr(mapping, "__geo_interface__"):
        mapping = mapping.__geo_interface__

    geometry_type = mapping.get("type")
    coordinates = mapping.get("coordinates") or []

    if geometry_type == "Polygon":
        return PolygonGeometry(tuple(close_ring(ring) for ring in coordinates))
    elif geometry_type == "MultiPolygon":
        return MultiPolygonGeometry(
            tuple(
                PolygonGeometry(tuple(close_ring(ring) for ring in polygon))
                for polygon in coordinates
            )
        )
    raise ValueError(f"Zone geometry must be a Polygon or MultiPolygon, got {geometry_type}")
