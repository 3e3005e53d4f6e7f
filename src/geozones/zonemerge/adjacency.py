"""
Adjacency detection between two zones.

Two zones are adjacent when their interiors overlap, when they share a
boundary segment of nonzero length, or when the gap between them is no
wider than the tolerance. Touching at a single point is not adjacency.

Tolerances are given in meters and converted to degrees with a single
meters-per-degree factor for both axes. This is accurate for latitude and
increasingly generous for longitude towards the poles.
"""

import logging
import math
from functools import cached_property
from typing import List, Union

from geozones.zonemerge import constants
from geozones.zonemerge.geometry import (
    Edge,
    bbox_from_sequence,
    bounding_box_of,
    edges_of,
    is_valid_geometry,
    to_shape,
)
from geozones.zonemerge.models import BBox, Coordinate, Zone

logger = logging.getLogger(__name__)

# Distance, in degrees, within which a point counts as lying on a segment.
# Absolute; edges_share_segment also requires a common stretch of at least
# MIN_EDGE_LENGTH, so endpoints this close never make a shared segment alone.
ON_SEGMENT_TOLERANCE = 1e-10

# DE-9IM pattern for "interiors intersect".
INTERIORS_OVERLAP = "T********"


def meters_to_degrees(meters: float) -> float:
    return meters / constants.METERS_PER_DEGREE


class PreparedZone:
    """
    A zone plus the derived data adjacency tests need.

    The bounding box is taken from the zone when it supplies a usable one
    (any four-number sequence) and computed otherwise. The shapely shape
    and the edge list are built on first use and kept for the lifetime of
    this object, which is a single merge call.
    """

    def __init__(self, zone: Zone):
        self.zone = zone
        self.is_valid = is_valid_geometry(zone.geometry)
        self.bbox = None
        if self.is_valid:
            self.bbox = bbox_from_sequence(zone.bbox) or bounding_box_of(zone.geometry)

    @cached_property
    def shape(self):
        return to_shape(self.zone.geometry)

    @cached_property
    def edges(self) -> List[Edge]:
        return edges_of(self.zone.geometry)


def prepare(zone: Union[Zone, PreparedZone]) -> PreparedZone:
    if isinstance(zone, PreparedZone):
        return zone
    return PreparedZone(zone)


def is_adjacent(
    zone_a: Union[Zone, PreparedZone],
    zone_b: Union[Zone, PreparedZone],
    tolerance_meters: float = constants.DEFAULT_TOLERANCE_METERS,
) -> bool:
    """
    Decide whether two zones are adjacent for merging purposes.

    The test is symmetric and never raises: any error from the underlying
    geometry operations is logged and treated as "not adjacent".

    Args:
        zone_a: First zone, raw or prepared
        zone_b: Second zone, raw or prepared
        tolerance_meters: Widest gap, in meters, still considered adjacent

    Returns:
        True if the zones overlap, share a boundary segment, or lie within
        the tolerance of each other
    """
    try:
        return _prepared_adjacent(prepare(zone_a), prepare(zone_b), tolerance_meters)
    except Exception as e:
        logger.debug(f"Adjacency check failed, treating zones as not adjacent: {e}")
        return False


def _prepared_adjacent(a: PreparedZone, b: PreparedZone, tolerance_meters: float) -> bool:
    if not (a.is_valid and b.is_valid):
        return False

    tolerance = meters_to_degrees(tolerance_meters)
    if not a.bbox.expand(tolerance).overlaps(b.bbox.expand(tolerance)):
        return False

    if a.shape.intersects(b.shape):
        if a.shape.relate_pattern(b.shape, INTERIORS_OVERLAP):
            return True
        # Boundaries meet: a shared segment is adjacency, a lone point is not.
        return shares_boundary_segment(a, b)

    if tolerance > 0:
        # Equivalent to buffering each shape by half the tolerance, without
        # the arc approximation error of polygonal buffers.
        return a.shape.distance(b.shape) <= tolerance

    return False


def _edge_touches(edge: Edge, region: BBox) -> bool:
    (x1, y1), (x2, y2) = edge
    return region.overlaps(BBox(min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2)))


def shares_boundary_segment(a: PreparedZone, b: PreparedZone) -> bool:
    """
    True if any edge of `a` overlaps any edge of `b` along a segment.

    Only edges inside the overlap of the two bounding boxes can be shared,
    so everything else is skipped before the pairwise comparison.
    """
    region = BBox(
        max(a.bbox.min_lon, b.bbox.min_lon),
        max(a.bbox.min_lat, b.bbox.min_lat),
        min(a.bbox.max_lon, b.bbox.max_lon),
        min(a.bbox.max_lat, b.bbox.max_lat),
    ).expand(ON_SEGMENT_TOLERANCE)

    edges_a = [edge for edge in a.edges if _edge_touches(edge, region)]
    edges_b = [edge for edge in b.edges if _edge_touches(edge, region)]

    return any(
        edges_share_segment(edge_a, edge_b) for edge_a in edges_a for edge_b in edges_b
    )


def bearing(start: Coordinate, end: Coordinate) -> float:
    """Planar bearing from start to end, in degrees clockwise from north, [0, 360)."""
    return math.degrees(math.atan2(end[0] - start[0], end[1] - start[1])) % 360


def _length(start: Coordinate, end: Coordinate) -> float:
    return math.hypot(end[0] - start[0], end[1] - start[1])


def _collinear_bearings(bearing_a: float, bearing_b: float) -> bool:
    difference = abs(bearing_a - bearing_b) % 180
    return (
        difference <= constants.BEARING_EPSILON_DEGREES
        or difference >= 180 - constants.BEARING_EPSILON_DEGREES
    )


def _overlap_length(edge_a: Edge, edge_b: Edge) -> float:
    """Length of edge_b's projection that falls within edge_a; negative when apart."""
    (x1, y1), (x2, y2) = edge_a
    length = _length(*edge_a)
    ux, uy = (x2 - x1) / length, (y2 - y1) / length
    projections = [(x - x1) * ux + (y - y1) * uy for x, y in edge_b]
    return min(length, max(projections)) - max(0.0, min(projections))


def point_on_segment(point: Coordinate, start: Coordinate, end: Coordinate) -> bool:
    """True if point lies on the closed segment start-end, within ON_SEGMENT_TOLERANCE."""
    length = _length(start, end)
    if length == 0:
        return _length(point, start) <= ON_SEGMENT_TOLERANCE

    cross = (end[0] - start[0]) * (point[1] - start[1]) - (end[1] - start[1]) * (
        point[0] - start[0]
    )
    if abs(cross) / length > ON_SEGMENT_TOLERANCE:
        return False

    return (
        min(start[0], end[0]) - ON_SEGMENT_TOLERANCE
        <= point[0]
        <= max(start[0], end[0]) + ON_SEGMENT_TOLERANCE
        and min(start[1], end[1]) - ON_SEGMENT_TOLERANCE
        <= point[1]
        <= max(start[1], end[1]) + ON_SEGMENT_TOLERANCE
    )


def edges_share_segment(edge_a: Edge, edge_b: Edge) -> bool:
    """
    Decide whether two edges overlap along more than a single point.

    Collinear edges that meet end to end, pointing away from each other,
    only share their common vertex and are rejected. So are collinear
    edges whose common stretch is shorter than MIN_EDGE_LENGTH, however
    close their endpoints are.
    """
    p1, p2 = edge_a
    p3, p4 = edge_b

    if (
        _length(p1, p2) < constants.MIN_EDGE_LENGTH
        or _length(p3, p4) < constants.MIN_EDGE_LENGTH
    ):
        return False

    if (p1 == p3 and p2 == p4) or (p1 == p4 and p2 == p3):
        return True

    if not _collinear_bearings(bearing(p1, p2), bearing(p3, p4)):
        return False

    shared = [
        (point_a, other_a, other_b)
        for point_a, other_a in ((p1, p2), (p2, p1))
        for point_b, other_b in ((p3, p4), (p4, p3))
        if point_a == point_b
    ]

    if len(shared) == 1:
        point, end_a, end_b = shared[0]
        difference = abs(bearing(point, end_a) - bearing(point, end_b))
        if constants.OPPOSITE_BEARING_MIN < difference < constants.OPPOSITE_BEARING_MAX:
            return False

    overlap = min(_overlap_length(edge_a, edge_b), _overlap_length(edge_b, edge_a))
    if overlap < constants.MIN_EDGE_LENGTH:
        return False

    p1_on_b = point_on_segment(p1, p3, p4)
    p2_on_b = point_on_segment(p2, p3, p4)
    p3_on_a = point_on_segment(p3, p1, p2)
    p4_on_a = point_on_segment(p4, p1, p2)

    if (p1_on_b and p2_on_b) or (p3_on_a and p4_on_a):
        return True

    on_other = sum([p1_on_b, p2_on_b, p3_on_a, p4_on_a])
    return on_other >= 2 and len(shared) != 1
