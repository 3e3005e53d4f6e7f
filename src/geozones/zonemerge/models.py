"""
Data models for the zonemerge package.

This module contains the records passed into and returned from the merge
engine. Geometry is a tagged union of two cases, PolygonGeometry and
MultiPolygonGeometry, each carrying its own ring data.
"""

import dataclasses
import math
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from geozones.zonemerge import constants
from geozones.zonemerge.errors import InvalidOptionsError

Coordinate = Tuple[float, float]
Ring = Tuple[Coordinate, ...]


class BBox(NamedTuple):
    """Bounding box in degrees, ordered like GeoJSON: west, south, east, north."""

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def expand(self, margin: float) -> "BBox":
        return BBox(
            self.min_lon - margin,
            self.min_lat - margin,
            self.max_lon + margin,
            self.max_lat + margin,
        )

    def overlaps(self, other: "BBox") -> bool:
        """True when the boxes intersect; shared borders count as overlap."""
        return not (
            self.max_lon < other.min_lon
            or self.min_lon > other.max_lon
            or self.max_lat < other.min_lat
            or self.min_lat > other.max_lat
        )


@dataclasses.dataclass(frozen=True)
class PolygonGeometry:
    """
    A polygon as a tuple of rings.

    The first ring is the exterior boundary and any further rings are holes.
    """

    rings: Tuple[Ring, ...]

    @property
    def exterior(self) -> Ring:
        return self.rings[0]

    @property
    def holes(self) -> Tuple[Ring, ...]:
        return self.rings[1:]

    @property
    def __geo_interface__(self) -> Dict[str, Any]:
        return {
            "type": "Polygon",
            "coordinates": [[list(point) for point in ring] for ring in self.rings],
        }


@dataclasses.dataclass(frozen=True)
class MultiPolygonGeometry:
    """A collection of PolygonGeometry members, e.g. a zone with islands."""

    polygons: Tuple[PolygonGeometry, ...]

    @property
    def __geo_interface__(self) -> Dict[str, Any]:
        return {
            "type": "MultiPolygon",
            "coordinates": [
                polygon.__geo_interface__["coordinates"] for polygon in self.polygons
            ],
        }


Geometry = Union[PolygonGeometry, MultiPolygonGeometry]


@dataclasses.dataclass(frozen=True)
class Zone:
    """
    A named polygonal region selected by the user.

    Zones are inputs to the merge engine and are never modified by it. bbox
    may be a BBox or any [min_lon, min_lat, max_lon, max_lat] sequence; when
    it is missing or malformed it is computed (and cached) per merge call.
    """

    id: str
    name: str
    geometry: Geometry
    bbox: Optional[Sequence[float]] = None
    properties: Optional[Dict[str, Any]] = None


@dataclasses.dataclass(frozen=True)
class MergedZoneFeature:
    """
    One connected group of zones collapsed into a single geometry.

    merged_zone_ids and merged_zone_names list every original member in
    input order, including members whose geometry could not be unioned.
    """

    geometry: Geometry
    merged_zone_ids: List[str]
    merged_zone_names: List[str]
    extra_properties: Dict[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def properties(self) -> Dict[str, Any]:
        properties = dict(self.extra_properties)
        properties[constants.MERGED_ZONE_IDS] = list(self.merged_zone_ids)
        properties[constants.MERGED_ZONE_NAMES] = list(self.merged_zone_names)
        return properties

    @property
    def __geo_interface__(self) -> Dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": self.geometry.__geo_interface__,
            "properties": self.properties,
        }


@dataclasses.dataclass(frozen=True)
class MergeWarning:
    """A non-fatal problem found while merging."""

    kind: str  # one of the warning kinds in constants
    message: str
    zone_ids: Tuple[str, ...] = ()


@dataclasses.dataclass
class MergeOptions:
    """
    Caller-tunable merge settings.

    use_spatial_index and grid_size are resolved against the zone count when
    left as None.
    """

    tolerance_meters: float = constants.DEFAULT_TOLERANCE_METERS
    use_spatial_index: Optional[bool] = None
    grid_size: Optional[int] = None
    simplify: bool = constants.DEFAULT_SIMPLIFY
    simplify_tolerance: float = constants.DEFAULT_SIMPLIFY_TOLERANCE
    preserve_properties: bool = constants.DEFAULT_PRESERVE_PROPERTIES
    property_merger: Optional[Callable[[List[Zone]], Dict[str, Any]]] = None

    def validate(self):
        """
        Raise InvalidOptionsError for any setting that indicates caller misuse.
        """
        tolerance = self.tolerance_meters
        if (
            isinstance(tolerance, bool)
            or not isinstance(tolerance, (int, float))
            or math.isnan(tolerance)
            or math.isinf(tolerance)
            or tolerance < 0
        ):
            raise InvalidOptionsError(
                f"tolerance_meters must be a finite number >= 0, got {tolerance!r}"
            )

        if self.use_spatial_index is not None and not isinstance(
            self.use_spatial_index, bool
        ):
            raise InvalidOptionsError(
                f"use_spatial_index must be True, False or None, got {self.use_spatial_index!r}"
            )

        if self.grid_size is not None and (
            isinstance(self.grid_size, bool)
            or not isinstance(self.grid_size, int)
            or self.grid_size < 1
        ):
            raise InvalidOptionsError(
                f"grid_size must be a positive integer, got {self.grid_size!r}"
            )

        if self.simplify and not self.simplify_tolerance > 0:
            raise InvalidOptionsError(
                f"simplify_tolerance must be > 0, got {self.simplify_tolerance!r}"
            )

        if self.property_merger is not None and not callable(self.property_merger):
            raise InvalidOptionsError("property_merger must be callable")


@dataclasses.dataclass
class MergeResult:
    """Merged features plus the diagnostics gathered while producing them."""

    features: List[MergedZoneFeature]
    warnings: List[MergeWarning] = dataclasses.field(default_factory=list)
    metrics: Dict[str, Any] = dataclasses.field(default_factory=dict)
