"""
Merge adjacent zones into one feature per connected group.

This is the public entry point of the package. A merge call prepares the
zones, groups them with the adjacency detector, and folds each group's
geometries together with shapely unions. Problems with individual zones or
groups never abort the call; they are returned as MergeWarning records.
"""

import collections.abc
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from returns.pipeline import is_successful
from returns.result import Result, safe
from shapely.geometry.base import BaseGeometry
from shapely.validation import make_valid

from geozones.zonemerge import constants
from geozones.zonemerge.adjacency import PreparedZone
from geozones.zonemerge.errors import InvalidOptionsError
from geozones.zonemerge.geometry import from_shape, to_shape
from geozones.zonemerge.grouping import find_groups
from geozones.zonemerge.models import (
    Geometry,
    MergedZoneFeature,
    MergeOptions,
    MergeResult,
    MergeWarning,
    Zone,
)
from geozones.zonemerge.spatial_index import default_grid_size, should_use_spatial_index

logger = logging.getLogger(__name__)


def _union_shapes(left: BaseGeometry, right: BaseGeometry) -> BaseGeometry:
    merged = left.union(right)
    if merged.is_empty:
        raise ValueError("Union produced an empty geometry")
    return merged


@safe
def _union(left: BaseGeometry, right: BaseGeometry) -> BaseGeometry:
    return _union_shapes(left, right)


@safe
def _repaired_union(left: BaseGeometry, right: BaseGeometry) -> BaseGeometry:
    return _union_shapes(make_valid(left), make_valid(right))


_shape_of = safe(to_shape)
_geometry_of = safe(from_shape)


def union_step(running: BaseGeometry, shape: BaseGeometry) -> Result[BaseGeometry, Exception]:
    """
    Union two shapes, retrying once on repaired copies if the first try fails.
    """
    return _union(running, shape).lash(lambda _: _repaired_union(running, shape))


def _fold_member(running: Optional[BaseGeometry], zone: Zone) -> Result[BaseGeometry, Exception]:
    shape = _shape_of(zone.geometry)
    if running is None:
        return shape
    return shape.bind(lambda member: union_step(running, member))


def union_group(
    zones: Sequence[Zone], simplify_tolerance: Optional[float] = None
) -> Tuple[Geometry, List[str]]:
    """
    Union the geometries of a group of zones.

    Members are folded in one at a time. A member that cannot be folded in
    is skipped and the union computed so far is kept.

    Args:
        zones: Group members, at least one
        simplify_tolerance: When set, simplify the result with topology
            preserved, in degrees

    Returns:
        Tuple of (geometry, failures) where failures describes each member
        that could not be folded in
    """
    running = None
    failures = []

    for zone in zones:
        step = _fold_member(running, zone)
        if is_successful(step):
            running = step.unwrap()
        else:
            failures.append(f"{zone.id}: {step.failure()}")

    if running is None:
        failures.append("no member could be unioned, keeping the first zone's geometry")
        return zones[0].geometry, failures

    if simplify_tolerance:
        running = safe(running.simplify)(simplify_tolerance, preserve_topology=True).value_or(
            running
        )

    geometry = _geometry_of(running)
    if not is_successful(geometry):
        failures.append(
            f"union result unusable ({geometry.failure()}), keeping the first zone's geometry"
        )
        return zones[0].geometry, failures

    return geometry.unwrap(), failures


@safe
def _custom_properties(
    merger: Callable[[List[Zone]], Dict[str, Any]], zones: List[Zone]
) -> Dict[str, Any]:
    return dict(merger(zones))


def _merged_properties(
    zones: Sequence[Zone], options: MergeOptions
) -> Tuple[Dict[str, Any], Optional[MergeWarning]]:
    """
    Properties for a group's feature.

    A property_merger that raises falls back to the preserved (or empty)
    properties and yields a property_merge_failure warning.
    """
    merged = {}
    if options.preserve_properties:
        for zone in zones:
            merged.update(zone.properties or {})

    if options.property_merger is None:
        return merged, None

    custom = _custom_properties(options.property_merger, list(zones))
    if is_successful(custom):
        return custom.unwrap(), None

    ids = tuple(zone.id for zone in zones)
    return merged, MergeWarning(
        constants.PROPERTY_MERGE_FAILURE,
        f"Property merge failed for group {', '.join(ids)}: {custom.failure()!r}",
        ids,
    )


def merge_group(
    zones: Sequence[Zone], options: MergeOptions
) -> Tuple[MergedZoneFeature, List[MergeWarning]]:
    """
    Build the output feature for one group.

    A single zone passes through with its geometry object untouched.
    """
    ids = [zone.id for zone in zones]
    names = [zone.name for zone in zones]
    properties, property_warning = _merged_properties(zones, options)
    warnings = [property_warning] if property_warning else []

    if len(zones) == 1:
        return MergedZoneFeature(zones[0].geometry, ids, names, properties), warnings

    geometry, failures = union_group(
        zones, options.simplify_tolerance if options.simplify else None
    )
    if failures:
        warnings.append(
            MergeWarning(
                constants.UNION_FAILURE,
                f"Partial union for group {', '.join(ids)}: {'; '.join(failures)}",
                tuple(ids),
            )
        )
    return MergedZoneFeature(geometry, ids, names, properties), warnings


def merge_zones(zones: Sequence[Zone], options: Optional[MergeOptions] = None) -> MergeResult:
    """
    Merge adjacent zones and report what happened along the way.

    Args:
        zones: Zones to merge, possibly empty
        options: Merge settings, defaults when omitted

    Returns:
        MergeResult with one feature per connected group (ordered by the
        group's first zone in the input), the non-fatal warnings, and
        timing and size metrics

    Raises:
        InvalidOptionsError: If zones is not a sequence or the options are
            unusable. Raised before any geometry work.
    """
    if isinstance(zones, (str, bytes)) or not isinstance(zones, collections.abc.Sequence):
        raise InvalidOptionsError(
            f"zones must be a list of Zone records, got {type(zones).__name__}"
        )
    options = options or MergeOptions()
    options.validate()

    start = time.perf_counter()
    count = len(zones)
    use_index = should_use_spatial_index(count, options.use_spatial_index)
    grid_size = options.grid_size or default_grid_size(count)

    prepared = [PreparedZone(zone) for zone in zones]
    warnings = [
        MergeWarning(
            constants.INVALID_GEOMETRY,
            f"Zone {zone.zone.id} has invalid geometry and will not be merged",
            (zone.zone.id,),
        )
        for zone in prepared
        if not zone.is_valid
    ]

    groups = find_groups(prepared, options.tolerance_meters, use_index, grid_size)

    features = []
    for group in groups:
        feature, group_warnings = merge_group([zones[i] for i in group], options)
        features.append(feature)
        warnings.extend(group_warnings)

    for warning in warnings:
        logger.warning(warning.message)

    metrics = {
        "total_zones": count,
        "merged_groups": len(features),
        "invalid_zones": sum(1 for zone in prepared if not zone.is_valid),
        "used_spatial_index": use_index,
        "grid_size": grid_size if use_index else None,
        "processing_time": time.perf_counter() - start,
    }
    logger.info(f"Merged {count} zones into {len(features)} groups")
    return MergeResult(features, warnings, metrics)


def merge_adjacent_zones(
    zones: Sequence[Zone],
    options: Optional[MergeOptions] = None,
    on_warning: Optional[Callable[[MergeWarning], None]] = None,
) -> List[MergedZoneFeature]:
    """
    Merge adjacent zones into one feature per connected group.

    Non-fatal problems are logged and, when on_warning is given, passed to
    it one at a time. Use merge_zones to get them back as a list instead.
    """
    result = merge_zones(zones, options)
    if on_warning is not None:
        for warning in result.warnings:
            on_warning(warning)
    return result.features
