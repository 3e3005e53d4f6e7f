"""
Partition a zone set into connected components under adjacency.

Candidate pairs come either from a GridSpatialIndex or, for small inputs,
from exhaustive pairwise comparison. Confirmed pairs are unioned in a
UnionFind and the components are read off in input order, so the result is
identical whichever candidate source was used.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from geozones.zonemerge import constants
from geozones.zonemerge.adjacency import PreparedZone, is_adjacent, meters_to_degrees
from geozones.zonemerge.spatial_index import GridSpatialIndex, default_grid_size
from geozones.zonemerge.union_find import UnionFind

logger = logging.getLogger(__name__)


def build_spatial_index(
    prepared: Sequence[PreparedZone],
    tolerance_meters: float,
    grid_size: Optional[int] = None,
) -> GridSpatialIndex:
    """
    Index the valid zones' bounding boxes.

    Boxes are grown by the tolerance so zones separated by an allowed gap
    still land in neighbouring cells.
    """
    return GridSpatialIndex(
        [zone.bbox for zone in prepared],
        grid_size or default_grid_size(len(prepared)),
        margin=meters_to_degrees(tolerance_meters),
    )


def find_groups(
    prepared: Sequence[PreparedZone],
    tolerance_meters: float = constants.DEFAULT_TOLERANCE_METERS,
    use_spatial_index: bool = False,
    grid_size: Optional[int] = None,
) -> List[List[int]]:
    """
    Group zone indices into connected components.

    Args:
        prepared: Zones to group, in input order
        tolerance_meters: Gap tolerance passed to the adjacency detector
        use_spatial_index: Fetch candidates from a grid index instead of
            testing every pair
        grid_size: Cells per axis for the index; defaults to a size derived
            from the zone count

    Returns:
        Lists of zone indices. Groups are ordered by their first zone and
        members keep input order. Zones with invalid geometry always come
        back as singletons.
    """
    count = len(prepared)
    components = UnionFind(count)

    if use_spatial_index:
        index = build_spatial_index(prepared, tolerance_meters, grid_size)
        candidates_for = index.candidates_for
        logger.debug(
            f"Using a {index.grid_size}x{index.grid_size} spatial index for {count} zones"
        )
    else:

        def candidates_for(i: int) -> Iterable[int]:
            return range(i + 1, count)

    tests = 0
    for i, zone in enumerate(prepared):
        if not zone.is_valid:
            continue
        for j in candidates_for(i):
            if j <= i or not prepared[j].is_valid or components.connected(i, j):
                continue
            tests += 1
            if is_adjacent(zone, prepared[j], tolerance_meters):
                components.union(i, j)

    groups = components.groups()
    logger.debug(f"{tests} adjacency tests grouped {count} zones into {len(groups)} groups")
    return groups
