"""
Tests for the adjacency module.
"""

from unittest.mock import patch

import pytest

from geozones.zonemerge import constants
from geozones.zonemerge.adjacency import (
    PreparedZone,
    bearing,
    edges_share_segment,
    is_adjacent,
    meters_to_degrees,
    point_on_segment,
)
from geozones.zonemerge.models import BBox, MultiPolygonGeometry, PolygonGeometry, Zone

# A tolerance whose degree equivalent is exactly 2**-10, so gap arithmetic
# in the boundary tests is exact.
EXACT_TOLERANCE_METERS = constants.METERS_PER_DEGREE * 2**-10
EXACT_TOLERANCE_DEGREES = 2**-10


def square(x, y, size=1.0):
    return ((x, y), (x + size, y), (x + size, y + size), (x, y + size), (x, y))


def zone(zone_id, *rings):
    return Zone(zone_id, zone_id.upper(), PolygonGeometry(tuple(rings)))


def unit(zone_id, x, y):
    return zone(zone_id, square(float(x), float(y)))


class TestSharedBorders:
    """Test suite for zones that touch."""

    def test_shared_edge_is_adjacent(self):
        assert is_adjacent(unit("a", 0, 0), unit("b", 1, 0))

    def test_corner_touch_is_not_adjacent(self):
        assert not is_adjacent(unit("a", 0, 0), unit("b", 1, 1))

    def test_corner_touch_is_not_adjacent_even_with_tolerance(self):
        assert not is_adjacent(unit("a", 0, 0), unit("b", 1, 1), 1000.0)

    def test_partially_shared_edge_is_adjacent(self):
        tall = zone("b", ((1.0, 0.5), (2.0, 0.5), (2.0, 1.5), (1.0, 1.5), (1.0, 0.5)))
        assert is_adjacent(unit("a", 0, 0), tall)

    def test_edge_split_by_extra_vertex_is_adjacent(self):
        split = zone(
            "b", ((1.0, 0.0), (2.0, 0.0), (2.0, 1.0), (1.0, 1.0), (1.0, 0.5), (1.0, 0.0))
        )
        assert is_adjacent(unit("a", 0, 0), split)

    def test_overlapping_zones_are_adjacent(self):
        shifted = zone("b", square(0.5, 0.5))
        assert is_adjacent(unit("a", 0, 0), shifted)

    def test_contained_zone_is_adjacent(self):
        inner = zone("b", square(0.25, 0.25, 0.5))
        outer = zone("a", square(0.0, 0.0, 2.0))
        assert is_adjacent(outer, inner)

    def test_zone_filling_a_hole_is_adjacent(self):
        donut = zone("a", square(0.0, 0.0, 3.0), square(1.0, 1.0))
        plug = zone("b", square(1.0, 1.0))
        assert is_adjacent(donut, plug)

    def test_zone_inside_a_hole_is_not_adjacent(self):
        donut = zone("a", square(0.0, 0.0, 3.0), square(1.0, 1.0))
        island = zone("b", square(1.25, 1.25, 0.5))
        assert not is_adjacent(donut, island)

    def test_multipolygon_member_shares_edge(self):
        archipelago = Zone(
            "a",
            "A",
            MultiPolygonGeometry(
                (PolygonGeometry((square(0.0, 0.0),)), PolygonGeometry((square(5.0, 0.0),)))
            ),
        )
        assert is_adjacent(archipelago, unit("b", 6, 0))
        assert not is_adjacent(archipelago, unit("c", 3, 3))


class TestTolerance:
    """Test suite for gaps between zones."""

    def gap_pair(self, gap):
        return unit("a", 0, 0), zone("b", square(1.0 + gap, 0.0))

    def test_gap_equal_to_tolerance_is_adjacent(self):
        a, b = self.gap_pair(EXACT_TOLERANCE_DEGREES)
        assert is_adjacent(a, b, EXACT_TOLERANCE_METERS)

    def test_gap_just_over_tolerance_is_not_adjacent(self):
        a, b = self.gap_pair(EXACT_TOLERANCE_DEGREES + 2**-20)
        assert not is_adjacent(a, b, EXACT_TOLERANCE_METERS)

    def test_gap_under_tolerance_is_adjacent(self):
        a, b = self.gap_pair(EXACT_TOLERANCE_DEGREES / 2)
        assert is_adjacent(a, b, EXACT_TOLERANCE_METERS)

    def test_boundary_is_monotonic(self):
        a = unit("a", 0, 0)
        results = [
            is_adjacent(a, zone("b", square(1.0 + k * 2**-12, 0.0)), EXACT_TOLERANCE_METERS)
            for k in range(1, 9)
        ]
        assert results == [True, True, True, True, False, False, False, False]

    def test_zero_tolerance_rejects_any_gap(self):
        a, b = self.gap_pair(2**-30)
        assert not is_adjacent(a, b, 0)

    def test_zero_tolerance_keeps_shared_edges(self):
        assert is_adjacent(unit("a", 0, 0), unit("b", 1, 0), 0)

    def test_default_tolerance_is_a_tenth_of_a_meter(self):
        close = zone("b", square(1.0 + meters_to_degrees(0.05), 0.0))
        far = zone("c", square(1.0 + meters_to_degrees(0.2), 0.0))
        assert is_adjacent(unit("a", 0, 0), close)
        assert not is_adjacent(unit("a", 0, 0), far)

    def test_far_apart_zones(self):
        assert not is_adjacent(unit("a", 0, 0), unit("b", 5, 0), 100.0)

    def test_meters_to_degrees(self):
        assert meters_to_degrees(constants.METERS_PER_DEGREE) == 1.0
        assert meters_to_degrees(0) == 0


class TestSymmetry:
    """is_adjacent(a, b) must always equal is_adjacent(b, a)."""

    @pytest.mark.parametrize(
        "first, second",
        [
            (square(0.0, 0.0), square(1.0, 0.0)),
            (square(0.0, 0.0), square(1.0, 1.0)),
            (square(0.0, 0.0), square(0.5, 0.5)),
            (square(0.0, 0.0), square(1.0 + 2**-11, 0.0)),
            (square(0.0, 0.0), square(1.0 + 2**-9, 0.0)),
            (square(0.0, 0.0), ((1.0, 0.5), (2.0, 0.5), (2.0, 1.5), (1.0, 1.5), (1.0, 0.5))),
            (square(0.0, 0.0, 4.0), square(4.0, 3.5, 2.0)),
            (square(0.0, 0.0), square(3.0, 3.0)),
        ],
    )
    def test_symmetric(self, first, second):
        a, b = zone("a", first), zone("b", second)
        assert is_adjacent(a, b, EXACT_TOLERANCE_METERS) == is_adjacent(
            b, a, EXACT_TOLERANCE_METERS
        )


class TestFailureHandling:
    """The detector never raises."""

    def test_invalid_geometry_is_not_adjacent(self):
        broken = zone("b", ((1.0, 0.0), (2.0, 0.0), (1.0, 0.0)))
        assert not is_adjacent(unit("a", 0, 0), broken)
        assert not is_adjacent(broken, unit("a", 0, 0))

    def test_empty_polygon_is_not_adjacent(self):
        assert not is_adjacent(unit("a", 0, 0), Zone("b", "B", PolygonGeometry(())))

    def test_short_hole_is_not_adjacent(self):
        holed = zone("a", square(0.0, 0.0, 3.0), ((1.0, 1.0), (2.0, 1.0)))
        assert not is_adjacent(holed, unit("b", 3, 0))

    def test_errors_are_swallowed(self):
        with patch(
            "geozones.zonemerge.adjacency._prepared_adjacent",
            side_effect=RuntimeError("boom"),
        ):
            assert not is_adjacent(unit("a", 0, 0), unit("b", 1, 0))

    def test_non_zone_input_is_not_adjacent(self):
        assert not is_adjacent(None, unit("b", 1, 0))


class TestPreparedZone:
    def test_supplied_bbox_is_used(self):
        supplied = BBox(-1.0, -1.0, 2.0, 2.0)
        prepared = PreparedZone(
            Zone("a", "A", PolygonGeometry((square(0.0, 0.0),)), bbox=supplied)
        )
        assert prepared.bbox == supplied

    @pytest.mark.parametrize("supplied", [(0, 0, 1, 1), [0.0, 0.0, 1.0, 1.0]])
    def test_sequence_bbox_is_converted(self, supplied):
        prepared = PreparedZone(
            Zone("a", "A", PolygonGeometry((square(0.0, 0.0),)), bbox=supplied)
        )
        assert prepared.bbox == BBox(0.0, 0.0, 1.0, 1.0)
        assert isinstance(prepared.bbox, BBox)

    @pytest.mark.parametrize("supplied", [(0, 0, 1), ("a", "b", "c", "d"), (1, 0, 0, 1), "0011"])
    def test_malformed_bbox_is_recomputed(self, supplied):
        prepared = PreparedZone(
            Zone("a", "A", PolygonGeometry((square(2.0, 3.0),)), bbox=supplied)
        )
        assert prepared.bbox == BBox(2.0, 3.0, 3.0, 4.0)

    def test_tuple_bboxes_still_adjacent(self):
        a = Zone("a", "A", PolygonGeometry((square(0.0, 0.0),)), bbox=(0, 0, 1, 1))
        b = Zone("b", "B", PolygonGeometry((square(1.0, 0.0),)), bbox=(1, 0, 2, 1))
        assert is_adjacent(a, b)
        assert is_adjacent(b, a)

    def test_bbox_is_computed_when_missing(self):
        prepared = PreparedZone(unit("a", 2, 3))
        assert prepared.bbox == BBox(2.0, 3.0, 3.0, 4.0)

    def test_invalid_zone_has_no_bbox(self):
        prepared = PreparedZone(Zone("a", "A", PolygonGeometry(())))
        assert not prepared.is_valid
        assert prepared.bbox is None

    def test_zone_is_not_modified(self):
        original = unit("a", 0, 0)
        PreparedZone(original).shape
        assert original.bbox is None

    def test_prepared_zones_are_accepted(self):
        assert is_adjacent(PreparedZone(unit("a", 0, 0)), unit("b", 1, 0))


class TestEdgesShareSegment:
    """Test suite for the edge overlap test."""

    def test_identical_edges(self):
        assert edges_share_segment(((0, 0), (1, 0)), ((0, 0), (1, 0)))

    def test_reversed_edges(self):
        assert edges_share_segment(((0, 0), (1, 0)), ((1, 0), (0, 0)))

    def test_degenerate_edge(self):
        assert not edges_share_segment(((0, 0), (0, 0)), ((0, 0), (1, 0)))

    def test_perpendicular_edges(self):
        assert not edges_share_segment(((0, 0), (1, 0)), ((0, 0), (0, 1)))

    def test_collinear_edges_pointing_apart(self):
        assert not edges_share_segment(((0, 0), (1, 0)), ((1, 0), (2, 0)))

    def test_collinear_edges_pointing_apart_reversed(self):
        assert not edges_share_segment(((1, 0), (0, 0)), ((2, 0), (1, 0)))

    def test_edge_contained_in_another(self):
        assert edges_share_segment(((0, 0), (2, 0)), ((0.5, 0), (1.5, 0)))

    def test_edges_sharing_an_endpoint_and_direction(self):
        assert edges_share_segment(((0, 0), (2, 0)), ((0, 0), (1, 0)))

    def test_partial_overlap(self):
        assert edges_share_segment(((0, 0), (2, 0)), ((1, 0), (3, 0)))

    def test_collinear_but_separate(self):
        assert not edges_share_segment(((0, 0), (1, 0)), ((2, 0), (3, 0)))

    def test_parallel_offset(self):
        assert not edges_share_segment(((0, 0), (1, 0)), ((0, 1), (1, 1)))

    def test_diagonal_overlap(self):
        assert edges_share_segment(((0, 0), (2, 2)), ((1, 1), (3, 3)))

    def test_collinear_edges_a_hair_apart(self):
        a, b = ((0.0, 0.0), (1.0, 0.0)), ((1.0 + 5e-11, 0.0), (2.0, 0.0))
        assert not edges_share_segment(a, b)
        assert not edges_share_segment(b, a)

    def test_collinear_edges_overlapping_by_a_hair(self):
        a, b = ((0.0, 0.0), (1.0, 0.0)), ((1.0 - 1e-12, 0.0), (2.0, 0.0))
        assert not edges_share_segment(a, b)
        assert not edges_share_segment(b, a)


class TestOpenRings:
    """Rings given without a repeated first point."""

    def test_closing_edge_counts_as_shared(self):
        east = zone("a", ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)))
        west = zone("b", ((-1.0, 0.0), (0.0, 0.0), (0.0, 1.0), (-1.0, 1.0)))
        assert is_adjacent(east, west)
        assert is_adjacent(west, east)

    def test_prepared_edges_include_closing_edge(self):
        prepared = PreparedZone(zone("a", ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0))))
        assert len(prepared.edges) == 4
        assert ((0.0, 1.0), (0.0, 0.0)) in prepared.edges


class TestHelpers:
    @pytest.mark.parametrize(
        "end, expected",
        [((0, 1), 0.0), ((1, 0), 90.0), ((0, -1), 180.0), ((-1, 0), 270.0)],
    )
    def test_bearing(self, end, expected):
        assert bearing((0, 0), end) == pytest.approx(expected)

    def test_point_on_segment(self):
        assert point_on_segment((0.5, 0), (0, 0), (1, 0))
        assert point_on_segment((1, 0), (0, 0), (1, 0))
        assert not point_on_segment((1.5, 0), (0, 0), (1, 0))
        assert not point_on_segment((0.5, 0.1), (0, 0), (1, 0))

    def test_point_on_zero_length_segment(self):
        assert point_on_segment((1, 1), (1, 1), (1, 1))
        assert not point_on_segment((1, 2), (1, 1), (1, 1))
