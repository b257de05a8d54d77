"""Tests for kgmap.core.distance.

Tests cover:
- Haversine distance properties
- Radius filtering with and without an origin
- Ranking and radius labels
"""

import pytest

from kgmap.core.distance import (
    EARTH_RADIUS_M,
    filter_within_radius,
    format_radius,
    haversine_distance,
    nearest_first,
)
from kgmap.core.models import Facility

ORIGIN = (53.3498, -6.2603)


@pytest.fixture
def dublin_facilities(make_feature, point, park_polygon):
    """A ~33 m away, B ~1 km away, C unanchored, D a park polygon."""
    return [
        Facility.from_feature(make_feature("Library", point(-6.2608, 53.3498), "A")),
        Facility.from_feature(make_feature("Toilet", point(-6.2603, 53.3588), "B")),
        Facility.from_feature(make_feature("Toilet", None, "C")),
        Facility.from_feature(make_feature("Park", park_polygon, "D")),
    ]


class TestHaversineDistance:
    """Test great-circle distance."""

    def test_identical_points_are_zero(self):
        assert haversine_distance(*ORIGIN, *ORIGIN) == 0.0

    def test_symmetric(self):
        a = (53.3498, -6.2603)
        b = (51.8985, -8.4756)
        assert haversine_distance(*a, *b) == pytest.approx(haversine_distance(*b, *a))

    def test_non_negative(self):
        assert haversine_distance(10.0, 20.0, -10.0, -20.0) > 0

    def test_one_degree_of_latitude(self):
        expected = EARTH_RADIUS_M * 3.141592653589793 / 180
        assert haversine_distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(expected)

    def test_dublin_to_cork(self):
        # roughly 220 km as the crow flies
        d = haversine_distance(53.3498, -6.2603, 51.8985, -8.4756)
        assert 215_000 < d < 225_000

    def test_antipodal_points(self):
        d = haversine_distance(0.0, 0.0, 0.0, 180.0)
        assert d == pytest.approx(EARTH_RADIUS_M * 3.141592653589793)

    def test_short_longitude_offset(self):
        d = haversine_distance(53.3498, -6.2603, 53.3498, -6.2608)
        assert 30 < d < 40


class TestFilterWithinRadius:
    """Test proximity filtering."""

    def test_no_origin_is_identity(self, dublin_facilities):
        result = filter_within_radius(dublin_facilities, None, 100)
        assert result == tuple(dublin_facilities)

    def test_small_radius_keeps_only_close_point(self, dublin_facilities):
        result = filter_within_radius(dublin_facilities, ORIGIN, 100)
        assert [f.name for f in result] == ["A", "D"]

    def test_wider_radius_keeps_order(self, dublin_facilities):
        result = filter_within_radius(dublin_facilities, ORIGIN, 1500)
        assert [f.name for f in result] == ["A", "B", "D"]

    def test_points_only_scenario(self, make_feature, point):
        facilities = [
            Facility.from_feature(make_feature("Library", point(-6.2608, 53.3498), "A")),
            Facility.from_feature(make_feature("Toilet", point(-6.2603, 53.3588), "B")),
        ]
        assert [f.name for f in filter_within_radius(facilities, ORIGIN, 100)] == ["A"]
        assert [f.name for f in filter_within_radius(facilities, ORIGIN, 1500)] == [
            "A",
            "B",
        ]

    def test_unanchored_dropped_when_origin_set(self, dublin_facilities):
        result = filter_within_radius(dublin_facilities, ORIGIN, 10_000_000)
        assert "C" not in [f.name for f in result]

    def test_boundary_distance_is_inclusive(self, make_feature, point):
        facility = Facility.from_feature(make_feature("Library", point(-6.2608, 53.3498)))
        exact = haversine_distance(*ORIGIN, 53.3498, -6.2608)
        assert filter_within_radius([facility], ORIGIN, exact) == (facility,)

    def test_monotonic_in_radius(self, dublin_facilities):
        small = filter_within_radius(dublin_facilities, ORIGIN, 100)
        large = filter_within_radius(dublin_facilities, ORIGIN, 1500)
        assert set(small) <= set(large)

    def test_empty_input(self):
        assert filter_within_radius([], ORIGIN, 1000) == ()

    def test_polygon_measured_from_first_vertex(self, make_feature):
        # first vertex far away, rest of the ring at the origin
        ring = [[-8.0, 52.0], [-6.2603, 53.3498], [-6.2602, 53.3498], [-8.0, 52.0]]
        facility = Facility.from_feature(
            make_feature("Park", {"type": "Polygon", "coordinates": [ring]})
        )
        assert filter_within_radius([facility], ORIGIN, 5000) == ()


class TestNearestFirst:
    """Test distance ranking."""

    def test_sorted_by_distance(self, dublin_facilities):
        ranked = nearest_first(dublin_facilities, ORIGIN)
        distances = [d for _, d in ranked]
        assert distances == sorted(distances)
        # the park anchor (first ring vertex) is ~30 m away, the library ~33 m
        assert [f.name for f, _ in ranked] == ["D", "A", "B"]

    def test_skips_unanchored(self, dublin_facilities):
        names = [f.name for f, _ in nearest_first(dublin_facilities, ORIGIN)]
        assert "C" not in names


class TestFormatRadius:
    @pytest.mark.parametrize(
        "radius,label",
        [(100, "100m"), (500, "500m"), (1000, "1km"), (2500, "2.5km"), (5000, "5km")],
    )
    def test_labels(self, radius, label):
        assert format_radius(radius) == label
