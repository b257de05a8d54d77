"""Tests for kgmap.core.bounds."""

import pytest

from kgmap.config import DEFAULT_CENTER, DEFAULT_ZOOM, FIT_MAX_ZOOM, FIT_PADDING
from kgmap.core.bounds import BoundingExtent, Viewport, compute_bounds, frame_viewport
from kgmap.core.models import Facility


def _facilities(*features):
    return [Facility.from_feature(f) for f in features]


class TestComputeBounds:
    """Test extent aggregation."""

    def test_single_point_is_degenerate_extent(self, make_feature, point):
        extent = compute_bounds(_facilities(make_feature(geometry=point(-6.27, 53.34))))
        assert extent == BoundingExtent(53.34, -6.27, 53.34, -6.27)
        assert extent.is_valid

    def test_points_and_polygon(self, make_feature, point, park_polygon):
        extent = compute_bounds(
            _facilities(
                make_feature(geometry=point(-6.27, 53.34)),
                make_feature("Park", park_polygon),
            )
        )
        assert extent.min_lat == 53.34
        assert extent.max_lat == 53.351
        assert extent.min_lon == -6.27
        assert extent.max_lon == -6.259

    def test_every_ring_vertex_counts(self, make_feature):
        outer = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 0.0]]
        inner = [[0.2, 0.2], [0.3, 0.2], [0.2, 0.2]]
        far = [[5.0, -5.0], [6.0, -5.0], [5.0, -5.0]]
        geom = {"type": "MultiPolygon", "coordinates": [[outer, inner], [far]]}
        extent = compute_bounds(_facilities(make_feature("Park", geom)))
        assert extent.to_corners() == [[-5.0, 0.0], [1.0, 6.0]]

    def test_contains_every_anchor(self, make_feature, point, park_polygon):
        from kgmap.core.geometry import resolve_anchor

        facilities = _facilities(
            make_feature(geometry=point(-6.25, 53.36)),
            make_feature(geometry=point(-6.30, 53.33)),
            make_feature("Park", park_polygon),
        )
        extent = compute_bounds(facilities)
        for facility in facilities:
            lat, lon = resolve_anchor(facility.geometry)
            assert extent.min_lat <= lat <= extent.max_lat
            assert extent.min_lon <= lon <= extent.max_lon

    def test_skipped_facilities_still_count(self, make_feature, point):
        # a Park Point is not drawn but still extends the extent
        extent = compute_bounds(_facilities(make_feature("Park", point(10.0, 20.0))))
        assert extent.center == (20.0, 10.0)

    @pytest.mark.parametrize(
        "geometry",
        [None, {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}, {"type": "Point"}],
    )
    def test_no_coordinates_is_invalid(self, make_feature, geometry):
        extent = compute_bounds(_facilities(make_feature(geometry=geometry)))
        assert extent == BoundingExtent.invalid()
        assert not extent.is_valid

    def test_empty_input_is_invalid(self):
        assert compute_bounds([]) == BoundingExtent.invalid()


class TestBoundingExtent:
    def test_invalid_has_no_center_or_corners(self):
        extent = BoundingExtent.invalid()
        assert extent.center is None
        assert extent.to_corners() is None
        assert extent.to_dict() == {"valid": False}

    def test_to_dict(self):
        extent = BoundingExtent(1.0, 2.0, 3.0, 4.0)
        assert extent.to_dict() == {
            "valid": True,
            "south": 1.0,
            "west": 2.0,
            "north": 3.0,
            "east": 4.0,
        }


class TestFrameViewport:
    """Test viewport framing."""

    def test_valid_extent_fits(self):
        extent = BoundingExtent(53.34, -6.27, 53.351, -6.259)
        viewport = frame_viewport(extent)
        assert viewport.mode == "fit"
        assert viewport.bounds == extent
        assert viewport.padding == FIT_PADDING == (50, 50)
        assert viewport.max_zoom == FIT_MAX_ZOOM == 16

    def test_invalid_extent_resets(self):
        viewport = frame_viewport(BoundingExtent.invalid())
        assert viewport.mode == "reset"
        assert viewport.center == DEFAULT_CENTER == (53.3498, -6.2603)
        assert viewport.zoom == DEFAULT_ZOOM == 12

    def test_fit_dict(self):
        viewport = frame_viewport(BoundingExtent(1.0, 2.0, 3.0, 4.0))
        assert viewport.to_dict() == {
            "mode": "fit",
            "bounds": [[1.0, 2.0], [3.0, 4.0]],
            "padding": [50, 50],
            "maxZoom": 16,
        }

    def test_reset_dict(self):
        assert Viewport(mode="reset").to_dict() == {
            "mode": "reset",
            "center": [53.3498, -6.2603],
            "zoom": 12,
        }
