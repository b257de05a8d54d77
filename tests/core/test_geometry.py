"""Tests for kgmap.core.geometry.

Tests cover:
- Parsing GeoJSON into geometry variants
- Anchor resolution for every variant
- Coordinate iteration used by bounds
"""

import pytest

from kgmap.core.geometry import (
    MultiPolygon,
    Point,
    Polygon,
    UnsupportedGeometry,
    geometry_kind,
    iter_coordinates,
    parse_geometry,
    resolve_anchor,
)

RING = [
    [-6.26, 53.35],
    [-6.259, 53.35],
    [-6.259, 53.351],
    [-6.26, 53.351],
    [-6.26, 53.35],
]


class TestParseGeometry:
    """Test building variants from GeoJSON."""

    def test_point(self):
        geom = parse_geometry({"type": "Point", "coordinates": [-6.27, 53.34]})
        assert geom == Point(coordinates=(-6.27, 53.34))

    def test_point_keeps_extra_components(self):
        geom = parse_geometry({"type": "Point", "coordinates": [-6.27, 53.34, 12.0]})
        assert geom.coordinates == (-6.27, 53.34, 12.0)

    def test_point_without_coordinates_is_still_a_point(self):
        assert parse_geometry({"type": "Point"}) == Point(coordinates=())

    def test_polygon(self):
        geom = parse_geometry({"type": "Polygon", "coordinates": [RING]})
        assert isinstance(geom, Polygon)
        assert len(geom.rings) == 1
        assert geom.rings[0][0] == (-6.26, 53.35)

    def test_multipolygon(self):
        geom = parse_geometry({"type": "MultiPolygon", "coordinates": [[RING], [RING]]})
        assert isinstance(geom, MultiPolygon)
        assert len(geom.polygons) == 2

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "Point",
            {},
            {"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
            {"type": "Polygon", "coordinates": None},
            {"type": "Polygon", "coordinates": [[["a", "b"]]]},
            {"type": "Point", "coordinates": [True, 1.0]},
            {"type": "Point", "coordinates": [float("nan"), 1.0]},
            {"type": "MultiPolygon", "coordinates": "oops"},
        ],
    )
    def test_unsupported_or_malformed(self, raw):
        assert isinstance(parse_geometry(raw), UnsupportedGeometry)

    def test_unsupported_remembers_kind(self):
        geom = parse_geometry({"type": "LineString", "coordinates": []})
        assert geom.kind == "LineString"
        assert geometry_kind(geom) == "LineString"

    def test_parsed_variant_passes_through(self):
        geom = Point(coordinates=(1.0, 2.0))
        assert parse_geometry(geom) is geom

    def test_to_geojson_roundtrip_shape(self):
        raw = {"type": "Polygon", "coordinates": [RING]}
        assert parse_geometry(raw).to_geojson() == raw


class TestResolveAnchor:
    """Test the anchor-point rule."""

    @pytest.mark.parametrize(
        "lon,lat", [(-6.27, 53.34), (0.0, 0.0), (179.9, -89.5), (-180.0, 90.0)]
    )
    def test_point_is_swapped(self, lon, lat):
        assert resolve_anchor({"type": "Point", "coordinates": [lon, lat]}) == (lat, lon)

    def test_polygon_uses_first_outer_vertex(self):
        assert resolve_anchor({"type": "Polygon", "coordinates": [RING]}) == (
            53.35,
            -6.26,
        )

    def test_polygon_anchor_is_not_a_centroid(self):
        square = [[0.0, 0.0], [2.0, 0.0], [2.0, 2.0], [0.0, 2.0], [0.0, 0.0]]
        anchor = resolve_anchor({"type": "Polygon", "coordinates": [square]})
        assert anchor == (0.0, 0.0)
        assert anchor != (1.0, 1.0)

    def test_polygon_ignores_inner_rings(self):
        hole = [[-6.2595, 53.3505], [-6.2593, 53.3505], [-6.2595, 53.3505]]
        geom = {"type": "Polygon", "coordinates": [RING, hole]}
        assert resolve_anchor(geom) == (53.35, -6.26)

    def test_multipolygon_uses_first_polygon(self):
        other = [[10.0, 50.0], [11.0, 50.0], [10.0, 50.0]]
        geom = {"type": "MultiPolygon", "coordinates": [[other], [RING]]}
        assert resolve_anchor(geom) == (50.0, 10.0)

    @pytest.mark.parametrize(
        "raw",
        [
            {"type": "Polygon", "coordinates": []},
            {"type": "Polygon", "coordinates": [[]]},
            {"type": "MultiPolygon", "coordinates": []},
            {"type": "MultiPolygon", "coordinates": [[]]},
            {"type": "MultiPolygon", "coordinates": [[[]]]},
            {"type": "Point", "coordinates": [1.0]},
            {"type": "GeometryCollection", "geometries": []},
            None,
        ],
    )
    def test_none_when_unresolvable(self, raw):
        assert resolve_anchor(raw) is None

    def test_deterministic(self):
        raw = {"type": "MultiPolygon", "coordinates": [[RING]]}
        assert resolve_anchor(raw) == resolve_anchor(raw)


class TestIterCoordinates:
    """Test coordinate iteration."""

    def test_point_yields_single_position(self):
        assert list(iter_coordinates(Point(coordinates=(1.0, 2.0)))) == [(1.0, 2.0)]

    def test_polygon_yields_all_rings(self):
        inner = [[-6.2595, 53.3505], [-6.2593, 53.3506]]
        coords = list(iter_coordinates({"type": "Polygon", "coordinates": [RING, inner]}))
        assert len(coords) == len(RING) + len(inner)

    def test_multipolygon_yields_every_vertex(self):
        geom = {"type": "MultiPolygon", "coordinates": [[RING], [RING]]}
        assert len(list(iter_coordinates(geom))) == 2 * len(RING)

    def test_short_positions_skipped(self):
        assert list(iter_coordinates(Point(coordinates=(1.0,)))) == []

    def test_unsupported_yields_nothing(self):
        assert list(iter_coordinates(UnsupportedGeometry("LineString"))) == []
