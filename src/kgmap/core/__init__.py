"""kgmap Core - the geospatial pipeline behind the facility map.

This package contains:
- Geometry variants and anchor-point resolution
- Haversine distance and radius filtering
- Bounding extent and viewport framing
- Render classification and layer descriptors
- Response models and the explorer state store

Nothing here performs I/O; the fetch client and surfaces live one level up.
"""

from kgmap.core.bounds import BoundingExtent, Viewport, compute_bounds, frame_viewport
from kgmap.core.distance import filter_within_radius, haversine_distance
from kgmap.core.geometry import (
    MultiPolygon,
    Point,
    Polygon,
    UnsupportedGeometry,
    parse_geometry,
    resolve_anchor,
)
from kgmap.core.models import Facility, FeatureCollection
from kgmap.core.render import IconFactory, RenderMode, build_layers, classify

__all__ = [
    "BoundingExtent",
    "Facility",
    "FeatureCollection",
    "IconFactory",
    "MultiPolygon",
    "Point",
    "Polygon",
    "RenderMode",
    "UnsupportedGeometry",
    "Viewport",
    "build_layers",
    "classify",
    "compute_bounds",
    "filter_within_radius",
    "frame_viewport",
    "haversine_distance",
    "parse_geometry",
    "resolve_anchor",
]
