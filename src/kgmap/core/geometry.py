"""Facility geometry variants and anchor-point resolution.

The backend returns GeoJSON geometries whose positions are (longitude,
latitude). This module turns them into a closed set of variants:

- Point: a single position
- Polygon: linear rings, outer ring first
- MultiPolygon: a sequence of polygons
- UnsupportedGeometry: anything else, including malformed input

Every consumer (anchor resolution, bounds, render classification) handles
all four variants explicitly. Parsing never raises.

Anchor points:
    A polygon's anchor is the first vertex of its outer ring. It is a cheap
    stand-in for a centroid: it lies on the shape's boundary, nothing more.
    Distance filtering and map links rely on exactly this point.
"""

import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Union

logger = logging.getLogger(__name__)

Position = tuple[float, ...]
Ring = tuple[Position, ...]


@dataclass(frozen=True)
class Point:
    """A single (lon, lat[, ...]) position.

    All numeric components are kept, so a Point with fewer than two
    components is representable and simply has no anchor.
    """

    coordinates: Position

    def to_geojson(self) -> dict[str, Any]:
        return {"type": "Point", "coordinates": list(self.coordinates)}


@dataclass(frozen=True)
class Polygon:
    rings: tuple[Ring, ...]

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "Polygon",
            "coordinates": [[list(p) for p in ring] for ring in self.rings],
        }


@dataclass(frozen=True)
class MultiPolygon:
    polygons: tuple[Polygon, ...]

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "MultiPolygon",
            "coordinates": [
                [[list(p) for p in ring] for ring in polygon.rings]
                for polygon in self.polygons
            ],
        }


@dataclass(frozen=True)
class UnsupportedGeometry:
    """Any geometry kind the pipeline does not draw or measure.

    Attributes:
        kind: The GeoJSON "type" that was seen, if any
    """

    kind: str | None = None

    def to_geojson(self) -> None:
        return None


Geometry = Union[Point, Polygon, MultiPolygon, UnsupportedGeometry]

GEOMETRY_VARIANTS = (Point, Polygon, MultiPolygon, UnsupportedGeometry)


# =============================================================================
# PARSING
# =============================================================================


class _Malformed(Exception):
    pass


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _parse_position(raw: Any) -> Position:
    if not isinstance(raw, (list, tuple)) or not all(_is_number(v) for v in raw):
        raise _Malformed(f"bad position {raw!r}")
    return tuple(float(v) for v in raw)


def _parse_ring(raw: Any) -> Ring:
    if not isinstance(raw, (list, tuple)):
        raise _Malformed(f"bad ring {raw!r}")
    return tuple(_parse_position(p) for p in raw)


def _parse_polygon(raw: Any) -> Polygon:
    if not isinstance(raw, (list, tuple)):
        raise _Malformed(f"bad polygon {raw!r}")
    return Polygon(rings=tuple(_parse_ring(r) for r in raw))


def parse_geometry(raw: Any) -> Geometry:
    """Build a geometry variant from a GeoJSON geometry object.

    Args:
        raw: A GeoJSON geometry dict, an already-parsed variant, or None

    Returns:
        The matching variant; UnsupportedGeometry for unknown kinds or
        malformed coordinates.
    """
    if isinstance(raw, GEOMETRY_VARIANTS):
        return raw
    if not isinstance(raw, dict):
        return UnsupportedGeometry()

    kind = raw.get("type")
    coords = raw.get("coordinates")
    try:
        if kind == "Point":
            if coords is None:
                return Point(coordinates=())
            return Point(coordinates=_parse_position(coords))
        if kind == "Polygon":
            return _parse_polygon(coords)
        if kind == "MultiPolygon":
            if not isinstance(coords, (list, tuple)):
                raise _Malformed(f"bad multipolygon {coords!r}")
            return MultiPolygon(polygons=tuple(_parse_polygon(p) for p in coords))
    except _Malformed as e:
        logger.debug("Malformed %s geometry: %s", kind, e)
        return UnsupportedGeometry(kind=kind if isinstance(kind, str) else None)

    return UnsupportedGeometry(kind=kind if isinstance(kind, str) else None)


# =============================================================================
# ANCHOR RESOLUTION
# =============================================================================


def _swap(position: Position) -> tuple[float, float] | None:
    if len(position) < 2:
        return None
    return (position[1], position[0])


def _outer_ring_start(polygon: Polygon) -> tuple[float, float] | None:
    if not polygon.rings or not polygon.rings[0]:
        return None
    return _swap(polygon.rings[0][0])


def resolve_anchor(geometry: Geometry | dict | None) -> tuple[float, float] | None:
    """Return the single representative (lat, lon) of a geometry.

    - Point: the point itself, swapped to (lat, lon)
    - Polygon: the first vertex of the outer ring
    - MultiPolygon: the first vertex of the first polygon's outer ring
    - anything else, or an empty ring: None

    Pure and deterministic.
    """
    geometry = parse_geometry(geometry)

    if isinstance(geometry, Point):
        return _swap(geometry.coordinates)
    if isinstance(geometry, Polygon):
        return _outer_ring_start(geometry)
    if isinstance(geometry, MultiPolygon):
        if not geometry.polygons:
            return None
        return _outer_ring_start(geometry.polygons[0])
    if isinstance(geometry, UnsupportedGeometry):
        return None
    raise TypeError(f"unhandled geometry variant {type(geometry).__name__}")


def iter_coordinates(geometry: Geometry | dict | None) -> Iterator[Position]:
    """Yield every (lon, lat) position reachable from a geometry.

    All rings and vertices of polygons are visited. Positions with fewer
    than two components are skipped.
    """
    geometry = parse_geometry(geometry)

    if isinstance(geometry, Point):
        positions: tuple[Position, ...] = (geometry.coordinates,)
    elif isinstance(geometry, Polygon):
        positions = tuple(p for ring in geometry.rings for p in ring)
    elif isinstance(geometry, MultiPolygon):
        positions = tuple(
            p for polygon in geometry.polygons for ring in polygon.rings for p in ring
        )
    elif isinstance(geometry, UnsupportedGeometry):
        positions = ()
    else:
        raise TypeError(f"unhandled geometry variant {type(geometry).__name__}")

    for position in positions:
        if len(position) >= 2:
            yield position


def geometry_kind(geometry: Geometry) -> str:
    """Return the GeoJSON type name of a variant ("Unsupported" if unknown)."""
    if isinstance(geometry, UnsupportedGeometry):
        return geometry.kind or "Unsupported"
    return type(geometry).__name__
