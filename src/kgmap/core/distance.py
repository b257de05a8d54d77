"""Great-circle distance and "near me" radius filtering.

Architecture Note:
    Uses the Haversine formula on a sphere of radius 6,371 km. This is
    plenty for "within X meters" checks inside a city and needs no road
    network data.

    Facilities are measured from their anchor point (see
    kgmap.core.geometry.resolve_anchor), so a large park counts as near
    when the first vertex of its outer ring is near.
"""

import math
from collections.abc import Iterable

from kgmap.config import clamp_radius
from kgmap.core.geometry import resolve_anchor
from kgmap.core.models import Facility

EARTH_RADIUS_M = 6_371_000.0

Origin = tuple[float, float]


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance between two points.

    Args:
        lat1, lon1: Coordinates of point 1 (degrees)
        lat2, lon2: Coordinates of point 2 (degrees)

    Returns:
        Distance in meters. Non-negative, symmetric in its two points and
        zero for identical points.
    """
    lat1_r, lon1_r = math.radians(lat1), math.radians(lon1)
    lat2_r, lon2_r = math.radians(lat2), math.radians(lon2)

    dlat = lat2_r - lat1_r
    dlon = lon2_r - lon1_r

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2
    )
    # rounding can push a just past 1 for antipodal points
    a = min(a, 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def filter_within_radius(
    facilities: Iterable[Facility], origin: Origin | None, radius_m: float
) -> tuple[Facility, ...]:
    """Keep the facilities whose anchor lies within ``radius_m`` of ``origin``.

    With no origin (proximity mode off) the collection passes through
    unchanged, anchor-less facilities included. Otherwise facilities without
    an anchor are dropped. Input order is preserved.
    """
    if origin is None:
        return tuple(facilities)

    lat, lon = origin
    kept = []
    for facility in facilities:
        anchor = resolve_anchor(facility.geometry)
        if anchor is None:
            continue
        if haversine_distance(lat, lon, anchor[0], anchor[1]) <= radius_m:
            kept.append(facility)
    return tuple(kept)


def nearest_first(
    facilities: Iterable[Facility], origin: Origin
) -> list[tuple[Facility, float]]:
    """Pair each anchored facility with its distance from origin, closest first."""
    lat, lon = origin
    ranked = []
    for facility in facilities:
        anchor = resolve_anchor(facility.geometry)
        if anchor is None:
            continue
        ranked.append((facility, haversine_distance(lat, lon, anchor[0], anchor[1])))
    ranked.sort(key=lambda pair: pair[1])
    return ranked


def format_radius(radius_m: float) -> str:
    """Human label for a radius: "500m", "1km", "2.5km"."""
    if radius_m < 1000:
        return f"{radius_m:g}m"
    return f"{radius_m / 1000:g}km"


__all__ = [
    "EARTH_RADIUS_M",
    "Origin",
    "clamp_radius",
    "filter_within_radius",
    "format_radius",
    "haversine_distance",
    "nearest_first",
]
