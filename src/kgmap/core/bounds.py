"""Bounding extent and auto-framing of the map viewport.

The viewport is reframed every time the visible facility set changes:
fit to the extent of everything visible, or fall back to the default
Dublin view when nothing has a usable coordinate.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from kgmap.config import DEFAULT_CENTER, DEFAULT_ZOOM, FIT_MAX_ZOOM, FIT_PADDING
from kgmap.core.geometry import iter_coordinates
from kgmap.core.models import Facility


@dataclass(frozen=True)
class BoundingExtent:
    """Min/max latitude and longitude over a set of coordinates.

    An extent built from zero coordinates is the explicit invalid marker
    (``BoundingExtent.invalid()``); its numeric fields carry no meaning.
    """

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float
    is_valid: bool = True

    @classmethod
    def invalid(cls) -> "BoundingExtent":
        return cls(0.0, 0.0, 0.0, 0.0, is_valid=False)

    @property
    def center(self) -> tuple[float, float] | None:
        if not self.is_valid:
            return None
        return ((self.min_lat + self.max_lat) / 2, (self.min_lon + self.max_lon) / 2)

    def to_corners(self) -> list[list[float]] | None:
        """Return [[south, west], [north, east]] or None when invalid."""
        if not self.is_valid:
            return None
        return [[self.min_lat, self.min_lon], [self.max_lat, self.max_lon]]

    def to_dict(self) -> dict[str, Any]:
        if not self.is_valid:
            return {"valid": False}
        return {
            "valid": True,
            "south": self.min_lat,
            "west": self.min_lon,
            "north": self.max_lat,
            "east": self.max_lon,
        }


def compute_bounds(facilities: Iterable[Facility]) -> BoundingExtent:
    """Aggregate every coordinate of every facility into one extent.

    Polygons contribute all vertices of all rings; points contribute their
    single position. Unsupported geometry contributes nothing. Returns the
    invalid extent when no coordinate is found.
    """
    min_lat = min_lon = math.inf
    max_lat = max_lon = -math.inf
    found = False

    for facility in facilities:
        for position in iter_coordinates(facility.geometry):
            lon, lat = position[0], position[1]
            min_lat = min(min_lat, lat)
            max_lat = max(max_lat, lat)
            min_lon = min(min_lon, lon)
            max_lon = max(max_lon, lon)
            found = True

    if not found:
        return BoundingExtent.invalid()
    return BoundingExtent(min_lat, min_lon, max_lat, max_lon)


@dataclass(frozen=True)
class Viewport:
    """How the map should be framed.

    mode "fit": contain ``bounds`` with ``padding`` pixels, never zooming
    past ``max_zoom``.
    mode "reset": show ``center`` at ``zoom``.
    """

    mode: str
    bounds: BoundingExtent | None = None
    padding: tuple[int, int] = FIT_PADDING
    max_zoom: int = FIT_MAX_ZOOM
    center: tuple[float, float] = DEFAULT_CENTER
    zoom: int = DEFAULT_ZOOM

    def to_dict(self) -> dict[str, Any]:
        if self.mode == "fit" and self.bounds is not None:
            return {
                "mode": "fit",
                "bounds": self.bounds.to_corners(),
                "padding": list(self.padding),
                "maxZoom": self.max_zoom,
            }
        return {"mode": "reset", "center": list(self.center), "zoom": self.zoom}


def frame_viewport(extent: BoundingExtent) -> Viewport:
    """Fit a valid extent; reset to the default view otherwise."""
    if extent.is_valid:
        return Viewport(mode="fit", bounds=extent)
    return Viewport(mode="reset")
