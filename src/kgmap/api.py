"""kgmap Python API for scripts and notebooks.

The four pipeline functions accept plain GeoJSON as well as parsed
models, so a FeatureCollection loaded with ``json.load`` can be passed
straight in:

    from kgmap import filter_within_radius, compute_bounds, classify

    near = filter_within_radius(collection, origin=(53.3498, -6.2603), radius_m=500)
    extent = compute_bounds(near)
    modes = [classify(f) for f in near]

Backend helpers go through a shared ExplorerClient and return native Python
types (models, dicts, pd.DataFrame):

    from kgmap import search_facilities, facilities_frame
    df = facilities_frame(search_facilities(area="dublin-city"))

Backend helpers raise FetchError on failure; the pipeline functions never
raise.
"""

from typing import Any

import pandas as pd

from kgmap.client import ExplorerClient
from kgmap.config import get_default_radius
from kgmap.core import bounds as _bounds
from kgmap.core import distance as _distance
from kgmap.core import render as _render
from kgmap.core.exceptions import FetchError, GeolocationError, KGMapError
from kgmap.core.geometry import geometry_kind, resolve_anchor
from kgmap.core.models import (
    Area,
    AreaStats,
    DistributionInsight,
    Facility,
    FacilityType,
    FeatureCollection,
    as_facilities,
)

__all__ = [
    "FetchError",
    "GeolocationError",
    "KGMapError",
    "area_stats",
    "build_map_view",
    "classify",
    "compute_bounds",
    "coverage_insights",
    "distribution_frame",
    "facilities_frame",
    "filter_within_radius",
    "get_client",
    "haversine_distance",
    "list_areas",
    "list_facility_types",
    "resolve_anchor",
    "search_facilities",
    "set_client",
]

haversine_distance = _distance.haversine_distance

_client: ExplorerClient | None = None


def get_client() -> ExplorerClient:
    """Return the shared client, creating it from configuration on first use."""
    global _client
    if _client is None:
        _client = ExplorerClient()
    return _client


def set_client(client: ExplorerClient | None) -> None:
    """Replace the shared client (None resets to configuration on next use)."""
    global _client
    _client = client


# =============================================================================
# Geometry pipeline
# =============================================================================


def filter_within_radius(
    facilities: Any,
    origin: tuple[float, float] | None,
    radius_m: float | None = None,
) -> tuple[Facility, ...]:
    """Facilities within ``radius_m`` (default: configured radius) of origin.

    ``origin=None`` returns every facility unfiltered.
    """
    if radius_m is None:
        radius_m = get_default_radius()
    return _distance.filter_within_radius(as_facilities(facilities), origin, radius_m)


def compute_bounds(facilities: Any) -> _bounds.BoundingExtent:
    return _bounds.compute_bounds(as_facilities(facilities))


def classify(facility: Facility | dict[str, Any]) -> _render.RenderMode:
    if not isinstance(facility, Facility):
        facility = Facility.from_feature(facility)
    return _render.classify(facility)


def build_map_view(
    facilities: Any,
    origin: tuple[float, float] | None = None,
    radius_m: float | None = None,
    icon_factory: _render.IconFactory | None = None,
) -> dict[str, Any]:
    """Derive the full map view: visible facilities, viewport and layers.

    Returns:
        dict with:
            - facilities: list[dict] - visible GeoJSON features
            - count: int - number visible
            - total: int - number before proximity filtering
            - viewport: dict - fit/reset framing
            - bounds: dict - extent of the visible set
            - layers: list[dict] - boundary and marker layers
            - origin, radius_m: the proximity inputs used
    """
    all_facilities = as_facilities(facilities)
    radius = get_default_radius() if radius_m is None else radius_m
    visible = _distance.filter_within_radius(all_facilities, origin, radius)
    extent = _bounds.compute_bounds(visible)
    return {
        "facilities": [f.to_feature() for f in visible],
        "count": len(visible),
        "total": len(all_facilities),
        "viewport": _bounds.frame_viewport(extent).to_dict(),
        "bounds": extent.to_dict(),
        "layers": _render.build_layers(visible, icon_factory),
        "origin": list(origin) if origin else None,
        "radius_m": radius if origin else None,
    }


def facilities_frame(
    facilities: Any, origin: tuple[float, float] | None = None
) -> pd.DataFrame:
    """One row per facility with its anchor, geometry kind and render mode.

    With an origin, adds ``distance_m`` (NaN for anchor-less facilities).
    """
    rows = []
    for facility in as_facilities(facilities):
        anchor = resolve_anchor(facility.geometry)
        row = {
            "uri": facility.uri,
            "name": facility.name,
            "type": facility.type,
            "area": facility.area,
            "address": facility.address,
            "geometry": geometry_kind(facility.geometry),
            "anchor_lat": anchor[0] if anchor else None,
            "anchor_lon": anchor[1] if anchor else None,
            "render": _render.classify(facility).value,
        }
        if origin is not None:
            row["distance_m"] = (
                _distance.haversine_distance(origin[0], origin[1], *anchor)
                if anchor
                else float("nan")
            )
        rows.append(row)

    columns = [
        "uri",
        "name",
        "type",
        "area",
        "address",
        "geometry",
        "anchor_lat",
        "anchor_lon",
        "render",
    ]
    if origin is not None:
        columns.append("distance_m")
    return pd.DataFrame(rows, columns=columns)


# =============================================================================
# Backend
# =============================================================================


def list_areas() -> tuple[Area, ...]:
    return get_client().areas()


def list_facility_types() -> tuple[FacilityType, ...]:
    return get_client().facility_types()


def search_facilities(
    area: str | None = None, types: list[str] | tuple[str, ...] = ()
) -> FeatureCollection:
    """Search the backend for facilities in an area and categories.

    Raises:
        FetchError: If the backend request fails.
    """
    return get_client().facilities(area=area, types=types)


def area_stats(area: str | None = None) -> AreaStats:
    return get_client().stats(area)


def coverage_insights(type_id: str) -> dict[str, Any]:
    """Areas lacking a category and the per-area distribution.

    Returns:
        dict with:
            - missing_in: list[str] - names of areas with none
            - lowest: list[dict] - the three areas with the lowest counts
            - distribution: pd.DataFrame - all areas with counts
    """
    client = get_client()
    missing = client.missing_insight(type_id)
    distribution = client.distribution_insight(type_id)
    return {
        "type": type_id,
        "missing_in": [a.name for a in missing.missing_in],
        "lowest": [
            {"area": e.area, "count": e.count} for e in distribution.lowest()
        ],
        "distribution": distribution_frame(distribution),
    }


def distribution_frame(insight: DistributionInsight) -> pd.DataFrame:
    return pd.DataFrame(
        [{"area": e.area, "count": e.count} for e in insight.distribution],
        columns=["area", "count"],
    )
