"""kgmap: facility maps from a knowledge-graph backend.

kgmap resolves facility geometries (parks, libraries, toilets, ...) returned
by a knowledge-graph query service, filters them by distance from the user,
frames the map to the visible set and decides how each facility is drawn.

Quick Start:
    from kgmap import search_facilities, build_map_view

    collection = search_facilities(area="dublin-city", types=["library"])
    view = build_map_view(collection, origin=(53.3498, -6.2603), radius_m=1000)
    print(view["viewport"], len(view["layers"]))

For the map bridge, run: kgmap serve
"""

__version__ = "0.3.0"

from kgmap.api import (
    FetchError,
    GeolocationError,
    KGMapError,
    area_stats,
    build_map_view,
    classify,
    compute_bounds,
    coverage_insights,
    facilities_frame,
    filter_within_radius,
    haversine_distance,
    list_areas,
    list_facility_types,
    resolve_anchor,
    search_facilities,
)

__all__ = [
    "FetchError",
    "GeolocationError",
    "KGMapError",
    "__version__",
    "area_stats",
    "build_map_view",
    "classify",
    "compute_bounds",
    "coverage_insights",
    "facilities_frame",
    "filter_within_radius",
    "haversine_distance",
    "list_areas",
    "list_facility_types",
    "resolve_anchor",
    "search_facilities",
]
