"""kgmap MCP Server - Thin MCP Protocol Adapter.

Exposes facility search and the geospatial pipeline as MCP tools. All
logic is delegated to kgmap.api; this module only formats results as text
and turns kgmap errors into "**Error:** ..." strings.

Tool Surface:
    search_facilities   - facilities in an area/categories, with render modes
    facilities_near     - facilities within a radius of a point, closest first
    facility_bounds     - extent and viewport framing for a search
    coverage_insights   - areas lacking a category, lowest-coverage areas
"""

import json
from typing import Any

from fastmcp import FastMCP

from kgmap import api
from kgmap.config import clamp_radius, load_dotenv
from kgmap.core.bounds import frame_viewport
from kgmap.core.distance import format_radius, nearest_first
from kgmap.core.exceptions import KGMapError
from kgmap.core.render import classify

load_dotenv()

mcp = FastMCP("kgmap")

# Cap on facilities listed per tool response
_MAX_LISTED = 25


# ===========================================
# SERIALIZATION HELPERS
# ===========================================


def _facility_line(facility, distance_m: float | None = None) -> str:
    line = f"- {facility.name} [{facility.type}] in {facility.area} ({classify(facility).value})"
    if distance_m is not None:
        line += f" - {distance_m:,.0f} m"
    return line


def _listing(lines: list[str], total: int) -> str:
    shown = lines[:_MAX_LISTED]
    if total > len(shown):
        shown.append(f"... and {total - len(shown)} more")
    return "\n".join(shown)


def _json_block(data: dict[str, Any]) -> str:
    return "```json\n" + json.dumps(data, indent=2) + "\n```"


# ==========================================
# MCP TOOLS
# ==========================================


@mcp.tool()
def search_facilities(area: str = "", types: list[str] | None = None) -> str:
    """Search facilities by administrative area and category.

    Args:
        area: Area id (empty for all areas).
        types: Facility type ids, e.g. ["park", "library"] (empty for all).

    Returns:
        Count plus one line per facility with how it is drawn on the map.
    """
    try:
        collection = api.search_facilities(area=area or None, types=types or [])
        facilities = collection.features
        if not facilities:
            return "No facilities found for these filters."
        header = f"Found {len(facilities)} facilities."
        body = _listing([_facility_line(f) for f in facilities], len(facilities))
        return f"{header}\n{body}"
    except KGMapError as e:
        return f"**Error:** {e}"


@mcp.tool()
def facilities_near(
    lat: float,
    lon: float,
    radius_m: float = 1000.0,
    area: str = "",
    types: list[str] | None = None,
) -> str:
    """Find facilities within a radius of a point, closest first.

    Args:
        lat: Latitude of the origin.
        lon: Longitude of the origin.
        radius_m: Radius in meters, clamped to 100-5000.
        area: Area id to search (empty for all areas).
        types: Facility type ids (empty for all).

    Returns:
        Facilities whose anchor point lies inside the radius, with distances.
    """
    try:
        radius = clamp_radius(radius_m)
        collection = api.search_facilities(area=area or None, types=types or [])
        near = api.filter_within_radius(collection, (lat, lon), radius)
        if not near:
            return (
                f"No facilities within {format_radius(radius)} of {lat:.5f},{lon:.5f} "
                f"({len(collection)} searched)."
            )
        ranked = nearest_first(near, (lat, lon))
        header = (
            f"{len(near)} of {len(collection)} facilities within "
            f"{format_radius(radius)} of {lat:.5f},{lon:.5f}."
        )
        body = _listing([_facility_line(f, d) for f, d in ranked], len(ranked))
        return f"{header}\n{body}"
    except KGMapError as e:
        return f"**Error:** {e}"


@mcp.tool()
def facility_bounds(area: str = "", types: list[str] | None = None) -> str:
    """Compute the map framing for a facility search.

    Args:
        area: Area id (empty for all areas).
        types: Facility type ids (empty for all).

    Returns:
        The bounding extent and viewport as JSON.
    """
    try:
        collection = api.search_facilities(area=area or None, types=types or [])
        extent = api.compute_bounds(collection)
        return _json_block(
            {
                "facilities": len(collection),
                "bounds": extent.to_dict(),
                "center": list(extent.center) if extent.center else None,
                "viewport": frame_viewport(extent).to_dict(),
            }
        )
    except KGMapError as e:
        return f"**Error:** {e}"


@mcp.tool()
def coverage_insights(facility_type: str) -> str:
    """Show where a facility category is missing or scarce.

    Args:
        facility_type: Facility type id, e.g. "park".

    Returns:
        Areas with none of the category and the three lowest-count areas.
    """
    try:
        result = api.coverage_insights(facility_type)
        parts = [f"**Coverage for '{facility_type}'**", ""]
        if result["missing_in"]:
            parts.append("Areas with none:")
            parts.extend(f"- {name}" for name in result["missing_in"])
        else:
            parts.append(f"All areas have at least one {facility_type}.")
        if result["lowest"]:
            parts.extend(["", "Lowest counts:"])
            parts.extend(f"- {e['area']}: {e['count']}" for e in result["lowest"])
        return "\n".join(parts)
    except KGMapError as e:
        return f"**Error:** {e}"


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
