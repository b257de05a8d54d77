"""Render classification and map-layer descriptors.

Each facility is drawn as an area boundary, as a point marker, or not at
all. Area-type categories (parks) are shown only as their footprint; every
other category is shown as a pin, even when richer geometry exists.

Classification only decides what is drawn. Skipped facilities still take
part in distance filtering and bounds computation.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from kgmap.core.geometry import MultiPolygon, Point, Polygon, resolve_anchor
from kgmap.core.models import Facility


class RenderMode(str, Enum):
    BOUNDARY = "boundary"
    MARKER = "marker"
    SKIP = "skip"


# Categories drawn as boundary-only layers
BOUNDARY_CATEGORIES: frozenset[str] = frozenset({"Park"})


@dataclass(frozen=True)
class FacilityTypeConfig:
    """Display color and icon name for a facility category."""

    color: str
    icon: str


FACILITY_CONFIG: dict[str, FacilityTypeConfig] = {
    "Park": FacilityTypeConfig("#22c55e", "trees"),
    "Library": FacilityTypeConfig("#3b82f6", "book"),
    "Toilet": FacilityTypeConfig("#f59e0b", "bath"),
    "Bike Parking": FacilityTypeConfig("#9333ea", "bike"),
    "Community Centre": FacilityTypeConfig("#4f46e5", "users"),
    "Water Fountain": FacilityTypeConfig("#06b6d4", "droplets"),
    "Public Bin": FacilityTypeConfig("#64748b", "trash-2"),
    "Recycling Centre": FacilityTypeConfig("#0d9488", "recycle"),
    "Garda Station": FacilityTypeConfig("#1eff00", "shield"),
    "Disabled Parking": FacilityTypeConfig("#ef4444", "accessibility"),
    "Swimming Pool": FacilityTypeConfig("#0ea5e9", "waves"),
    "Place of Worship": FacilityTypeConfig("#a855f7", "church"),
}

DEFAULT_TYPE_CONFIG = FacilityTypeConfig("#a855f7", "map-pin")

# Outline color for boundaries of categories missing from FACILITY_CONFIG
DEFAULT_BOUNDARY_COLOR = "#3388ff"


def classify(facility: Facility) -> RenderMode:
    """Decide how a facility is drawn.

    Evaluated in order:
        Park + Polygon/MultiPolygon       -> BOUNDARY
        Park + anything else              -> SKIP
        other + Point with >= 2 components -> MARKER
        other + anything else             -> SKIP
    """
    geometry = facility.geometry
    if facility.type in BOUNDARY_CATEGORIES:
        if isinstance(geometry, (Polygon, MultiPolygon)):
            return RenderMode.BOUNDARY
        return RenderMode.SKIP
    if isinstance(geometry, Point) and len(geometry.coordinates) >= 2:
        return RenderMode.MARKER
    return RenderMode.SKIP


# =============================================================================
# MARKER ICONS
# =============================================================================


@dataclass(frozen=True)
class MarkerIcon:
    """A round, colored div icon with a named glyph in the middle."""

    icon: str
    color: str
    size: tuple[int, int] = (32, 32)
    anchor: tuple[int, int] = (16, 32)
    popup_anchor: tuple[int, int] = (0, -32)
    class_name: str = "custom-leaflet-icon"

    def to_dict(self) -> dict[str, Any]:
        return {
            "icon": self.icon,
            "color": self.color,
            "className": self.class_name,
            "iconSize": list(self.size),
            "iconAnchor": list(self.anchor),
            "popupAnchor": list(self.popup_anchor),
        }


class IconFactory:
    """Builds marker icons from a category -> config table.

    Passed explicitly to layer building so callers can swap the table or
    the fallback without touching shared state.
    """

    def __init__(
        self,
        type_config: dict[str, FacilityTypeConfig] | None = None,
        fallback: FacilityTypeConfig = DEFAULT_TYPE_CONFIG,
    ):
        self.type_config = FACILITY_CONFIG if type_config is None else type_config
        self.fallback = fallback

    def for_type(self, category: str) -> MarkerIcon:
        config = self.type_config.get(category, self.fallback)
        return MarkerIcon(icon=config.icon, color=config.color)


# =============================================================================
# LAYERS
# =============================================================================


def maps_link(facility: Facility) -> str | None:
    """Google Maps search URL for the facility's anchor point."""
    anchor = resolve_anchor(facility.geometry)
    if anchor is None:
        return None
    return f"https://www.google.com/maps/search/?api=1&query={anchor[0]},{anchor[1]}"


def _layer_properties(facility: Facility) -> dict[str, Any]:
    props = {
        "uri": facility.uri,
        "name": facility.name,
        "type": facility.type,
        "area": facility.area,
    }
    if facility.address:
        props["address"] = facility.address
    return props


def build_layers(
    facilities: Iterable[Facility], icon_factory: IconFactory | None = None
) -> list[dict[str, Any]]:
    """Turn facilities into serializable map layers, dropping SKIP ones.

    Boundary layers carry the GeoJSON geometry and a fill/outline style;
    marker layers carry a [lat, lon] position and an icon.
    """
    factory = icon_factory or IconFactory()
    layers: list[dict[str, Any]] = []

    for index, facility in enumerate(facilities):
        mode = classify(facility)

        if mode is RenderMode.BOUNDARY:
            config = factory.type_config.get(facility.type)
            color = config.color if config else DEFAULT_BOUNDARY_COLOR
            layers.append(
                {
                    "key": f"{facility.uri}-poly-{index}",
                    "kind": mode.value,
                    "geometry": facility.geometry.to_geojson(),
                    "style": {
                        "color": color,
                        "weight": 2,
                        "opacity": 0.8,
                        "fillColor": color,
                        "fillOpacity": 0.2,
                    },
                    "properties": _layer_properties(facility),
                }
            )
        elif mode is RenderMode.MARKER:
            lon, lat = facility.geometry.coordinates[:2]
            layers.append(
                {
                    "key": f"{facility.uri}-{index}",
                    "kind": mode.value,
                    "position": [lat, lon],
                    "icon": factory.for_type(facility.type).to_dict(),
                    "properties": _layer_properties(facility),
                    "mapsUrl": maps_link(facility),
                }
            )

    return layers
