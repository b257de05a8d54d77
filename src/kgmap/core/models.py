"""Typed views of the backend's JSON responses.

The knowledge-graph backend answers with plain JSON:

- /areas, /facility-types  -> [{id, name, facilityCount?}, ...]
- /facilities              -> {features: [Feature, ...], debug?: {...}}
- /stats                   -> {total, byType: [...]}
- /insights/missing        -> {missingIn: [{id, name}, ...]}
- /insights/distribution   -> {distribution: [{area, count}, ...]}

Each model has a ``from_json`` constructor that tolerates missing keys,
since a failed or partial response must still leave the map usable.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from kgmap.core.geometry import Geometry, UnsupportedGeometry, parse_geometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Facility:
    """A facility record with its parsed geometry.

    Attributes:
        uri: Knowledge-graph identifier of the facility
        name: Display name
        type: Category name, e.g. "Park" or "Library"
        area: Administrative area name
        address: Street address, if known
        geometry: Parsed geometry variant
        raw: The original GeoJSON feature, kept for pass-through output
    """

    uri: str
    name: str
    type: str
    area: str
    geometry: Geometry = field(default_factory=UnsupportedGeometry)
    address: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_feature(cls, feature: Any) -> "Facility":
        """Build a Facility from a GeoJSON Feature.

        Anything that is not a Feature object yields a blank facility with
        unsupported geometry, so it is kept in counts but never drawn.
        """
        if not isinstance(feature, dict):
            logger.debug("Malformed feature %r", feature)
            return cls(uri="", name="", type="", area="")
        props = feature.get("properties")
        if not isinstance(props, dict):
            props = {}
        address = props.get("address")
        return cls(
            uri=str(props.get("uri", "")),
            name=str(props.get("name", "")),
            type=str(props.get("type", "")),
            area=str(props.get("area", "")),
            address=str(address) if address else None,
            geometry=parse_geometry(feature.get("geometry")),
            raw=feature,
        )

    def to_feature(self) -> dict[str, Any]:
        """Return the facility as a GeoJSON Feature."""
        if self.raw:
            return self.raw
        props: dict[str, Any] = {
            "uri": self.uri,
            "name": self.name,
            "type": self.type,
            "area": self.area,
        }
        if self.address:
            props["address"] = self.address
        return {
            "type": "Feature",
            "geometry": self.geometry.to_geojson(),
            "properties": props,
        }


def as_facilities(items: Any) -> tuple[Facility, ...]:
    """Coerce a FeatureCollection dict, feature list or Facility list."""
    if items is None:
        return ()
    if isinstance(items, FeatureCollection):
        return items.features
    if isinstance(items, dict):
        items = items.get("features") or []
    if isinstance(items, (str, bytes, dict)) or not isinstance(items, Iterable):
        logger.debug("Ignoring non-list features %r", items)
        return ()
    return tuple(
        item if isinstance(item, Facility) else Facility.from_feature(item)
        for item in items
    )


@dataclass(frozen=True)
class QueryDebug:
    """Debug payload the backend attaches to facility searches."""

    description: str = ""
    sparql_query: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"description": self.description, "sparqlQuery": self.sparql_query}


@dataclass(frozen=True)
class FeatureCollection:
    features: tuple[Facility, ...] = ()
    debug: QueryDebug | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any] | None) -> "FeatureCollection":
        if not data:
            return cls()
        debug = data.get("debug")
        return cls(
            features=as_facilities(data.get("features") or []),
            debug=(
                QueryDebug(
                    description=str(debug.get("description", "")),
                    sparql_query=str(debug.get("sparqlQuery", "")),
                )
                if isinstance(debug, dict)
                else None
            ),
        )

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": "FeatureCollection",
            "features": [f.to_feature() for f in self.features],
        }
        if self.debug:
            data["debug"] = self.debug.to_dict()
        return data

    def __len__(self) -> int:
        return len(self.features)


@dataclass(frozen=True)
class Area:
    """A selectable administrative area."""

    id: str
    name: str
    facility_count: int | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Area":
        count = data.get("facilityCount")
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            facility_count=int(count) if count is not None else None,
        )


@dataclass(frozen=True)
class FacilityType(Area):
    """A selectable facility category."""


@dataclass(frozen=True)
class AreaStats:
    total: int = 0
    by_type: tuple[dict[str, Any], ...] = ()

    @classmethod
    def from_json(cls, data: dict[str, Any] | None) -> "AreaStats":
        if not data:
            return cls()
        return cls(
            total=int(data.get("total") or 0),
            by_type=tuple(data.get("byType") or ()),
        )

    @property
    def category_count(self) -> int:
        return len(self.by_type)


@dataclass(frozen=True)
class MissingInsight:
    """Areas that have no facility of the requested type."""

    missing_in: tuple[Area, ...] = ()

    @classmethod
    def from_json(cls, data: dict[str, Any] | None) -> "MissingInsight":
        if not data:
            return cls()
        return cls(
            missing_in=tuple(Area.from_json(a) for a in data.get("missingIn") or ())
        )


@dataclass(frozen=True)
class DistributionEntry:
    area: str
    count: int


@dataclass(frozen=True)
class DistributionInsight:
    """Per-area facility counts, ordered by the backend (largest gap first)."""

    distribution: tuple[DistributionEntry, ...] = ()

    @classmethod
    def from_json(cls, data: dict[str, Any] | None) -> "DistributionInsight":
        if not data:
            return cls()
        return cls(
            distribution=tuple(
                DistributionEntry(
                    area=str(item.get("area", "")), count=int(item.get("count") or 0)
                )
                for item in data.get("distribution") or ()
            )
        )

    def lowest(self, n: int = 3) -> tuple[DistributionEntry, ...]:
        return self.distribution[:n]
