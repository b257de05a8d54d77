"""Explorer state store with pure transitions.

ExplorerState is an immutable snapshot of everything the map UI depends on:
filter selections, the current facility collection, proximity mode and the
insight panel. Every input event is a function ``(state, ...) -> state``;
nothing is mutated in place.

Derived values (visible facilities, viewport, layers) are recomputed from a
snapshot on demand and hold no state of their own.

Request sequencing:
    Each backend request takes a number from ``begin_request``. A response
    or failure is applied only if its number is newer than the last outcome
    applied on the same channel, so a slow, older search cannot overwrite a
    newer one, whether the newer one succeeded or failed.

    Each channel keeps its own error message. A success clears only its
    own channel's error.

Location:
    A location fix is applied only while a request is pending. Turning
    proximity off while the fix is outstanding drops the fix when it
    arrives.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any

from kgmap.config import DEFAULT_RADIUS_M
from kgmap.core.bounds import Viewport, compute_bounds, frame_viewport
from kgmap.core.distance import clamp_radius, filter_within_radius, format_radius
from kgmap.core.models import (
    Area,
    AreaStats,
    DistributionInsight,
    Facility,
    FacilityType,
    FeatureCollection,
    MissingInsight,
    QueryDebug,
)
from kgmap.core.render import IconFactory, build_layers

logger = logging.getLogger(__name__)

CHANNELS = ("reference", "facilities", "stats", "insights")


@dataclass(frozen=True)
class ExplorerState:
    """Immutable explorer snapshot."""

    # reference data
    areas: tuple[Area, ...] = ()
    facility_types: tuple[FacilityType, ...] = ()

    # filters
    selected_area: str = ""
    selected_types: tuple[str, ...] = ()

    # search results
    facilities: tuple[Facility, ...] = ()
    debug: QueryDebug | None = None
    stats: AreaStats | None = None
    has_searched: bool = False

    # proximity mode
    origin: tuple[float, float] | None = None
    near_me_active: bool = False
    locating: bool = False
    location_error: str | None = None
    radius_m: float = DEFAULT_RADIUS_M

    # insights panel
    insight_type: str = "park"
    missing: MissingInsight | None = None
    distribution: DistributionInsight | None = None

    # request sequencing, one seq/error pair per channel
    last_issued: int = 0
    reference_seq: int = 0
    facilities_seq: int = 0
    stats_seq: int = 0
    insights_seq: int = 0
    reference_error: str | None = None
    facilities_error: str | None = None
    stats_error: str | None = None
    insights_error: str | None = None

    def errors(self) -> dict[str, str]:
        """Current error message per channel, failed channels only."""
        errors = {}
        for channel in CHANNELS:
            message = getattr(self, f"{channel}_error")
            if message:
                errors[channel] = message
        return errors


# =============================================================================
# REFERENCE DATA & FILTERS
# =============================================================================


def reference_received(
    state: ExplorerState,
    seq: int,
    areas: tuple[Area, ...],
    facility_types: tuple[FacilityType, ...],
) -> ExplorerState:
    """Store the filter options for the area and type pickers."""
    if _is_stale(state, "reference", seq):
        return state
    return replace(
        state,
        areas=tuple(areas),
        facility_types=tuple(facility_types),
        reference_seq=seq,
        reference_error=None,
    )


def select_area(state: ExplorerState, area_id: str) -> ExplorerState:
    return replace(state, selected_area=area_id or "")


def toggle_type(state: ExplorerState, type_id: str) -> ExplorerState:
    """Add the type to the selection, or remove it if already selected."""
    if type_id in state.selected_types:
        selected = tuple(t for t in state.selected_types if t != type_id)
    else:
        selected = (*state.selected_types, type_id)
    return replace(state, selected_types=selected)


def select_types(state: ExplorerState, type_ids: tuple[str, ...]) -> ExplorerState:
    """Replace the type selection, dropping duplicates but keeping order."""
    return replace(state, selected_types=tuple(dict.fromkeys(type_ids)))


def select_insight_type(state: ExplorerState, type_id: str) -> ExplorerState:
    return replace(state, insight_type=type_id)


# =============================================================================
# REQUESTS
# =============================================================================


def begin_request(state: ExplorerState) -> tuple[ExplorerState, int]:
    """Issue the next request sequence number."""
    seq = state.last_issued + 1
    return replace(state, last_issued=seq), seq


def submit_search(state: ExplorerState) -> tuple[ExplorerState, int]:
    """Mark that a search was submitted and issue its sequence number."""
    state, seq = begin_request(state)
    return replace(state, has_searched=True), seq


def _is_stale(state: ExplorerState, channel: str, seq: int) -> bool:
    applied = getattr(state, f"{channel}_seq")
    if seq <= applied:
        logger.debug(
            "Discarding stale %s response #%d (already applied #%d)",
            channel,
            seq,
            applied,
        )
        return True
    return False


def facilities_received(
    state: ExplorerState, seq: int, collection: FeatureCollection
) -> ExplorerState:
    """Replace the facility collection wholesale with a newer response."""
    if _is_stale(state, "facilities", seq):
        return state
    return replace(
        state,
        facilities=collection.features,
        debug=collection.debug,
        facilities_error=None,
        facilities_seq=seq,
    )


def stats_received(state: ExplorerState, seq: int, stats: AreaStats) -> ExplorerState:
    if _is_stale(state, "stats", seq):
        return state
    return replace(state, stats=stats, stats_seq=seq, stats_error=None)


def insights_received(
    state: ExplorerState,
    seq: int,
    missing: MissingInsight | None,
    distribution: DistributionInsight | None,
) -> ExplorerState:
    if _is_stale(state, "insights", seq):
        return state
    changes: dict[str, Any] = {"insights_seq": seq, "insights_error": None}
    if missing is not None:
        changes["missing"] = missing
    if distribution is not None:
        changes["distribution"] = distribution
    return replace(state, **changes)


def request_failed(
    state: ExplorerState, seq: int, message: str, channel: str = "facilities"
) -> ExplorerState:
    """Record a failed request unless a newer outcome already landed.

    The current data is kept. The failure counts as the channel's latest
    outcome, so an older response arriving afterwards is discarded.
    """
    if channel not in CHANNELS:
        raise ValueError(f"channel must be one of {CHANNELS}")
    if _is_stale(state, channel, seq):
        return state
    return replace(state, **{f"{channel}_error": message, f"{channel}_seq": seq})


# =============================================================================
# PROXIMITY MODE
# =============================================================================


def toggle_near_me(state: ExplorerState) -> ExplorerState:
    """Start a location request, or turn proximity mode off.

    Turning off also abandons an outstanding location request and clears
    the origin.
    """
    if state.near_me_active or state.locating:
        return replace(state, near_me_active=False, locating=False, origin=None)
    return replace(state, locating=True, location_error=None)


def location_resolved(state: ExplorerState, lat: float, lon: float) -> ExplorerState:
    """Apply a location fix and activate proximity mode."""
    if not state.locating:
        logger.debug("Ignoring location fix with no pending request")
        return state
    return replace(
        state,
        origin=(lat, lon),
        near_me_active=True,
        locating=False,
        location_error=None,
    )


def location_failed(state: ExplorerState, message: str) -> ExplorerState:
    """Surface a location failure; proximity mode stays off."""
    if not state.locating:
        return state
    return replace(state, locating=False, location_error=message)


def set_radius(state: ExplorerState, radius_m: float) -> ExplorerState:
    return replace(state, radius_m=clamp_radius(radius_m))


# =============================================================================
# DERIVED VALUES
# =============================================================================


def active_origin(state: ExplorerState) -> tuple[float, float] | None:
    return state.origin if state.near_me_active else None


def visible_facilities(state: ExplorerState) -> tuple[Facility, ...]:
    """The collection after the proximity filter (identity when inactive)."""
    return filter_within_radius(state.facilities, active_origin(state), state.radius_m)


def current_viewport(state: ExplorerState) -> Viewport:
    return frame_viewport(compute_bounds(visible_facilities(state)))


def current_layers(
    state: ExplorerState, icon_factory: IconFactory | None = None
) -> list[dict[str, Any]]:
    return build_layers(visible_facilities(state), icon_factory)


def near_me_label(state: ExplorerState) -> str:
    if state.near_me_active:
        return f"Showing Near Me ({format_radius(state.radius_m)})"
    return "Near Me"
