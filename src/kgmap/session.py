"""ExplorerSession - drives the state store from real input events.

The session owns one ExplorerState and replaces it on every event. It
issues backend requests through ExplorerClient and location requests
through a LocationProvider, feeding each outcome back through the pure
transitions in kgmap.core.state.

Fetch failures never escape: they are logged and recorded as the failed
channel's ``*_error`` so the map keeps showing the last good collection.
"""

import logging
from typing import Any

from kgmap.client import ExplorerClient
from kgmap.core import state as st
from kgmap.core.exceptions import FetchError, GeolocationError
from kgmap.core.render import IconFactory
from kgmap.geolocation import LocationProvider, UnsupportedLocationProvider

logger = logging.getLogger(__name__)


class ExplorerSession:
    def __init__(
        self,
        client: ExplorerClient | None = None,
        location_provider: LocationProvider | None = None,
        icon_factory: IconFactory | None = None,
        initial: st.ExplorerState | None = None,
    ):
        self.client = client or ExplorerClient()
        self.location_provider = location_provider or UnsupportedLocationProvider()
        self.icon_factory = icon_factory or IconFactory()
        self.state = initial or st.ExplorerState()

    # ── Reference data ────────────────────────────────────────────────

    def load_reference_data(self) -> st.ExplorerState:
        """Load areas and facility types; failures leave the lists as they were."""
        self.state, seq = st.begin_request(self.state)
        try:
            areas = self.client.areas()
            facility_types = self.client.facility_types()
            self.state = st.reference_received(self.state, seq, areas, facility_types)
        except FetchError as e:
            logger.warning("Could not load filter options: %s", e)
            self.state = st.request_failed(self.state, seq, str(e), "reference")
        return self.state

    # ── Search ───────────────────────────────────────────────────────

    def search(
        self, area: str | None = None, types: list[str] | tuple[str, ...] | None = None
    ) -> st.ExplorerState:
        """Search facilities (and area stats) for the given or current filters."""
        if area is not None:
            self.state = st.select_area(self.state, area)
        if types is not None:
            self.state = st.select_types(self.state, tuple(types))

        self.state, seq = st.submit_search(self.state)
        try:
            collection = self.client.facilities(
                self.state.selected_area, self.state.selected_types
            )
            self.state = st.facilities_received(self.state, seq, collection)
        except FetchError as e:
            self.state = st.request_failed(self.state, seq, str(e), "facilities")

        self.state, stats_seq = st.begin_request(self.state)
        try:
            stats = self.client.stats(self.state.selected_area)
            self.state = st.stats_received(self.state, stats_seq, stats)
        except FetchError as e:
            self.state = st.request_failed(self.state, stats_seq, str(e), "stats")
        return self.state

    # ── Proximity ────────────────────────────────────────────────────

    def toggle_near_me(self) -> st.ExplorerState:
        """Turn proximity mode off, or request the device location."""
        self.state = st.toggle_near_me(self.state)
        if self.state.locating:
            self.location_provider.request_position(
                self._on_location, self._on_location_error
            )
        return self.state

    def _on_location(self, lat: float, lon: float) -> None:
        self.state = st.location_resolved(self.state, lat, lon)

    def _on_location_error(self, error: GeolocationError) -> None:
        logger.info("Geolocation error: %s", error)
        self.state = st.location_failed(self.state, str(error))

    def set_radius(self, radius_m: float) -> st.ExplorerState:
        self.state = st.set_radius(self.state, radius_m)
        return self.state

    # ── Insights ─────────────────────────────────────────────────────

    def load_insights(self, type_id: str | None = None) -> st.ExplorerState:
        if type_id:
            self.state = st.select_insight_type(self.state, type_id)
        self.state, seq = st.begin_request(self.state)
        try:
            missing = self.client.missing_insight(self.state.insight_type)
            distribution = self.client.distribution_insight(self.state.insight_type)
            self.state = st.insights_received(self.state, seq, missing, distribution)
        except FetchError as e:
            self.state = st.request_failed(self.state, seq, str(e), "insights")
        return self.state

    # ── Derived view ─────────────────────────────────────────────────

    def map_view(self) -> dict[str, Any]:
        """Everything a renderer needs for the current snapshot."""
        state = self.state
        visible = st.visible_facilities(state)
        return {
            "facilities": [f.to_feature() for f in visible],
            "count": len(visible),
            "total": len(state.facilities),
            "viewport": st.current_viewport(state).to_dict(),
            "layers": st.current_layers(state, self.icon_factory),
            "nearMe": {
                "active": state.near_me_active,
                "origin": list(state.origin) if state.origin else None,
                "radiusM": state.radius_m,
                "label": st.near_me_label(state),
                "error": state.location_error,
            },
            "debug": state.debug.to_dict() if state.debug else None,
            "error": state.facilities_error,
            "errors": state.errors(),
        }
