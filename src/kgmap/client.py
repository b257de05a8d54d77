"""HTTP client for the facility knowledge-graph backend.

Wraps the backend's read-only JSON endpoints:

    /areas                          -> list of areas
    /facility-types                 -> list of facility categories
    /facilities?area=&type=...      -> GeoJSON FeatureCollection (+ debug)
    /stats?area=                    -> totals per area
    /insights/missing?type=         -> areas lacking a category
    /insights/distribution?type=    -> per-area counts for a category

Query encoding matches the web UI: list values become repeated keys and
scalar values are sent only when truthy, so an empty area means "all".

Usage:
    from kgmap.client import ExplorerClient
    client = ExplorerClient()
    collection = client.facilities(area="dublin-city", types=["park"])
"""

import logging
from typing import Any

import requests

from kgmap.config import get_api_url, get_request_timeout
from kgmap.core.exceptions import FetchError
from kgmap.core.models import (
    Area,
    AreaStats,
    DistributionInsight,
    FacilityType,
    FeatureCollection,
    MissingInsight,
)

logger = logging.getLogger(__name__)


def encode_params(params: dict[str, Any] | None) -> list[tuple[str, str]]:
    """Flatten query params, repeating keys for lists and dropping falsy scalars."""
    query: list[tuple[str, str]] = []
    for key, value in (params or {}).items():
        if isinstance(value, (list, tuple)):
            query.extend((key, str(v)) for v in value)
        elif value:
            query.append((key, str(value)))
    return query


class ExplorerClient:
    """Thin requests-based client; one method per backend endpoint.

    Args:
        base_url: Backend base URL. Defaults to the configured KGMAP_API_URL.
        timeout: Per-request timeout in seconds. Defaults to configuration.
        session: Optional requests.Session (connection reuse, testing).
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or get_api_url()).rstrip("/")
        self.timeout = timeout if timeout is not None else get_request_timeout()
        self._session = session or requests.Session()

    def fetch(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """GET an endpoint and return its decoded JSON body.

        Raises:
            FetchError: On transport failure, non-2xx status or invalid JSON.
        """
        url = f"{self.base_url}{endpoint}"
        query = encode_params(params)
        logger.debug("GET %s %s", url, query)

        try:
            resp = self._session.get(url, params=query, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise FetchError(f"Request to {endpoint} failed: {e}", url=url) from e

        if not resp.ok:
            logger.warning("API error %s for %s", resp.status_code, url)
            raise FetchError(
                f"API error: {resp.status_code}", status_code=resp.status_code, url=url
            )

        try:
            return resp.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {endpoint}", url=url) from e

    # ── Reference data ────────────────────────────────────────────────

    def areas(self) -> tuple[Area, ...]:
        return tuple(Area.from_json(a) for a in self.fetch("/areas") or ())

    def facility_types(self) -> tuple[FacilityType, ...]:
        return tuple(
            FacilityType.from_json(t) for t in self.fetch("/facility-types") or ()
        )

    # ── Search ───────────────────────────────────────────────────────

    def facilities(
        self, area: str | None = None, types: list[str] | tuple[str, ...] = ()
    ) -> FeatureCollection:
        data = self.fetch("/facilities", {"area": area, "type": list(types)})
        collection = FeatureCollection.from_json(data)
        logger.info(
            "Fetched %d facilities (area=%s, types=%s)",
            len(collection),
            area or "all",
            ",".join(types) or "all",
        )
        return collection

    def stats(self, area: str | None = None) -> AreaStats:
        return AreaStats.from_json(self.fetch("/stats", {"area": area}))

    # ── Insights ─────────────────────────────────────────────────────

    def missing_insight(self, type_id: str) -> MissingInsight:
        return MissingInsight.from_json(
            self.fetch("/insights/missing", {"type": type_id})
        )

    def distribution_insight(self, type_id: str) -> DistributionInsight:
        return DistributionInsight.from_json(
            self.fetch("/insights/distribution", {"type": type_id})
        )
