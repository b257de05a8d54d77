"""Tests for the kgmap Map API (FastAPI bridge).

The backend client is patched where map_api looks it up.
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from kgmap.core.exceptions import FetchError
from kgmap.core.models import (
    Area,
    AreaStats,
    DistributionInsight,
    FacilityType,
    FeatureCollection,
    MissingInsight,
)
from kgmap.map_api import app

CLIENT_PATCH = "kgmap.map_api.get_client"


@pytest.fixture
def http():
    return TestClient(app)


@pytest.fixture
def collection_json(make_feature, point, park_polygon):
    return {
        "type": "FeatureCollection",
        "features": [
            make_feature("Library", point(-6.2608, 53.3498), "A"),
            make_feature("Toilet", point(-6.2603, 53.3588), "B"),
            make_feature("Park", park_polygon, "D"),
        ],
    }


@pytest.fixture
def backend(collection_json):
    client = MagicMock()
    client.facilities.return_value = FeatureCollection.from_json(collection_json)
    client.stats.return_value = AreaStats(total=3, by_type=({}, {}))
    return client


class TestHealthAndFilters:
    def test_health(self, http):
        body = http.get("/api/health").json()
        assert body["status"] == "ok"
        assert body["backend"] == "http://localhost:3001/api"

    def test_filters(self, http):
        client = MagicMock()
        client.areas.return_value = (Area("dcc", "Dublin City", 12),)
        client.facility_types.return_value = (FacilityType("park", "Park"),)
        with patch(CLIENT_PATCH, return_value=client):
            body = http.get("/api/filters").json()
        assert body["areas"] == [{"id": "dcc", "name": "Dublin City", "facilityCount": 12}]
        assert body["types"][0]["id"] == "park"

    def test_filters_backend_down(self, http):
        client = MagicMock()
        client.areas.side_effect = FetchError("API error: 503")
        with patch(CLIENT_PATCH, return_value=client):
            resp = http.get("/api/filters")
        assert resp.status_code == 502
        assert resp.json() == {"success": False, "error": "API error: 503"}


class TestMapEndpoint:
    """Test GET /api/map."""

    def test_map_without_origin(self, http, backend):
        with patch(CLIENT_PATCH, return_value=backend):
            body = http.get("/api/map", params=[("area", "dcc"), ("type", "park"), ("type", "library")]).json()

        backend.facilities.assert_called_once_with("dcc", ("park", "library"))
        assert body["success"] is True
        assert body["count"] == 3
        assert body["viewport"]["mode"] == "fit"
        assert body["stats"] == {"total": 3, "categories": 2}
        assert body["nearMe"]["active"] is False

    def test_map_near_me(self, http, backend):
        with patch(CLIENT_PATCH, return_value=backend):
            body = http.get(
                "/api/map", params={"lat": 53.3498, "lon": -6.2603, "radius_m": 100}
            ).json()

        assert body["count"] == 2
        assert body["total"] == 3
        assert body["nearMe"]["label"] == "Showing Near Me (100m)"
        assert [layer["kind"] for layer in body["layers"]] == ["marker", "boundary"]

    def test_map_radius_clamped(self, http, backend):
        with patch(CLIENT_PATCH, return_value=backend):
            body = http.get(
                "/api/map", params={"lat": 53.3498, "lon": -6.2603, "radius_m": 99999}
            ).json()
        assert body["nearMe"]["radiusM"] == 5000

    def test_map_lat_without_lon(self, http, backend):
        with patch(CLIENT_PATCH, return_value=backend):
            resp = http.get("/api/map", params={"lat": 53.3})
        assert resp.status_code == 422
        assert resp.json()["success"] is False

    def test_map_backend_error(self, http, backend):
        backend.facilities.side_effect = FetchError("API error: 500")
        with patch(CLIENT_PATCH, return_value=backend):
            resp = http.get("/api/map")
        assert resp.status_code == 502
        assert resp.json()["error"] == "API error: 500"

    def test_map_stats_error_with_no_results(self, http, backend):
        backend.facilities.return_value = FeatureCollection()
        backend.stats.side_effect = FetchError("API error: 503")
        with patch(CLIENT_PATCH, return_value=backend):
            resp = http.get("/api/map")
        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == 0
        assert body["stats"] is None
        assert body["errors"] == {"stats": "API error: 503"}


class TestDeriveEndpoint:
    """Test POST /api/derive (no backend call)."""

    def test_derive_with_origin(self, http, collection_json):
        body = http.post(
            "/api/derive",
            json=collection_json,
            params={"lat": 53.3498, "lon": -6.2603, "radius_m": 1500},
        ).json()
        assert body["count"] == 3
        assert body["radius_m"] == 1500

    def test_derive_empty_resets_view(self, http):
        body = http.post("/api/derive", json={"features": []}).json()
        assert body["viewport"]["mode"] == "reset"
        assert body["bounds"] == {"valid": False}

    def test_derive_malformed_features(self, http, make_feature, point):
        feature = make_feature("Library", point(-6.2608, 53.3498), "A")
        feature["properties"] = "not an object"
        resp = http.post("/api/derive", json={"features": [None, feature]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 2
        # the null feature has no geometry, the other still gets a marker
        assert [layer["kind"] for layer in body["layers"]] == ["marker"]

    def test_derive_radius_out_of_range(self, http, collection_json):
        resp = http.post("/api/derive", json=collection_json, params={"radius_m": 10})
        assert resp.status_code == 422


class TestInsightsEndpoint:
    def test_insights(self, http):
        client = MagicMock()
        client.missing_insight.return_value = MissingInsight((Area("f", "Fingal"),))
        client.distribution_insight.return_value = DistributionInsight.from_json(
            {"distribution": [{"area": "Fingal", "count": 0}, {"area": "DLR", "count": 4}]}
        )
        with patch(CLIENT_PATCH, return_value=client):
            body = http.get("/api/insights", params={"type": "park"}).json()
        assert body["missingIn"] == [{"id": "f", "name": "Fingal"}]
        assert body["lowest"][0] == {"area": "Fingal", "count": 0}
        assert len(body["distribution"]) == 2

    def test_insights_requires_type(self, http):
        assert http.get("/api/insights").status_code == 422

    def test_insights_backend_error(self, http):
        client = MagicMock()
        client.missing_insight.side_effect = FetchError("API error: 500")
        with patch(CLIENT_PATCH, return_value=client):
            resp = http.get("/api/insights", params={"type": "park"})
        assert resp.status_code == 502
