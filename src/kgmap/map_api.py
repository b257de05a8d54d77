"""kgmap Map API - HTTP bridge between the browser map and the backend.

Runs each search through the same session and pipeline the CLI uses and
returns a ready-to-draw view: visible facilities, viewport framing and
boundary/marker layers.

    Browser  ->  GET  /api/map       ->  backend /facilities + /stats  ->  view
    Browser  ->  POST /api/derive    ->  posted FeatureCollection     ->  view
    Browser  ->  GET  /api/insights  ->  backend /insights/*

Run:
    kgmap serve
    # or: uvicorn kgmap.map_api:app --port 8000
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kgmap import __version__
from kgmap.api import build_map_view, get_client
from kgmap.config import DEFAULT_RADIUS_M, MAX_RADIUS_M, MIN_RADIUS_M, get_api_url
from kgmap.core.exceptions import FetchError
from kgmap.core.models import DistributionInsight
from kgmap.geolocation import FixedLocationProvider
from kgmap.session import ExplorerSession

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    logger.info("kgmap Map API v%s -> backend %s", __version__, get_api_url())
    yield


app = FastAPI(title="kgmap Map API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


def _origin(lat: float | None, lon: float | None) -> tuple[float, float] | None:
    if (lat is None) != (lon is None):
        raise ValueError("lat and lon must be given together")
    if lat is None:
        return None
    return (lat, lon)


# ── Endpoints ──


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": __version__, "backend": get_api_url()}


@app.get("/api/filters")
async def filters():
    """Areas and facility types for the filter panel."""
    client = get_client()
    try:
        areas = client.areas()
        types = client.facility_types()
    except FetchError as e:
        return _error(str(e), 502)
    return JSONResponse(
        {
            "success": True,
            "areas": [
                {"id": a.id, "name": a.name, "facilityCount": a.facility_count}
                for a in areas
            ],
            "types": [
                {"id": t.id, "name": t.name, "facilityCount": t.facility_count}
                for t in types
            ],
        }
    )


@app.get("/api/map")
async def map_view(
    area: str = Query(""),
    types: list[str] = Query([], alias="type"),
    lat: float | None = Query(None),
    lon: float | None = Query(None),
    radius_m: float = Query(DEFAULT_RADIUS_M),
):
    """Search the backend and return the derived map view.

    With lat/lon, proximity mode is on and the radius is clamped to
    [100, 5000] meters.
    """
    try:
        origin = _origin(lat, lon)
    except ValueError as e:
        return _error(str(e), 422)

    t0 = time.time()
    session = ExplorerSession(
        client=get_client(),
        location_provider=FixedLocationProvider(*origin) if origin else None,
    )
    session.search(area, types)
    session.set_radius(radius_m)
    if origin:
        session.toggle_near_me()

    view = session.map_view()
    if session.state.facilities_error and not session.state.facilities:
        return _error(session.state.facilities_error, 502)

    stats = session.state.stats
    return JSONResponse(
        {
            "success": True,
            "elapsed_ms": round((time.time() - t0) * 1000),
            "stats": (
                {"total": stats.total, "categories": stats.category_count}
                if stats
                else None
            ),
            **view,
        }
    )


@app.post("/api/derive")
async def derive(
    collection: dict[str, Any] = Body(...),
    lat: float | None = Query(None),
    lon: float | None = Query(None),
    radius_m: float = Query(DEFAULT_RADIUS_M, ge=MIN_RADIUS_M, le=MAX_RADIUS_M),
):
    """Derive a map view from a posted FeatureCollection, no backend call."""
    try:
        origin = _origin(lat, lon)
    except ValueError as e:
        return _error(str(e), 422)
    return JSONResponse({"success": True, **build_map_view(collection, origin, radius_m)})


@app.get("/api/insights")
async def insights(type_id: str = Query(..., alias="type")):
    """Coverage gaps for one facility type."""
    session = ExplorerSession(client=get_client())
    state = session.load_insights(type_id)
    if state.insights_error:
        return _error(state.insights_error, 502)

    distribution = state.distribution or DistributionInsight()
    return JSONResponse(
        {
            "success": True,
            "type": type_id,
            "missingIn": [
                {"id": a.id, "name": a.name}
                for a in (state.missing.missing_in if state.missing else ())
            ],
            "lowest": [
                {"area": e.area, "count": e.count} for e in distribution.lowest()
            ],
            "distribution": [{"area": e.area, "count": e.count} for e in distribution.distribution],
        }
    )
