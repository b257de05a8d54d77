import logging
from typing import Annotated

import typer
from rich.markup import escape

from kgmap.api import build_map_view, facilities_frame, get_client
from kgmap.config import (
    MAX_RADIUS_M,
    MIN_RADIUS_M,
    get_api_url,
    get_default_radius,
    get_request_timeout,
    load_dotenv,
    logger,
    set_api_url,
    set_default_radius,
)
from kgmap.console import (
    console,
    info,
    print_banner,
    print_distribution_table,
    print_error_panel,
    print_facilities_table,
    print_key_value,
    print_logo,
    print_viewport,
    success,
    warning,
)
from kgmap.core.distance import format_radius
from kgmap.core.exceptions import KGMapError
from kgmap.geolocation import FixedLocationProvider
from kgmap.session import ExplorerSession

app = typer.Typer(
    name="kgmap",
    help="kgmap CLI: explore facilities from the knowledge-graph backend.",
    add_completion=False,
    rich_markup_mode="markdown",
)

AreaOption = Annotated[
    str,
    typer.Option("--area", "-a", help="Area id to search. Default: all areas."),
]
TypeOption = Annotated[
    list[str] | None,
    typer.Option("--type", "-t", help="Facility type id. Repeat for several."),
]


def version_callback(value: bool):
    if value:
        print_logo(show_tagline=True, show_version=True)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show CLI version.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose", "-V", help="Enable DEBUG level logging for kgmap components."
        ),
    ] = False,
):
    """
    Main callback for the kgmap CLI. Loads .env and sets logging level.
    """
    load_dotenv()
    level = logging.DEBUG if verbose else logging.INFO
    kgmap_logger = logging.getLogger("kgmap")
    kgmap_logger.setLevel(level)
    for handler in kgmap_logger.handlers:
        handler.setLevel(level)
    if verbose:
        logger.debug("Verbose mode enabled via CLI flag.")


def _fail(title: str, e: Exception, hint: str | None = None) -> None:
    print_error_panel(title, str(e), hint=hint)
    raise typer.Exit(code=1)


@app.command("search")
def search_cmd(
    area: AreaOption = "",
    types: TypeOption = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show the query the backend ran."),
    ] = False,
):
    """
    Search facilities and show how each one is drawn on the map.
    """
    session = ExplorerSession()
    state = session.search(area, types or [])
    if state.facilities_error:
        _fail(
            "Search failed",
            KGMapError(state.facilities_error),
            hint=f"Is the backend running at {get_api_url()}?",
        )
    if state.stats_error:
        warning(f"Area totals unavailable: {state.stats_error}")

    if debug:
        description = escape(state.debug.description) if state.debug else "none returned"
        print_banner("Query", description)
        if state.debug and state.debug.sparql_query:
            console.print(state.debug.sparql_query, markup=False, highlight=False)

    if not state.facilities:
        warning("No results found. Try adjusting your filters.")
        return

    df = facilities_frame(state.facilities)
    print_facilities_table(df.to_dict("records"), title=f"{len(df)} facilities")
    if state.stats:
        print_key_value("Total facilities in area", state.stats.total)
        print_key_value("Categories", state.stats.category_count)


@app.command("near")
def near_cmd(
    lat: Annotated[float, typer.Option("--lat", help="Your latitude.")],
    lon: Annotated[float, typer.Option("--lon", help="Your longitude.")],
    radius: Annotated[
        float | None,
        typer.Option(
            "--radius",
            "-r",
            help=f"Radius in meters ({MIN_RADIUS_M:g}-{MAX_RADIUS_M:g}). Default: configured.",
        ),
    ] = None,
    area: AreaOption = "",
    types: TypeOption = None,
):
    """
    List facilities within a radius of a location, closest first.
    """
    try:
        radius_m = radius if radius is not None else get_default_radius()
    except KGMapError as e:
        _fail("Invalid configuration", e)

    session = ExplorerSession(location_provider=FixedLocationProvider(lat, lon))
    session.set_radius(radius_m)
    state = session.search(area, types or [])
    if state.facilities_error:
        _fail("Search failed", KGMapError(state.facilities_error))

    state = session.toggle_near_me()
    if state.location_error:
        _fail("Location unavailable", KGMapError(state.location_error))

    view = session.map_view()
    if not view["count"]:
        warning(
            f"No facilities within {format_radius(state.radius_m)} "
            f"({view['total']} searched)."
        )
        return

    df = facilities_frame(view["facilities"], origin=state.origin)
    df = df.sort_values("distance_m")
    print_facilities_table(
        df.to_dict("records"),
        title=f"{view['count']} of {view['total']} within {format_radius(state.radius_m)}",
    )


@app.command("bounds")
def bounds_cmd(area: AreaOption = "", types: TypeOption = None):
    """
    Show the map framing for a search (fit to results or default view).
    """
    try:
        collection = get_client().facilities(area, types or [])
    except KGMapError as e:
        _fail("Search failed", e)

    view = build_map_view(collection)
    print_banner("Viewport", f"{view['count']} facilities")
    print_viewport(view["viewport"])


@app.command("stats")
def stats_cmd(area: AreaOption = ""):
    """
    Show facility totals for an area.
    """
    try:
        stats = get_client().stats(area)
    except KGMapError as e:
        _fail("Stats failed", e)

    print_banner("Area Insights", area or "All Regions")
    print_key_value("Total facilities", stats.total)
    print_key_value("Categories", stats.category_count)


@app.command("insights")
def insights_cmd(
    facility_type: Annotated[
        str,
        typer.Argument(help="Facility type id, e.g. 'park'.", metavar="TYPE"),
    ] = "park",
):
    """
    Show areas with no facilities of a type and the lowest-coverage areas.
    """
    session = ExplorerSession()
    state = session.load_insights(facility_type)
    if state.insights_error:
        _fail("Insights failed", KGMapError(state.insights_error))

    print_banner("Critical Gaps", f"Areas with no {facility_type}")
    missing = state.missing.missing_in if state.missing else ()
    if missing:
        for missing_area in missing:
            console.print(f"  [error]{missing_area.name}[/error]")
    else:
        success(f"All areas have at least one {facility_type}.")

    if state.distribution and state.distribution.distribution:
        entries = [{"area": e.area, "count": e.count} for e in state.distribution.distribution]
        print_distribution_table(entries[:3], title="Lowest coverage")
        print_distribution_table(entries, title="Full distribution")


@app.command("config")
def config_cmd(
    api_url: Annotated[
        str | None, typer.Option("--api-url", help="Set the backend base URL.")
    ] = None,
    radius: Annotated[
        float | None,
        typer.Option("--radius", help="Set the default near-me radius in meters."),
    ] = None,
):
    """
    Show or update the runtime configuration.
    """
    try:
        if api_url is not None:
            set_api_url(api_url)
            success(f"Backend URL set to {api_url}")
        if radius is not None:
            set_default_radius(radius)
            success(f"Default radius set to {format_radius(radius)}")
        print_banner("kgmap configuration")
        print_key_value("Backend URL", get_api_url())
        print_key_value("Default radius", format_radius(get_default_radius()))
        print_key_value("Request timeout", f"{get_request_timeout():g} s")
    except (ValueError, KGMapError) as e:
        _fail("Invalid configuration", e)


@app.command("serve")
def serve_cmd(
    host: Annotated[str, typer.Option("--host", help="Bind address.")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", help="Port.")] = 8000,
):
    """
    Run the map API (FastAPI + uvicorn).
    """
    import uvicorn

    info(f"Map API on http://{host}:{port} (backend: {get_api_url()})")
    uvicorn.run("kgmap.map_api:app", host=host, port=port, log_level="info")


def main():
    app()


if __name__ == "__main__":
    main()
