import pytest

# Small park ring near Dublin city centre, (lon, lat)
PARK_RING = [
    [-6.26, 53.35],
    [-6.259, 53.35],
    [-6.259, 53.351],
    [-6.26, 53.351],
    [-6.26, 53.35],
]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep every test away from the real runtime config and KGMAP_* env."""
    import kgmap.config as cfg_mod

    data_dir = tmp_path / "kgmap_data"
    monkeypatch.setattr(cfg_mod, "_PROJECT_DATA_DIR", data_dir)
    monkeypatch.setattr(cfg_mod, "_RUNTIME_CONFIG_PATH", data_dir / "config.json")
    for var in ("KGMAP_API_URL", "KGMAP_RADIUS_M", "KGMAP_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    return data_dir / "config.json"


@pytest.fixture
def make_feature():
    """Factory for GeoJSON facility features."""
    counter = iter(range(1, 10_000))

    def _make(
        category="Library",
        geometry=None,
        name=None,
        area="Dublin City",
        address=None,
    ):
        n = next(counter)
        props = {
            "uri": f"http://data.example.org/facility/{n}",
            "name": name or f"Facility {n}",
            "type": category,
            "area": area,
        }
        if address:
            props["address"] = address
        return {"type": "Feature", "geometry": geometry, "properties": props}

    return _make


@pytest.fixture
def point():
    def _point(lon, lat):
        return {"type": "Point", "coordinates": [lon, lat]}

    return _point


@pytest.fixture
def park_polygon():
    return {"type": "Polygon", "coordinates": [PARK_RING]}
