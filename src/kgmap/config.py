"""Configuration for kgmap.

Runtime settings are resolved in priority order:
    1. Environment variables (KGMAP_API_URL, KGMAP_RADIUS_M, KGMAP_TIMEOUT)
    2. Runtime config file (kgmap_data/config.json in the project root)
    3. Built-in defaults

Map framing constants live here as module constants so the geometry
pipeline and the surfaces share a single definition.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

# ----------------------------------------------------------------
# Logging
# ----------------------------------------------------------------

logger = logging.getLogger("kgmap")
if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(
        logging.Formatter("%(levelname)s | %(name)s | %(message)s")
    )
    logger.addHandler(_handler)
logger.setLevel(logging.INFO)

# ----------------------------------------------------------------
# Map constants
# ----------------------------------------------------------------

# Dublin city centre, (lat, lon)
DEFAULT_CENTER: tuple[float, float] = (53.3498, -6.2603)
DEFAULT_ZOOM = 12

FIT_PADDING: tuple[int, int] = (50, 50)
FIT_MAX_ZOOM = 16

MIN_RADIUS_M = 100.0
MAX_RADIUS_M = 5000.0
DEFAULT_RADIUS_M = 1000.0

DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT = 10.0

_DATA_DIR_NAME = "kgmap_data"


def _find_project_root_from_cwd() -> Path:
    """Walk up from cwd looking for a kgmap_data directory.

    Returns the first ancestor that contains one, or cwd when none does.
    """
    cwd = Path.cwd()
    for candidate in [cwd, *cwd.parents]:
        if (candidate / _DATA_DIR_NAME).is_dir():
            return candidate
    return cwd


_PROJECT_ROOT = _find_project_root_from_cwd()
_PROJECT_DATA_DIR = _PROJECT_ROOT / _DATA_DIR_NAME
_RUNTIME_CONFIG_PATH = _PROJECT_DATA_DIR / "config.json"


# ----------------------------------------------------------------
# Runtime config file
# ----------------------------------------------------------------


def _load_runtime_config() -> dict[str, Any]:
    if not _RUNTIME_CONFIG_PATH.exists():
        return {}
    try:
        data = json.loads(_RUNTIME_CONFIG_PATH.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s: %s", _RUNTIME_CONFIG_PATH, e)
        return {}
    return data if isinstance(data, dict) else {}


def _save_runtime_config(cfg: dict[str, Any]) -> None:
    _RUNTIME_CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    _RUNTIME_CONFIG_PATH.write_text(json.dumps(cfg, indent=2))


def _parse_float(raw: Any, key: str) -> float:
    from kgmap.core.exceptions import ConfigError

    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {raw!r}", key=key) from e


# ----------------------------------------------------------------
# Backend API URL
# ----------------------------------------------------------------


def get_api_url() -> str:
    """Return the base URL of the knowledge-graph backend.

    KGMAP_API_URL takes priority over the config file. The result never
    ends with a slash so endpoint paths can be appended directly.
    """
    url = os.getenv("KGMAP_API_URL")
    if not url:
        url = _load_runtime_config().get("api_url") or DEFAULT_API_URL
    return str(url).rstrip("/")


def set_api_url(url: str) -> None:
    """Persist the backend base URL to the runtime config file."""
    if not url.startswith(("http://", "https://")):
        raise ValueError("api_url must be an absolute http:// or https:// URL")
    cfg = _load_runtime_config()
    cfg["api_url"] = url.rstrip("/")
    _save_runtime_config(cfg)
    logger.info("Backend API URL set to %s", cfg["api_url"])


# ----------------------------------------------------------------
# Proximity radius
# ----------------------------------------------------------------


def clamp_radius(radius_m: float) -> float:
    """Clamp a radius into the adjustable [MIN_RADIUS_M, MAX_RADIUS_M] range."""
    return max(MIN_RADIUS_M, min(MAX_RADIUS_M, float(radius_m)))


def get_default_radius() -> float:
    """Return the initial "near me" radius in meters.

    Raises:
        ConfigError: If KGMAP_RADIUS_M or the config file value is not numeric.
    """
    raw = os.getenv("KGMAP_RADIUS_M")
    if raw:
        return clamp_radius(_parse_float(raw, "KGMAP_RADIUS_M"))
    stored = _load_runtime_config().get("radius_m")
    if stored is None:
        return DEFAULT_RADIUS_M
    return clamp_radius(_parse_float(stored, "radius_m"))


def set_default_radius(radius_m: float) -> None:
    """Persist the initial "near me" radius to the runtime config file."""
    if not MIN_RADIUS_M <= radius_m <= MAX_RADIUS_M:
        raise ValueError(
            f"radius_m must be between {MIN_RADIUS_M:g} and {MAX_RADIUS_M:g}"
        )
    cfg = _load_runtime_config()
    cfg["radius_m"] = float(radius_m)
    _save_runtime_config(cfg)


# ----------------------------------------------------------------
# Request timeout
# ----------------------------------------------------------------


def get_request_timeout() -> float:
    """Return the per-request timeout in seconds for backend calls."""
    raw = os.getenv("KGMAP_TIMEOUT")
    if raw:
        timeout = _parse_float(raw, "KGMAP_TIMEOUT")
    else:
        timeout = _parse_float(
            _load_runtime_config().get("request_timeout", DEFAULT_TIMEOUT),
            "request_timeout",
        )
    if timeout <= 0:
        from kgmap.core.exceptions import ConfigError

        raise ConfigError("request timeout must be positive", key="KGMAP_TIMEOUT")
    return timeout


# ----------------------------------------------------------------
# .env loading
# ----------------------------------------------------------------


def load_dotenv(start: Path | None = None) -> Path | None:
    """Load the nearest .env file into os.environ without overwriting.

    Walks up from ``start`` (default: cwd). Returns the file that was
    loaded, or None.
    """
    here = (start or Path.cwd()).resolve()
    for candidate in [here, *here.parents]:
        env_file = candidate / ".env"
        if not env_file.is_file():
            continue
        for line in env_file.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            os.environ.setdefault(key.strip(), value.strip())
        return env_file
    return None
