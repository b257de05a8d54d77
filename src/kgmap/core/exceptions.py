"""Exception hierarchy for kgmap.

This module defines all kgmap exceptions in a single location. The fetch
client and location providers raise these exceptions directly; the CLI,
HTTP bridge and MCP server catch and format them for users.

The geometry pipeline (anchor resolution, distance filtering, bounds and
render classification) never raises: unsupported or malformed geometry is
excluded, not reported.

Exception Hierarchy:
    KGMapError (base)
    |-- FetchError - Backend request failures
    |-- GeolocationError - Device location unavailable or denied
    +-- ConfigError - Invalid configuration values
"""


class KGMapError(Exception):
    """Base exception for all kgmap errors.

    Example:
        try:
            collection = client.facilities(area="north-central")
        except KGMapError as e:
            return f"**Error:** {e}"
    """

    pass


class FetchError(KGMapError):
    """Raised when a backend request fails.

    Covers transport failures, non-2xx responses and bodies that are not
    valid JSON.

    Attributes:
        message: Human-readable error description
        status_code: HTTP status of the failed response (optional)
        url: The URL that was requested (optional)
    """

    def __init__(
        self, message: str, status_code: int | None = None, url: str | None = None
    ):
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class GeolocationError(KGMapError):
    """Raised when the device location cannot be obtained.

    The message is user-facing and is shown as-is next to the "near me"
    control.
    """

    pass


class ConfigError(KGMapError):
    """Raised when a configuration value cannot be parsed.

    Attributes:
        key: The configuration key or environment variable at fault
    """

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)
