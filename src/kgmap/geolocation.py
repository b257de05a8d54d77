"""Device location acquisition for "near me" mode.

Location is a single-shot asynchronous request: the provider calls exactly
one of ``on_success(lat, lon)`` or ``on_error(GeolocationError)``, possibly
later. There is no cancellation handle; callers that no longer want the
result simply ignore it (see kgmap.core.state.location_resolved).

Providers:
- FixedLocationProvider: a known position (CLI flags, HTTP query)
- UnsupportedLocationProvider: no location capability at all
- DeferredLocationProvider: holds the callbacks until resolved or failed
"""

import logging
from collections.abc import Callable
from typing import Protocol

from kgmap.core.exceptions import GeolocationError

logger = logging.getLogger(__name__)

LOCATION_UNAVAILABLE = "Unable to get your location. Please enable location services."
LOCATION_UNSUPPORTED = "Geolocation is not supported on this device."

SuccessCallback = Callable[[float, float], None]
ErrorCallback = Callable[[GeolocationError], None]


class LocationProvider(Protocol):
    def request_position(
        self, on_success: SuccessCallback, on_error: ErrorCallback
    ) -> None: ...


class FixedLocationProvider:
    """Reports a fixed position, or LOCATION_UNAVAILABLE if it is out of range."""

    def __init__(self, lat: float, lon: float):
        self.lat = lat
        self.lon = lon

    def request_position(
        self, on_success: SuccessCallback, on_error: ErrorCallback
    ) -> None:
        if not (-90 <= self.lat <= 90 and -180 <= self.lon <= 180):
            logger.warning("Rejecting out-of-range position %s,%s", self.lat, self.lon)
            on_error(GeolocationError(LOCATION_UNAVAILABLE))
            return
        on_success(self.lat, self.lon)


class UnsupportedLocationProvider:
    def request_position(
        self, on_success: SuccessCallback, on_error: ErrorCallback
    ) -> None:
        on_error(GeolocationError(LOCATION_UNSUPPORTED))


class DeferredLocationProvider:
    """Keeps the callbacks of the latest request until it is settled.

    Settling with no request pending is a no-op.
    """

    def __init__(self) -> None:
        self._pending: tuple[SuccessCallback, ErrorCallback] | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def request_position(
        self, on_success: SuccessCallback, on_error: ErrorCallback
    ) -> None:
        self._pending = (on_success, on_error)

    def resolve(self, lat: float, lon: float) -> None:
        if self._pending is None:
            return
        on_success, _ = self._pending
        self._pending = None
        on_success(lat, lon)

    def fail(self, message: str = LOCATION_UNAVAILABLE) -> None:
        if self._pending is None:
            return
        _, on_error = self._pending
        self._pending = None
        on_error(GeolocationError(message))
