# decides what to ask the provider for: device coordinates when the platform gives them,
# otherwise whatever city the user types

from __future__ import annotations
import logging
from typing import Optional
import requests
from .models import CoordinateQuery, ErrorKind, TextQuery

logger = logging.getLogger(__name__)


class LocationError(RuntimeError):
    kind = ErrorKind.LOCATION_DENIED


class LocationUnavailableError(LocationError):
    # no geolocation capability on this platform
    kind = ErrorKind.LOCATION_UNAVAILABLE


class LocationDeniedError(LocationError):
    # capability exists but did not hand out a position
    kind = ErrorKind.LOCATION_DENIED


class GeolocationProvider:
    # platform capability, returns coordinates or raises LocationDeniedError
    def current_position(self) -> CoordinateQuery:
        raise NotImplementedError


class FixedGeolocation(GeolocationProvider):
    # explicitly configured position, also handy in tests
    def __init__(self, latitude: float, longitude: float):
        self.position = CoordinateQuery(latitude, longitude)

    def current_position(self) -> CoordinateQuery:
        return self.position


class IPGeolocation(GeolocationProvider):
    # approximate position from the public IP address of this machine
    URL = "https://ipapi.co/json/"
    DEFAULT_TIMEOUT = 10.0

    def __init__(self, url: str = URL, timeout: float = DEFAULT_TIMEOUT):
        self.url = url
        self.timeout = timeout

    def current_position(self) -> CoordinateQuery:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
            return CoordinateQuery(float(data["latitude"]), float(data["longitude"]))
        except requests.RequestException as exc:
            raise LocationDeniedError(f"IP geolocation failed: {exc}") from exc
        except (KeyError, TypeError, ValueError) as exc:
            # also covers invalid JSON and out of range coordinates
            raise LocationDeniedError(f"IP geolocation returned no usable position: {exc}") from exc


class LocationResolver:
    def __init__(self, provider: Optional[GeolocationProvider] = None):
        self.provider = provider

    def locate(self) -> CoordinateQuery:
        # single attempt, the user falls back to typing a city
        if self.provider is None:
            raise LocationUnavailableError("geolocation is not supported on this platform")
        query = self.provider.current_position()
        logger.info("device position resolved to %s", query.serialize())
        return query

    def from_text(self, text: str) -> Optional[TextQuery]:
        # empty submissions are ignored, anything else is sent exactly as typed
        if not text:
            return None
        return TextQuery(text)
