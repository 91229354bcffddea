# value objects shared by the resolver, the retrieval client and the view layer
# everything here is immutable so a snapshot can be handed across threads safely

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Tuple, Union

FORECAST_DAYS = 3


@dataclass(frozen=True)
class CoordinateQuery:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")

    def serialize(self) -> str:
        # provider accepts "lat,lon" in the q parameter
        return f"{self.latitude},{self.longitude}"


@dataclass(frozen=True)
class TextQuery:
    text: str

    def serialize(self) -> str:
        # passed through as typed, requests takes care of url encoding
        return self.text


Query = Union[CoordinateQuery, TextQuery]


@dataclass(frozen=True)
class ForecastDay:
    date: date
    avg_temp_c: float
    condition: str


@dataclass(frozen=True)
class WeatherSnapshot:
    # only ever built by service.parse_snapshot from a fully validated payload
    location_name: str
    localtime: datetime
    temp_c: float
    feelslike_c: float
    condition: str
    wind_kph: float
    forecast: Tuple[ForecastDay, ...]


class ErrorKind(Enum):
    LOCATION_UNAVAILABLE = "location_unavailable"
    LOCATION_DENIED = "location_denied"
    NETWORK_FAILURE = "network_failure"
    INVALID_RESPONSE = "invalid_response"
    CONFIGURATION_MISSING = "configuration_missing"


@dataclass(frozen=True)
class RetrievalError:
    # failed outcome as a value, the display layer messages on kind
    kind: ErrorKind
    detail: str = ""
