# text presentation of the view state, consumed by the console front end

from __future__ import annotations
from datetime import date
from typing import Dict, List
from .models import ErrorKind, ForecastDay, WeatherSnapshot
from .state import Failed, Loading, Resolved, ViewState

LOADING_MESSAGE = "Loading weather data..."

ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.LOCATION_DENIED: "Unable to retrieve your location. Please enter a city name.",
    ErrorKind.LOCATION_UNAVAILABLE: "Geolocation is not supported on this device. Please enter a city name.",
    ErrorKind.NETWORK_FAILURE: "Error fetching weather data. Check the city name or your connection and try again.",
    ErrorKind.INVALID_RESPONSE: "The weather service sent data we could not read. Please try again.",
    ErrorKind.CONFIGURATION_MISSING: "Weather service is not configured: set WEATHERAPI_KEY.",
}

# condition label -> symbol, anything unknown shows the sun
SYMBOLS = {
    "sunny": "☀",
    "clear": "☀",
    "partly cloudy": "⛅",
    "cloudy": "☁",
    "rain": "🌧",
    "light rain": "🌧",
    "moderate rain": "🌧",
    "heavy rain": "💧",
}
DEFAULT_SYMBOL = "☀"


def condition_symbol(condition: str) -> str:
    return SYMBOLS.get(condition.strip().lower(), DEFAULT_SYMBOL)


def celsius(value: float) -> str:
    # 18.0 prints as 18, 18.5 stays 18.5
    return f"{value:g}°C"


def long_date(d: date) -> str:
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def error_message(kind: ErrorKind) -> str:
    return ERROR_MESSAGES[kind]


def forecast_card(day: ForecastDay) -> str:
    return f"{day.date:%A}: {condition_symbol(day.condition)} {celsius(day.avg_temp_c)} {day.condition}"


def render_snapshot(snapshot: WeatherSnapshot) -> str:
    lines: List[str] = [
        f"{snapshot.location_name} - {long_date(snapshot.localtime.date())}",
        f"{condition_symbol(snapshot.condition)} {celsius(snapshot.temp_c)} {snapshot.condition}",
        f"Feels like {celsius(snapshot.feelslike_c)}",
        f"Wind {snapshot.wind_kph:g} km/h",
        "",
        f"{len(snapshot.forecast)}-Day Forecast",
    ]
    lines.extend(forecast_card(day) for day in snapshot.forecast)
    return "\n".join(lines)


def render(state: ViewState) -> str:
    # exactly one of loading / error / snapshot, idle shows nothing
    if isinstance(state, Loading):
        return LOADING_MESSAGE
    if isinstance(state, Failed):
        return error_message(state.error.kind)
    if isinstance(state, Resolved):
        return render_snapshot(state.snapshot)
    return ""
