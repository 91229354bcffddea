# orchestration and business rules.
# provides a pure parser (payload -> snapshot) and retrieve(), which turns every failure into a value

from __future__ import annotations
import logging
from datetime import date, datetime
from typing import Any, Union
from .client import InvalidResponseError, WeatherAPIClient, WeatherAPIError
from .models import FORECAST_DAYS, ForecastDay, Query, RetrievalError, WeatherSnapshot

logger = logging.getLogger(__name__)

# weatherAPI localtime is "YYYY-MM-DD H:MM", hour not always zero padded
LOCALTIME_FORMAT = "%Y-%m-%d %H:%M"


def _number(value: Any, field: str) -> float:
    # bool is an int subclass but never a valid reading
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidResponseError(f"{field} is not a number: {value!r}")
    return float(value)


def _text(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise InvalidResponseError(f"{field} is not a string: {value!r}")
    return value


def _forecast_day(entry: Any, index: int) -> ForecastDay:
    prefix = f"forecast.forecastday[{index}]"
    try:
        raw_date = _text(entry["date"], f"{prefix}.date")
        day = entry["day"]
        avg = _number(day["avgtemp_c"], f"{prefix}.day.avgtemp_c")
        condition = _text(day["condition"]["text"], f"{prefix}.day.condition.text")
    except (KeyError, TypeError) as exc:
        raise InvalidResponseError(f"Unexpected API shape: missing {prefix} field {exc}") from exc

    try:
        parsed = date.fromisoformat(raw_date)
    except ValueError as exc:
        raise InvalidResponseError(f"{prefix}.date is not a date: {raw_date!r}") from exc
    return ForecastDay(date=parsed, avg_temp_c=avg, condition=condition)


# transform raw provider payload into our typed snapshot and check shape
def parse_snapshot(data: Any) -> WeatherSnapshot:
    # weatherAPI shape: data["location"], data["current"], data["forecast"]["forecastday"][i]["day"]
    try:
        location = data["location"]
        current = data["current"]
        name = _text(location["name"], "location.name")
        raw_localtime = _text(location["localtime"], "location.localtime")
        temp_c = _number(current["temp_c"], "current.temp_c")
        feelslike_c = _number(current["feelslike_c"], "current.feelslike_c")
        condition = _text(current["condition"]["text"], "current.condition.text")
        wind_kph = _number(current["wind_kph"], "current.wind_kph")
        days = data["forecast"]["forecastday"]
    except (KeyError, TypeError) as exc:
        raise InvalidResponseError(f"Unexpected API shape: missing {exc}") from exc

    try:
        localtime = datetime.strptime(raw_localtime, LOCALTIME_FORMAT)
    except ValueError as exc:
        raise InvalidResponseError(f"location.localtime is not a timestamp: {raw_localtime!r}") from exc

    if not isinstance(days, list) or len(days) < FORECAST_DAYS:
        raise InvalidResponseError(
            f"forecast.forecastday must hold at least {FORECAST_DAYS} entries"
        )

    # provider order is chronological starting today, anything past the third day is dropped
    forecast = tuple(_forecast_day(entry, i) for i, entry in enumerate(days[:FORECAST_DAYS]))

    return WeatherSnapshot(
        location_name=name,
        localtime=localtime,
        temp_c=temp_c,
        feelslike_c=feelslike_c,
        condition=condition,
        wind_kph=wind_kph,
        forecast=forecast,
    )


# single query path: fetch -> parse, one attempt, no cache
def retrieve(client: WeatherAPIClient, query: Query) -> Union[WeatherSnapshot, RetrievalError]:
    try:
        payload = client.get_forecast(query)
        snapshot = parse_snapshot(payload)
    except WeatherAPIError as exc:
        logger.warning("retrieval for %r failed (%s): %s", query.serialize(), exc.kind.value, exc)
        return RetrievalError(kind=exc.kind, detail=str(exc))

    logger.info("retrieved weather for %s", snapshot.location_name)
    return snapshot
