"""Map provider payloads onto NormalizedForecast.

Each parser validates the payload against its pydantic schema first and
raises MalformedResponseError when a required path is missing.
"""

import logging
from datetime import UTC, datetime
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from fourcast.errors import MalformedResponseError
from fourcast.models.forecast import CurrentConditions, NormalizedForecast
from fourcast.models.provider import (
    CurrentWeatherResponse,
    GridForecastResponse,
    PointsResponse,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

WEATHER_GOV = "weather-gov"
OPENWEATHERMAP = "openweathermap"

COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]
UNIT_LABELS = {
    "imperial": ("F", "mph"),
    "metric": ("C", "m/s"),
    "standard": ("K", "m/s"),
}


def decode(response: httpx.Response, schema: type[T]) -> T:
    """Validate a JSON response body against schema."""
    try:
        return schema.model_validate_json(response.text)
    except ValidationError as e:
        logger.error(
            "Unexpected %s payload from %s: %s",
            schema.__name__, response.request.url, e,
        )
        raise MalformedResponseError(
            f"{schema.__name__} validation failed for {response.request.url}: "
            f"{e.error_count()} error(s)"
        ) from e


def extract_forecast_url(response: httpx.Response) -> str:
    """Pull properties.forecast out of a /points response."""
    return decode(response, PointsResponse).properties.forecast


def parse_grid_forecast(response: httpx.Response) -> NormalizedForecast:
    """Normalize a weather.gov gridpoint forecast from its first period.

    Only current conditions are produced; extended stays empty.
    """
    payload = decode(response, GridForecastResponse)
    current = payload.properties.periods[0]
    humidity = current.relativeHumidity.value if current.relativeHumidity else None

    return NormalizedForecast(
        current=CurrentConditions(
            temperature=current.temperature,
            temperature_unit=current.temperatureUnit,
            conditions=current.shortForecast,
            detailed_conditions=current.detailedForecast,
            humidity=humidity,
            wind_speed=current.windSpeed,
            wind_direction=current.windDirection,
            icon=current.icon,
            observed_at=current.startTime,
        ),
        extended=(),
        provider=WEATHER_GOV,
    )


def parse_current_weather(
    response: httpx.Response, units: str = "imperial"
) -> NormalizedForecast:
    """Normalize an OpenWeatherMap /weather response."""
    payload = decode(response, CurrentWeatherResponse)
    condition = payload.weather[0]
    temp_unit, speed_unit = UNIT_LABELS.get(units, UNIT_LABELS["standard"])

    conditions = (
        condition.description.title() if condition.description else condition.main
    )
    if not conditions:
        raise MalformedResponseError("Current weather payload has no condition text")

    wind_speed = None
    if payload.wind.speed is not None:
        wind_speed = f"{payload.wind.speed:g} {speed_unit}"

    return NormalizedForecast(
        current=CurrentConditions(
            temperature=payload.main.temp,
            temperature_unit=temp_unit,
            feels_like=payload.main.feels_like,
            conditions=conditions,
            humidity=payload.main.humidity,
            wind_speed=wind_speed,
            wind_direction=compass_direction(payload.wind.deg),
            icon=condition.icon,
            observed_at=datetime.fromtimestamp(payload.dt, UTC),
            location_name=payload.name or None,
        ),
        extended=(),
        provider=OPENWEATHERMAP,
    )


def compass_direction(degrees: float | None) -> str | None:
    """Convert a bearing in degrees to a 16-point compass label."""
    if degrees is None:
        return None
    index = int((degrees % 360) / 22.5 + 0.5) % 16
    return COMPASS_POINTS[index]
