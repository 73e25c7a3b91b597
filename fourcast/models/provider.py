"""Pydantic schemas for the upstream provider payloads we read.

Only the fields the parsers consume are declared; everything else in the
payload is ignored.
"""

from datetime import datetime

from pydantic import BaseModel, Field

# --- api.weather.gov ---


class PointsProperties(BaseModel):
    forecast: str = Field(min_length=1)


class PointsResponse(BaseModel):
    properties: PointsProperties


class QuantitativeValue(BaseModel):
    value: float | None = None
    unitCode: str | None = None


class ForecastPeriodPayload(BaseModel):
    startTime: datetime
    temperature: float
    temperatureUnit: str = "F"
    shortForecast: str
    detailedForecast: str | None = None
    relativeHumidity: QuantitativeValue | None = None
    windSpeed: str | None = None
    windDirection: str | None = None
    icon: str | None = None


class ForecastProperties(BaseModel):
    periods: list[ForecastPeriodPayload] = Field(min_length=1)


class GridForecastResponse(BaseModel):
    properties: ForecastProperties


# --- OpenWeatherMap current weather ---


class WeatherCondition(BaseModel):
    id: int | None = None
    main: str | None = None
    description: str | None = None
    icon: str | None = None


class MainBlock(BaseModel):
    temp: float
    feels_like: float | None = None
    temp_min: float | None = None
    temp_max: float | None = None
    pressure: float | None = None
    humidity: float | None = None


class WindBlock(BaseModel):
    speed: float | None = None
    deg: float | None = None
    gust: float | None = None


class SysBlock(BaseModel):
    country: str | None = None
    sunrise: int | None = None
    sunset: int | None = None


class CurrentWeatherResponse(BaseModel):
    weather: list[WeatherCondition] = Field(min_length=1)
    main: MainBlock
    wind: WindBlock = WindBlock()
    sys: SysBlock = SysBlock()
    dt: int
    name: str | None = None


# --- Google Maps Platform (geocoding / place details) ---


class LatLng(BaseModel):
    lat: float
    lng: float


class Geometry(BaseModel):
    location: LatLng


class PlaceResult(BaseModel):
    formatted_address: str = Field(min_length=1)
    geometry: Geometry
    place_id: str | None = None
    name: str | None = None
