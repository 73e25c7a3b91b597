"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field

DEFAULT_USER_AGENT = "fourcast/0.1.0 (github.com/fourcast/fourcast)"


class ProviderName(StrEnum):
    WEATHER_GOV = "weather-gov"
    OPENWEATHERMAP = "openweathermap"


class HttpConfig(BaseModel):
    model_config = {"extra": "forbid"}

    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    connect_timeout_seconds: float = Field(default=5.0, gt=0.0)
    read_timeout_seconds: float = Field(default=10.0, gt=0.0)
    max_retries: int = Field(default=3, ge=0)
    retry_delay_seconds: float = Field(default=1.0, ge=0.0)
    max_redirects: int = Field(default=5, ge=0)
    deadline_seconds: float | None = Field(default=30.0, gt=0.0)


class WeatherGovConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = "https://api.weather.gov"


class OpenWeatherConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = "https://api.openweathermap.org/data/2.5"
    api_key: str = ""
    api_key_env: str = "OPENWEATHER_API_KEY"
    units: str = "imperial"


class GeocodingConfig(BaseModel):
    model_config = {"extra": "forbid"}

    enabled: bool = True
    base_url: str = "https://maps.googleapis.com/maps/api"
    api_key: str = ""
    api_key_env: str = "GOOGLE_MAPS_API_KEY"


class CacheConfig(BaseModel):
    model_config = {"extra": "forbid"}

    freshness_minutes: int = Field(default=30, ge=1)


class FourcastConfig(BaseModel):
    model_config = {"extra": "forbid"}

    provider: ProviderName = ProviderName.WEATHER_GOV
    http: HttpConfig = HttpConfig()
    weather_gov: WeatherGovConfig = WeatherGovConfig()
    openweathermap: OpenWeatherConfig = OpenWeatherConfig()
    geocoding: GeocodingConfig = GeocodingConfig()
    cache: CacheConfig = CacheConfig()
