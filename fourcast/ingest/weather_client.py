"""Provider-agnostic weather client interface and factory."""

from typing import Protocol

from fourcast.config.schema import FourcastConfig, ProviderName
from fourcast.ingest.openweather_client import OpenWeatherClient
from fourcast.ingest.weather_gov_client import WeatherGovClient
from fourcast.models.forecast import NormalizedForecast


class WeatherClient(Protocol):
    def get_forecast(
        self, latitude: float, longitude: float, *, timeout: float | None = None
    ) -> NormalizedForecast: ...

    def close(self) -> None: ...


def build_weather_client(config: FourcastConfig) -> WeatherClient:
    """Construct the configured provider's client.

    Raises ConfigurationError when the provider's credential is missing.
    """
    if config.provider == ProviderName.OPENWEATHERMAP:
        return OpenWeatherClient(config.openweathermap, config.http)
    return WeatherGovClient(config.weather_gov, config.http)
