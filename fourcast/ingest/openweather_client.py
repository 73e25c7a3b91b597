"""OpenWeatherMap current-weather client (single request, API key auth)."""

import logging
import time

from fourcast.config.schema import HttpConfig, OpenWeatherConfig
from fourcast.errors import ConfigurationError
from fourcast.ingest.parsers import parse_current_weather
from fourcast.ingest.request_executor import RequestExecutor
from fourcast.models.forecast import NormalizedForecast

logger = logging.getLogger(__name__)


class OpenWeatherClient:
    def __init__(
        self,
        config: OpenWeatherConfig,
        http_config: HttpConfig | None = None,
        executor: RequestExecutor | None = None,
    ):
        if not config.api_key:
            raise ConfigurationError(
                "OpenWeatherMap API key is not configured "
                f"(set openweathermap.api_key or {config.api_key_env})"
            )
        self.config = config
        self.http_config = http_config or HttpConfig()
        self.url = f"{config.base_url.rstrip('/')}/weather"
        self.executor = executor or RequestExecutor(
            self.http_config, headers={"Accept": "application/json"}
        )

    def close(self) -> None:
        self.executor.close()

    def __enter__(self) -> "OpenWeatherClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def get_forecast(
        self, latitude: float, longitude: float, *, timeout: float | None = None
    ) -> NormalizedForecast:
        timeout = self.http_config.deadline_seconds if timeout is None else timeout
        deadline = time.monotonic() + timeout if timeout is not None else None

        params = {
            "appid": self.config.api_key,
            "lat": latitude,
            "lon": longitude,
            "units": self.config.units,
        }
        logger.info(
            "Fetching OpenWeatherMap current weather for %s,%s", latitude, longitude
        )
        response = self.executor.get(self.url, params=params, deadline=deadline)
        return parse_current_weather(response, units=self.config.units)
