"""NWS api.weather.gov client: resolve the grid point, then fetch its forecast."""

import logging
import time

from fourcast.config.schema import HttpConfig, WeatherGovConfig
from fourcast.ingest.parsers import extract_forecast_url, parse_grid_forecast
from fourcast.ingest.request_executor import RequestExecutor
from fourcast.models.forecast import NormalizedForecast

logger = logging.getLogger(__name__)

WEATHER_GOV_ACCEPT = "application/geo+json"
COORDINATE_PRECISION = 4


class WeatherGovClient:
    def __init__(
        self,
        config: WeatherGovConfig | None = None,
        http_config: HttpConfig | None = None,
        executor: RequestExecutor | None = None,
    ):
        self.config = config or WeatherGovConfig()
        self.http_config = http_config or HttpConfig()
        self.base_url = self.config.base_url.rstrip("/")
        self.executor = executor or RequestExecutor(
            self.http_config, headers={"Accept": WEATHER_GOV_ACCEPT}
        )

    def close(self) -> None:
        self.executor.close()

    def __enter__(self) -> "WeatherGovClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def points_url(self, latitude: float, longitude: float) -> str:
        # weather.gov redirects unrounded coordinates, which can loop near grid edges
        lat = round(float(latitude), COORDINATE_PRECISION)
        lon = round(float(longitude), COORDINATE_PRECISION)
        return f"{self.base_url}/points/{lat},{lon}"

    def get_forecast(
        self, latitude: float, longitude: float, *, timeout: float | None = None
    ) -> NormalizedForecast:
        """Fetch current conditions for a coordinate pair.

        Two requests: /points/{lat},{lon} yields the gridpoint forecast URL,
        which is then fetched and its first period normalized. ``timeout``
        bounds the whole exchange including retry waits.
        """
        timeout = self.http_config.deadline_seconds if timeout is None else timeout
        deadline = time.monotonic() + timeout if timeout is not None else None

        points_url = self.points_url(latitude, longitude)
        logger.info("Resolving weather.gov grid point: %s", points_url)
        points_response = self.executor.get(points_url, deadline=deadline)
        forecast_url = extract_forecast_url(points_response)

        logger.info("Fetching weather.gov forecast: %s", forecast_url)
        forecast_response = self.executor.get(forecast_url, deadline=deadline)
        return parse_grid_forecast(forecast_response)
