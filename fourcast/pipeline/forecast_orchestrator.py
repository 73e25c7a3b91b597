"""Forecast orchestrator: serve from cache while fresh, otherwise fetch and store."""

import logging
from dataclasses import dataclass

from fourcast.errors import FourcastError, MissingCoordinatesError
from fourcast.ingest.weather_client import WeatherClient
from fourcast.models.forecast import NormalizedForecast
from fourcast.models.location import Location
from fourcast.storage.location_store import LocationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForecastLookup:
    location: Location
    forecast: NormalizedForecast
    cached: bool

    def to_dict(self) -> dict:
        return {
            "id": self.location.id,
            "place_id": self.location.place_id,
            "address": self.location.address,
            "latitude": self.location.latitude,
            "longitude": self.location.longitude,
            "cached": self.cached,
            "forecast_fetched_at": (
                self.location.forecast_fetched_at.isoformat()
                if self.location.forecast_fetched_at
                else None
            ),
            "forecast": self.forecast.to_dict(),
        }


class ForecastOrchestrator:
    def __init__(
        self,
        store: LocationStore,
        client: WeatherClient,
        timeout: float | None = None,
    ):
        self.store = store
        self.client = client
        self.timeout = timeout

    def get_forecast(self, location: Location) -> NormalizedForecast:
        return self.lookup(location).forecast

    def lookup(self, location: Location) -> ForecastLookup:
        """Return the cached forecast if fresh, else fetch and cache a new one.

        A failed fetch propagates its typed error and leaves any previously
        cached forecast untouched.
        """
        if not location.has_coordinates:
            raise MissingCoordinatesError(
                f"Cannot fetch a forecast for {location.label} without coordinates"
            )

        if location.forecast is not None and self.store.is_fresh(location):
            logger.info("Serving cached forecast for %s", location.label)
            return ForecastLookup(location, location.forecast, cached=True)

        assert location.latitude is not None and location.longitude is not None
        logger.info(
            "Fetching forecast for %s at (%s, %s)",
            location.label, location.latitude, location.longitude,
        )
        try:
            forecast = self.client.get_forecast(
                location.latitude, location.longitude, timeout=self.timeout
            )
        except FourcastError as e:
            logger.error("Forecast fetch failed for %s: %s", location.label, e)
            raise

        updated = self.store.apply_forecast(location, forecast)
        return ForecastLookup(updated, forecast, cached=False)
