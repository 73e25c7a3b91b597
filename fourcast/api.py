"""FastAPI surface: forecast lookup by address or place id."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, model_validator

from fourcast.config.loader import load_config
from fourcast.config.schema import FourcastConfig
from fourcast.errors import (
    ConfigurationError,
    CorruptRecordError,
    LocationNotFoundError,
    MalformedResponseError,
    MissingCoordinatesError,
    NetworkError,
    RedirectLimitExceeded,
    UpstreamError,
)
from fourcast.ingest.google_client import GoogleMapsClient
from fourcast.ingest.staleness import forecast_age_minutes
from fourcast.ingest.weather_client import WeatherClient, build_weather_client
from fourcast.pipeline.forecast_orchestrator import ForecastOrchestrator
from fourcast.pipeline.location_resolver import (
    Geocoder,
    LocationResolver,
    PlaceDetailsLookup,
)
from fourcast.storage.database import connect, run_migrations
from fourcast.storage.location_store import LocationStore

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("data") / "fourcast.db"
DEFAULT_CONFIG_PATH = Path("config") / "fourcast.yaml"

# Error kind -> (HTTP status, message shown to the caller)
ERROR_RESPONSES: dict[type[Exception], tuple[int, str]] = {
    NetworkError: (503, "Weather service is unreachable. Please try again later."),
    UpstreamError: (503, "Weather service returned an error. Please try again later."),
    RedirectLimitExceeded: (503, "Weather service redirected too many times."),
    MalformedResponseError: (503, "Weather service returned an unexpected response."),
    LocationNotFoundError: (422, "Could not find the requested location."),
    MissingCoordinatesError: (422, "Could not determine coordinates for the location."),
    ValueError: (422, "Invalid location."),
    ConfigurationError: (500, "Server configuration error."),
    CorruptRecordError: (500, "Stored location data is unreadable."),
}


class ForecastRequest(BaseModel):
    address: str | None = None
    place_id: str | None = None

    @model_validator(mode="after")
    def _require_one(self) -> "ForecastRequest":
        if not (self.address or "").strip() and not (self.place_id or "").strip():
            raise ValueError("Address or place_id is required")
        return self


def create_app(
    config: FourcastConfig | None = None,
    db_path: str | Path = DEFAULT_DB_PATH,
    weather_client: WeatherClient | None = None,
    geocoder: Geocoder | None = None,
    places: PlaceDetailsLookup | None = None,
) -> FastAPI:
    """Build the app. Collaborators default to the configured providers.

    Missing credentials raise ConfigurationError here, at startup. With
    geocoding disabled only locations already stored with coordinates resolve.
    """
    if config is None:
        config = load_config(DEFAULT_CONFIG_PATH)

    owned = []
    if weather_client is None:
        weather_client = build_weather_client(config)
        owned.append(weather_client)
    if config.geocoding.enabled and (geocoder is None or places is None):
        google = GoogleMapsClient(config.geocoding, config.http)
        owned.append(google)
        geocoder = geocoder or google
        places = places or google

    conn = connect(db_path, check_same_thread=False)
    run_migrations(conn)
    store = LocationStore(conn, freshness_minutes=config.cache.freshness_minutes)
    resolver = LocationResolver(store, geocoder=geocoder, places=places)
    orchestrator = ForecastOrchestrator(store, weather_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        for client in owned:
            client.close()
        conn.close()

    app = FastAPI(title="fourcast", version="0.1.0", lifespan=lifespan)
    app.state.store = store
    app.state.resolver = resolver
    app.state.orchestrator = orchestrator

    for error_type, (status, message) in ERROR_RESPONSES.items():
        app.add_exception_handler(error_type, _error_handler(status, message))

    @app.post("/api/v1/forecasts")
    def create_forecast(body: ForecastRequest):
        """Resolve the location, then serve its forecast from cache or upstream."""
        location = resolver.resolve(address=body.address, place_id=body.place_id)
        return orchestrator.lookup(location).to_dict()

    @app.get("/api/locations")
    def get_locations(limit: int = 50):
        return [
            {
                "id": loc.id,
                "address": loc.address,
                "place_id": loc.place_id,
                "latitude": loc.latitude,
                "longitude": loc.longitude,
                "fresh": store.is_fresh(loc),
                "forecast_fetched_at": (
                    loc.forecast_fetched_at.isoformat()
                    if loc.forecast_fetched_at
                    else None
                ),
            }
            for loc in store.list_locations(limit)
        ]

    @app.get("/api/health")
    def get_health():
        locations = store.list_locations(limit=1)
        latest = locations[0] if locations else None
        age = forecast_age_minutes(latest.forecast_fetched_at) if latest else None
        return {
            "db_ok": True,
            "provider": config.provider.value,
            "last_forecast_age_minutes": (
                round(age, 1) if age is not None and age != float("inf") else None
            ),
            "timestamp": datetime.now(UTC).isoformat(),
        }

    return app


def _error_handler(status: int, message: str):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "%s %s failed with %s: %s",
            request.method, request.url.path, type(exc).__name__, exc,
        )
        return JSONResponse({"error": message, "kind": type(exc).__name__}, status)

    return handler


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    uvicorn.run(create_app(), host="0.0.0.0", port=8777)
