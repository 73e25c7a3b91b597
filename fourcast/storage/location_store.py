"""LocationStore: location lookup plus the forecast cache freshness contract."""

import json
import logging
import sqlite3
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from fourcast.errors import CorruptRecordError
from fourcast.ingest.staleness import FRESHNESS_WINDOW_MINUTES, is_forecast_fresh
from fourcast.models.common import parse_timestamp, utc_now
from fourcast.models.forecast import NormalizedForecast
from fourcast.models.location import Location, validate_coordinates
from fourcast.storage import location_repo

logger = logging.getLogger(__name__)


class LocationStore:
    """Thread-safe facade over location_repo.

    Every public method takes the store lock, so a single connection opened
    with check_same_thread=False can back concurrent orchestrator calls.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        freshness_minutes: int = FRESHNESS_WINDOW_MINUTES,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.conn = conn
        self.freshness_minutes = freshness_minutes
        self.clock = clock
        self._lock = threading.Lock()

    # --- Freshness ---

    def is_fresh(self, location: Location) -> bool:
        if location.forecast is None:
            return False
        return is_forecast_fresh(
            location.forecast_fetched_at, self.freshness_minutes, self.clock()
        )

    def needs_update(self, location: Location) -> bool:
        return not self.is_fresh(location)

    def apply_forecast(
        self,
        location: Location,
        forecast: NormalizedForecast,
        timestamp: datetime | None = None,
    ) -> Location:
        """Replace the cached forecast and fetch timestamp together.

        The payload is serialized before touching the database and written in
        a single UPDATE, so a failure leaves both fields as they were.
        """
        fetched_at = timestamp or self.clock()
        forecast_json = json.dumps(forecast.to_dict())
        with self._lock:
            location_repo.save_forecast(
                self.conn, location.id, forecast_json, fetched_at.isoformat()
            )
        logger.info("Cached forecast for %s at %s", location.label, fetched_at)
        return replace(location, forecast=forecast, forecast_fetched_at=fetched_at)

    # --- Lookup / creation ---

    def get(self, location_id: int) -> Location | None:
        with self._lock:
            row = location_repo.get_location(self.conn, location_id)
        return _from_row(row) if row else None

    def find_by_place_id(self, place_id: str) -> Location | None:
        with self._lock:
            row = location_repo.find_by_place_id(self.conn, place_id)
        return _from_row(row) if row else None

    def find_by_address(self, address: str) -> Location | None:
        with self._lock:
            row = location_repo.find_by_address(self.conn, address)
        return _from_row(row) if row else None

    def create(
        self,
        address: str | None,
        latitude: float | None = None,
        longitude: float | None = None,
        place_id: str | None = None,
    ) -> Location:
        if (latitude is None) != (longitude is None):
            raise ValueError("Latitude and longitude must be given together")
        if latitude is not None and longitude is not None:
            latitude, longitude = validate_coordinates(latitude, longitude)
        with self._lock:
            location_id = location_repo.insert_location(
                self.conn, address, latitude, longitude, place_id=place_id
            )
        logger.info("Created location #%d for %s", location_id, address or place_id)
        return Location(
            id=location_id,
            address=address,
            place_id=place_id,
            latitude=latitude,
            longitude=longitude,
        )

    def upsert_place(
        self, place_id: str, address: str, latitude: float, longitude: float
    ) -> Location:
        """Create or refresh the record keyed on place_id."""
        latitude, longitude = validate_coordinates(latitude, longitude)
        with self._lock:
            location_id = location_repo.upsert_place(
                self.conn, place_id, address, latitude, longitude
            )
            row = location_repo.get_location(self.conn, location_id)
        assert row is not None
        return _from_row(row)

    def set_coordinates(
        self, location: Location, latitude: float, longitude: float
    ) -> Location:
        """Explicit override path for corrected coordinates; clears the cache."""
        latitude, longitude = validate_coordinates(latitude, longitude)
        with self._lock:
            location_repo.set_coordinates(self.conn, location.id, latitude, longitude)
        logger.info(
            "Coordinates for %s overridden to %s,%s", location.label, latitude, longitude
        )
        return replace(
            location,
            latitude=latitude,
            longitude=longitude,
            forecast=None,
            forecast_fetched_at=None,
        )

    def list_locations(self, limit: int = 100) -> list[Location]:
        with self._lock:
            rows = location_repo.list_locations(self.conn, limit)
        return [_from_row(r) for r in rows]


def _from_row(row: dict) -> Location:
    forecast = None
    fetched_at = None
    if row["forecast_json"] is not None:
        try:
            forecast = NormalizedForecast.from_dict(json.loads(row["forecast_json"]))
        except (ValueError, KeyError, TypeError) as e:
            logger.error(
                "Stored forecast for location #%d is unreadable: %s", row["id"], e
            )
            raise CorruptRecordError(
                f"Stored forecast for location #{row['id']} is unreadable"
            ) from e
        fetched_at = parse_timestamp(row["forecast_fetched_at"])
    return Location(
        id=row["id"],
        address=row["address"],
        place_id=row["place_id"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        forecast=forecast,
        forecast_fetched_at=fetched_at,
    )
