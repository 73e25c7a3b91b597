"""Location model: identity, coordinates and the cached forecast."""

from dataclasses import dataclass
from datetime import datetime

from fourcast.models.forecast import NormalizedForecast

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)


@dataclass(frozen=True)
class Location:
    id: int
    address: str | None
    place_id: str | None
    latitude: float | None
    longitude: float | None
    forecast: NormalizedForecast | None = None
    forecast_fetched_at: datetime | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def label(self) -> str:
        return self.address or self.place_id or f"location #{self.id}"


@dataclass(frozen=True)
class PlaceDetails:
    """Result of a place-details or geocoding lookup."""

    formatted_address: str
    latitude: float
    longitude: float
    place_id: str | None = None
    name: str | None = None


def validate_coordinates(latitude: float, longitude: float) -> tuple[float, float]:
    """Return coordinates as floats, raising ValueError when out of range."""
    lat = float(latitude)
    lon = float(longitude)
    if not LATITUDE_RANGE[0] <= lat <= LATITUDE_RANGE[1]:
        raise ValueError(f"Latitude {lat} outside [-90, 90]")
    if not LONGITUDE_RANGE[0] <= lon <= LONGITUDE_RANGE[1]:
        raise ValueError(f"Longitude {lon} outside [-180, 180]")
    return lat, lon
