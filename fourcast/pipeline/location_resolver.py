"""Resolve an address or place id to a stored Location with coordinates."""

import logging
from typing import Protocol

from fourcast.errors import LocationNotFoundError
from fourcast.models.location import Location, PlaceDetails
from fourcast.storage.location_store import LocationStore

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    def resolve(self, address: str) -> PlaceDetails: ...


class PlaceDetailsLookup(Protocol):
    def lookup(self, place_id: str) -> PlaceDetails: ...


class LocationResolver:
    """Find-or-create locations, calling the geocoding collaborators only
    for places we have not stored with coordinates yet.

    With no collaborators (geocoding disabled) only stored locations resolve.
    """

    def __init__(
        self,
        store: LocationStore,
        geocoder: Geocoder | None = None,
        places: PlaceDetailsLookup | None = None,
    ):
        self.store = store
        self.geocoder = geocoder
        self.places = places

    def resolve(
        self, address: str | None = None, place_id: str | None = None
    ) -> Location:
        """Place id wins when both are given; raises ValueError when neither is."""
        place_id = (place_id or "").strip() or None
        address = (address or "").strip() or None

        if place_id is not None:
            return self.resolve_place(place_id)
        if address is not None:
            return self.resolve_address(address)
        raise ValueError("Address or place id is required")

    def resolve_place(self, place_id: str) -> Location:
        existing = self.store.find_by_place_id(place_id)
        if existing is not None and existing.has_coordinates:
            return existing
        if self.places is None:
            raise LocationNotFoundError(
                f"Unknown place_id={place_id} and geocoding is disabled"
            )

        logger.info("No stored coordinates for place_id=%s, fetching details", place_id)
        details = self.places.lookup(place_id)
        return self.store.upsert_place(
            place_id, details.formatted_address, details.latitude, details.longitude
        )

    def resolve_address(self, address: str) -> Location:
        existing = self.store.find_by_address(address)
        if existing is not None and existing.has_coordinates:
            return existing
        if self.geocoder is None:
            raise LocationNotFoundError(
                f"No stored coordinates for {address!r} and geocoding is disabled"
            )

        logger.info("Geocoding new address: %s", address)
        result = self.geocoder.resolve(address)
        if existing is not None:
            return self.store.set_coordinates(existing, result.latitude, result.longitude)
        return self.store.create(address, result.latitude, result.longitude)
