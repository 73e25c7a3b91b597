"""Google Maps Platform client: geocoding and place details."""

import logging
from dataclasses import replace

import httpx
from pydantic import ValidationError

from fourcast.config.schema import GeocodingConfig, HttpConfig
from fourcast.errors import (
    ConfigurationError,
    LocationNotFoundError,
    MalformedResponseError,
    UpstreamError,
)
from fourcast.ingest.request_executor import RequestExecutor
from fourcast.models.location import PlaceDetails
from fourcast.models.provider import PlaceResult

logger = logging.getLogger(__name__)

PLACE_DETAILS_FIELDS = "formatted_address,geometry/location,name,place_id"
NOT_FOUND_STATUSES = frozenset({"ZERO_RESULTS", "NOT_FOUND", "INVALID_REQUEST"})


class GoogleMapsClient:
    def __init__(
        self,
        config: GeocodingConfig,
        http_config: HttpConfig | None = None,
        executor: RequestExecutor | None = None,
    ):
        if not config.api_key:
            raise ConfigurationError(
                "Google Maps API key is not configured "
                f"(set geocoding.api_key or {config.api_key_env})"
            )
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.executor = executor or RequestExecutor(
            http_config or HttpConfig(), headers={"Accept": "application/json"}
        )

    def close(self) -> None:
        self.executor.close()

    def resolve(self, address: str) -> PlaceDetails:
        """Geocode a free-text address to its best match."""
        url = f"{self.base_url}/geocode/json"
        logger.info("Geocoding address: %s", address)
        response = self.executor.get(
            url, params={"address": address, "key": self.config.api_key}
        )
        data = self._checked_json(response, url, query=address)
        results = data.get("results") or []
        if not results:
            raise LocationNotFoundError(f"No geocoding results for {address!r}")
        return _to_details(results[0])

    def lookup(self, place_id: str) -> PlaceDetails:
        """Fetch formatted address and coordinates for a place id."""
        url = f"{self.base_url}/place/details/json"
        logger.info("Fetching place details for place_id=%s", place_id)
        response = self.executor.get(
            url,
            params={
                "place_id": place_id,
                "fields": PLACE_DETAILS_FIELDS,
                "key": self.config.api_key,
            },
        )
        data = self._checked_json(response, url, query=place_id)
        if not data.get("result"):
            raise LocationNotFoundError(f"No place details for place_id={place_id}")
        details = _to_details(data["result"])
        if details.place_id is None:
            details = replace(details, place_id=place_id)
        return details

    def _checked_json(self, response: httpx.Response, url: str, query: str) -> dict:
        """Google reports failures in a ``status`` field on HTTP 200."""
        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Non-JSON response from {url}") from e
        status = data.get("status")
        if status == "OK":
            return data
        if status in NOT_FOUND_STATUSES:
            raise LocationNotFoundError(f"Google returned {status} for {query!r}")
        message = data.get("error_message") or status or "unknown error"
        logger.error("Google Maps API error: status=%s message=%s", status, message)
        raise UpstreamError(response.status_code, url=url, body=f"{status}: {message}")


def _to_details(result: dict) -> PlaceDetails:
    try:
        place = PlaceResult.model_validate(result)
    except ValidationError as e:
        raise MalformedResponseError(
            f"Incomplete place result: {e.error_count()} error(s)"
        ) from e
    return PlaceDetails(
        formatted_address=place.formatted_address,
        latitude=place.geometry.location.lat,
        longitude=place.geometry.location.lng,
        place_id=place.place_id,
        name=place.name,
    )
