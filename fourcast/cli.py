"""CLI entry point for fourcast."""

import argparse
import json
import logging
import sys

from fourcast.config.loader import get_config_value, load_config, redacted_dump
from fourcast.config.schema import FourcastConfig
from fourcast.errors import FourcastError
from fourcast.ingest.google_client import GoogleMapsClient
from fourcast.ingest.staleness import forecast_age_minutes
from fourcast.ingest.weather_client import build_weather_client
from fourcast.models.location import Location
from fourcast.pipeline.forecast_orchestrator import ForecastOrchestrator
from fourcast.pipeline.location_resolver import LocationResolver
from fourcast.storage.database import connect, run_migrations
from fourcast.storage.location_store import LocationStore

DEFAULT_CONFIG = "config/fourcast.yaml"
DEFAULT_DB = "data/fourcast.db"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="fourcast",
        description="Current weather for an address or place, cached per location",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="Config YAML path")
    parser.add_argument("--db", default=DEFAULT_DB, help="SQLite DB path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command")

    # forecast
    forecast_p = sub.add_parser("forecast", help="Get the forecast for a location")
    target = forecast_p.add_mutually_exclusive_group(required=True)
    target.add_argument("--address", help="Free-text address")
    target.add_argument("--place-id", help="Google place id")
    target.add_argument("--id", type=int, help="Stored location id")
    forecast_p.add_argument(
        "--lat", type=float, help="Latitude for a new address (skips geocoding)"
    )
    forecast_p.add_argument(
        "--lon", type=float, help="Longitude for a new address (skips geocoding)"
    )

    # locations
    sub.add_parser("locations", help="List stored locations and cache age")

    # set-coordinates
    coords_p = sub.add_parser(
        "set-coordinates", help="Override a location's coordinates"
    )
    coords_p.add_argument("id", type=int)
    coords_p.add_argument("lat", type=float)
    coords_p.add_argument("lon", type=float)

    # config show / config get
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    get_p = config_sub.add_parser("get", help="Display one config value")
    get_p.add_argument("key", help="Dotted key, e.g. http.max_retries")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    try:
        if args.command == "forecast":
            return _cmd_forecast(config, args)
        elif args.command == "locations":
            return _cmd_locations(config, args)
        elif args.command == "set-coordinates":
            return _cmd_set_coordinates(config, args)
        elif args.command == "config":
            return _cmd_config(config, args)
        else:
            parser.print_help()
            return 1
    except (FourcastError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _open_store(config: FourcastConfig, args) -> LocationStore:
    conn = connect(args.db)
    run_migrations(conn)
    return LocationStore(conn, freshness_minutes=config.cache.freshness_minutes)


def _cmd_forecast(config: FourcastConfig, args) -> int:
    if (args.lat is None) != (args.lon is None):
        print("Error: --lat and --lon must be given together", file=sys.stderr)
        return 1

    store = _open_store(config, args)
    try:
        location = _resolve_location(config, store, args)
        client = build_weather_client(config)
        try:
            lookup = ForecastOrchestrator(store, client).lookup(location)
        finally:
            client.close()
        print(json.dumps(lookup.to_dict(), indent=2))
        return 0
    finally:
        store.conn.close()


def _resolve_location(config: FourcastConfig, store: LocationStore, args) -> Location:
    if args.id is not None:
        location = store.get(args.id)
        if location is None:
            raise ValueError(f"No location with id {args.id}")
        return location

    if args.address and args.lat is not None:
        existing = store.find_by_address(args.address)
        if existing is not None:
            return existing
        return store.create(args.address, args.lat, args.lon)

    if args.place_id:
        existing = store.find_by_place_id(args.place_id)
    else:
        existing = store.find_by_address(args.address)
    if existing is not None and existing.has_coordinates:
        return existing

    if not config.geocoding.enabled:
        return LocationResolver(store).resolve(
            address=args.address, place_id=args.place_id
        )

    google = GoogleMapsClient(config.geocoding, config.http)
    try:
        resolver = LocationResolver(store, geocoder=google, places=google)
        return resolver.resolve(address=args.address, place_id=args.place_id)
    finally:
        google.close()


def _cmd_locations(config: FourcastConfig, args) -> int:
    store = _open_store(config, args)
    try:
        locations = store.list_locations()
        print(f"Locations: {len(locations)}")
        for loc in locations:
            age = forecast_age_minutes(loc.forecast_fetched_at)
            cache = "no forecast" if age == float("inf") else f"{age:.0f} min old"
            fresh = "fresh" if store.is_fresh(loc) else "stale"
            print(
                f"  #{loc.id} {loc.label} ({loc.latitude}, {loc.longitude}): "
                f"{cache}, {fresh}"
            )
        return 0
    finally:
        store.conn.close()


def _cmd_set_coordinates(config: FourcastConfig, args) -> int:
    store = _open_store(config, args)
    try:
        location = store.get(args.id)
        if location is None:
            print(f"Error: no location with id {args.id}", file=sys.stderr)
            return 1
        updated = store.set_coordinates(location, args.lat, args.lon)
        print(f"#{updated.id} {updated.label}: {updated.latitude}, {updated.longitude}")
        return 0
    finally:
        store.conn.close()


def _cmd_config(config: FourcastConfig, args) -> int:
    if args.config_command == "show":
        print(redacted_dump(config))
        return 0
    elif args.config_command == "get":
        try:
            value = get_config_value(config, args.key)
        except (KeyError, AttributeError, IndexError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if "api_key" in args.key and value:
            value = "[REDACTED]"
        print(value)
        return 0
    else:
        print("Use: config show | config get KEY")
        return 1


if __name__ == "__main__":
    sys.exit(main())
