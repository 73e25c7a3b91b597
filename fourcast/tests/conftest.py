"""Shared test fixtures."""

import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

import pytest

from fourcast.config.schema import HttpConfig
from fourcast.models.forecast import CurrentConditions, NormalizedForecast
from fourcast.storage.database import connect, run_migrations
from fourcast.storage.location_store import LocationStore

FIXTURE_DIR = Path(__file__).parent / "fixtures"
NOW = datetime(2026, 10, 19, 15, 0, 0, tzinfo=UTC)


class FrozenClock:
    """Settable stand-in for utc_now()."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def load_fixture(name: str) -> dict:
    with open(FIXTURE_DIR / name) as f:
        return json.load(f)


def make_forecast(temperature: float = 72, conditions: str = "Sunny") -> NormalizedForecast:
    return NormalizedForecast(
        current=CurrentConditions(
            temperature=temperature,
            temperature_unit="F",
            conditions=conditions,
            observed_at=datetime(2026, 10, 19, 14, 0, 0, tzinfo=UTC),
            humidity=58,
            wind_speed="5 to 10 mph",
            wind_direction="SW",
        ),
        extended=(),
        provider="weather-gov",
    )


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURE_DIR


@pytest.fixture
def fast_http() -> HttpConfig:
    """HTTP settings with no retry delay and no overall deadline."""
    return HttpConfig(retry_delay_seconds=0.0, deadline_seconds=None)


@pytest.fixture
def db(tmp_path: Path) -> sqlite3.Connection:
    conn = connect(tmp_path / "test.db")
    run_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def store(db: sqlite3.Connection, clock: FrozenClock) -> LocationStore:
    return LocationStore(db, freshness_minutes=30, clock=clock)
