"""Repository for locations and their cached forecast."""

import sqlite3

LOCATION_COLUMNS = (
    "id, address, place_id, latitude, longitude, forecast_json, "
    "forecast_fetched_at, created_at, updated_at"
)


def get_location(conn: sqlite3.Connection, location_id: int) -> dict | None:
    row = conn.execute(
        f"SELECT {LOCATION_COLUMNS} FROM locations WHERE id = ?", (location_id,)
    ).fetchone()
    return dict(row) if row is not None else None


def find_by_place_id(conn: sqlite3.Connection, place_id: str) -> dict | None:
    row = conn.execute(
        f"SELECT {LOCATION_COLUMNS} FROM locations WHERE place_id = ?", (place_id,)
    ).fetchone()
    return dict(row) if row is not None else None


def find_by_address(conn: sqlite3.Connection, address: str) -> dict | None:
    """Oldest location recorded under exactly this address text."""
    row = conn.execute(
        f"SELECT {LOCATION_COLUMNS} FROM locations WHERE address = ? "
        "ORDER BY id LIMIT 1",
        (address,),
    ).fetchone()
    return dict(row) if row is not None else None


def insert_location(
    conn: sqlite3.Connection,
    address: str | None,
    latitude: float | None,
    longitude: float | None,
    place_id: str | None = None,
) -> int:
    """Insert a location. Returns the row id."""
    with conn:
        cursor = conn.execute(
            "INSERT INTO locations (address, place_id, latitude, longitude) "
            "VALUES (?, ?, ?, ?)",
            (address, place_id, latitude, longitude),
        )
    assert cursor.lastrowid is not None
    return cursor.lastrowid


def upsert_place(
    conn: sqlite3.Connection,
    place_id: str,
    address: str,
    latitude: float,
    longitude: float,
) -> int:
    """Insert or refresh the location keyed on place_id. Returns the row id."""
    with conn:
        conn.execute(
            "INSERT INTO locations (address, place_id, latitude, longitude) "
            "VALUES (?, ?, ?, ?) "
            "ON CONFLICT(place_id) DO UPDATE SET "
            "address = excluded.address, latitude = excluded.latitude, "
            "longitude = excluded.longitude, updated_at = CURRENT_TIMESTAMP",
            (address, place_id, latitude, longitude),
        )
    row = conn.execute(
        "SELECT id FROM locations WHERE place_id = ?", (place_id,)
    ).fetchone()
    return row[0]


def save_forecast(
    conn: sqlite3.Connection,
    location_id: int,
    forecast_json: str,
    fetched_at: str,
) -> None:
    """Replace the cached forecast and its timestamp in one statement."""
    with conn:
        cursor = conn.execute(
            "UPDATE locations SET forecast_json = ?, forecast_fetched_at = ?, "
            "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (forecast_json, fetched_at, location_id),
        )
    if cursor.rowcount != 1:
        raise KeyError(f"Location {location_id} not found")


def set_coordinates(
    conn: sqlite3.Connection, location_id: int, latitude: float, longitude: float
) -> None:
    """Override coordinates and drop the forecast cached for the old ones."""
    with conn:
        cursor = conn.execute(
            "UPDATE locations SET latitude = ?, longitude = ?, "
            "forecast_json = NULL, forecast_fetched_at = NULL, "
            "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (latitude, longitude, location_id),
        )
    if cursor.rowcount != 1:
        raise KeyError(f"Location {location_id} not found")


def list_locations(conn: sqlite3.Connection, limit: int = 100) -> list[dict]:
    rows = conn.execute(
        f"SELECT {LOCATION_COLUMNS} FROM locations ORDER BY updated_at DESC, id DESC "
        "LIMIT ?",
        (limit,),
    ).fetchall()
    return [dict(r) for r in rows]
