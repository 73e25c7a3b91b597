"""Initial schema: locations with their cached forecast."""

import sqlite3

DDL = [
    """
    CREATE TABLE IF NOT EXISTS locations (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        address TEXT,
        latitude REAL CHECK (latitude BETWEEN -90 AND 90),
        longitude REAL CHECK (longitude BETWEEN -180 AND 180),
        forecast_json TEXT,
        forecast_fetched_at TEXT,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        CHECK ((forecast_json IS NULL) = (forecast_fetched_at IS NULL))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_locations_address ON locations(address)",
]


def up(conn: sqlite3.Connection) -> None:
    for statement in DDL:
        conn.execute(statement)
