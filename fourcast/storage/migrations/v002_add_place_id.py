"""Key locations on the provider-issued place id when one is known."""

import sqlite3


def up(conn: sqlite3.Connection) -> None:
    conn.execute("ALTER TABLE locations ADD COLUMN place_id TEXT")
    conn.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_locations_place_id "
        "ON locations(place_id)"
    )
