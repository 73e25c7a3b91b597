"""Tests for database connection, WAL mode, and migrations."""

import sqlite3
from pathlib import Path

import pytest

from fourcast.storage.database import connect, run_migrations


class TestConnect:
    def test_wal_mode(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        mode = db.execute("PRAGMA journal_mode").fetchone()[0]
        assert mode == "wal"
        db.close()

    def test_creates_parent_directory(self, tmp_path: Path):
        db = connect(tmp_path / "nested" / "dir" / "test.db")
        assert (tmp_path / "nested" / "dir").is_dir()
        db.close()

    def test_row_factory(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        db.execute("CREATE TABLE t (x TEXT)")
        db.execute("INSERT INTO t VALUES ('hello')")
        row = db.execute("SELECT x FROM t").fetchone()
        assert row["x"] == "hello"
        db.close()


class TestMigrations:
    def test_applies_in_order(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        applied = run_migrations(db)
        assert applied == ["v001_initial", "v002_add_place_id"]

        columns = {row["name"] for row in db.execute("PRAGMA table_info(locations)")}
        assert {
            "address",
            "place_id",
            "latitude",
            "longitude",
            "forecast_json",
            "forecast_fetched_at",
        } <= columns
        db.close()

    def test_idempotent(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        applied1 = run_migrations(db)
        applied2 = run_migrations(db)
        assert len(applied1) > 0
        assert applied2 == []
        db.close()

    def test_place_id_unique(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        run_migrations(db)
        db.execute("INSERT INTO locations (address, place_id) VALUES ('a', 'p1')")
        with pytest.raises(sqlite3.IntegrityError):
            db.execute("INSERT INTO locations (address, place_id) VALUES ('b', 'p1')")
        db.close()

    def test_forecast_and_timestamp_must_be_set_together(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        run_migrations(db)
        with pytest.raises(sqlite3.IntegrityError):
            db.execute(
                "INSERT INTO locations (address, forecast_json) VALUES ('a', '{}')"
            )
        db.close()

    def test_latitude_range_checked(self, tmp_path: Path):
        db = connect(tmp_path / "test.db")
        run_migrations(db)
        with pytest.raises(sqlite3.IntegrityError):
            db.execute(
                "INSERT INTO locations (address, latitude, longitude) "
                "VALUES ('a', 91, 0)"
            )
        db.close()
