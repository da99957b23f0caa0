# Rev 1.0.0

"""Smoke tests for the short-lived SQLite handle."""
from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from dbdoctor.repositories.db import Database, database_uri


def _db(tmp_path: Path) -> Path:
    db_path = tmp_path / "hotspot.db"
    conn = sqlite3.connect(db_path)
    try:
        with conn:
            conn.execute("CREATE TABLE settings (key TEXT PRIMARY KEY, value TEXT)")
            conn.execute("INSERT INTO settings VALUES ('router_ip', '192.168.88.1')")
    finally:
        conn.close()
    return db_path


def test_database_uri_never_creates(tmp_path: Path) -> None:
    assert database_uri(tmp_path / "hotspot.db").endswith("hotspot.db?mode=rw")
    assert database_uri(tmp_path / "hotspot.db", readonly=True).endswith("?mode=ro")


def test_opening_missing_file_raises_instead_of_creating(tmp_path: Path) -> None:
    with pytest.raises(sqlite3.OperationalError):
        Database(tmp_path / "hotspot.db")
    assert not (tmp_path / "hotspot.db").exists()


def test_pragma_result_and_scalar(tmp_path: Path) -> None:
    with Database(_db(tmp_path)) as db:
        assert db.pragma_result("integrity_check") == "ok"
        assert db.pragma_rows("quick_check") == ["ok"]
        assert db.scalar("SELECT COUNT(*) FROM settings") == 1
        row = db.conn.execute("SELECT key, value FROM settings").fetchone()
        assert row["value"] == "192.168.88.1"


def test_readonly_handle_rejects_writes(tmp_path: Path) -> None:
    with Database(_db(tmp_path), readonly=True) as db:
        with pytest.raises(sqlite3.OperationalError):
            db.conn.execute("DELETE FROM settings")


def test_vacuum_keeps_rows(tmp_path: Path) -> None:
    db_path = _db(tmp_path)
    with Database(db_path) as db:
        db.vacuum()
        assert db.scalar("SELECT COUNT(*) FROM settings") == 1
