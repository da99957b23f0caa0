# Rev 1.0.0

"""End-to-end tests for the seven-step diagnostic report."""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import pytest

from dbdoctor import main as driver
from dbdoctor.config import DiagnosticConfig
from dbdoctor.main import main, run_diagnostics
from dbdoctor.models.results import IntegrityResult

LOGGER = logging.getLogger("dbdoctor.tests")


def _config(tmp_path: Path) -> DiagnosticConfig:
    return DiagnosticConfig(
        db_path=tmp_path / "hotspot.db",
        backup_dir=tmp_path / "backups",
        log_dir=tmp_path / "logs",
        lock_timeout=0.1,
    )


def _healthy(config: DiagnosticConfig, *, with_audit_logs: bool = True) -> None:
    conn = sqlite3.connect(config.db_path)
    try:
        with conn:
            conn.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, username TEXT)")
            conn.execute("CREATE TABLE settings (id INTEGER PRIMARY KEY, value TEXT)")
            if with_audit_logs:
                conn.execute("CREATE TABLE audit_logs (id INTEGER PRIMARY KEY, action TEXT)")
                conn.execute("INSERT INTO audit_logs(action) VALUES ('LOGIN')")
            conn.execute("INSERT INTO users(username) VALUES ('admin')")
    finally:
        conn.close()


def _run(config: DiagnosticConfig, **flags) -> int:
    return run_diagnostics(config, logger=LOGGER, **flags)


def test_missing_database_stops_after_step_one(tmp_path: Path, capsys) -> None:
    config = _config(tmp_path)

    assert _run(config) == 1

    out = capsys.readouterr().out
    assert "❌ Database file does not exist" in out
    assert "setup-db" in out
    assert "Step 2" not in out


@pytest.mark.parametrize("flags", [{}, {"repair": True}, {"backup": True, "repair": True}])
def test_zero_byte_database_stops_at_step_three(tmp_path: Path, capsys, flags) -> None:
    config = _config(tmp_path)
    config.db_path.touch()

    assert _run(config, **flags) == 1

    out = capsys.readouterr().out
    assert "Step 3: Checking disk space..." in out
    assert "0 bytes - possible disk space issue" in out
    assert "Step 4" not in out
    assert not config.backup_dir.exists()


def test_permission_error_is_fatal(tmp_path: Path, capsys, monkeypatch) -> None:
    config = _config(tmp_path)
    _healthy(config)
    monkeypatch.setattr(driver.os, "access", lambda path, mode: False)

    assert _run(config) == 1

    out = capsys.readouterr().out
    assert "❌ Database file permission error" in out
    assert "chmod 644 hotspot.db" in out
    assert "Step 3" not in out


def test_disk_step_errors_are_only_warnings(tmp_path: Path, capsys, monkeypatch) -> None:
    config = _config(tmp_path)
    _healthy(config)

    def _no_usage(directory):
        raise OSError("statvfs failed")

    monkeypatch.setattr(driver, "_free_space", _no_usage)

    assert _run(config) == 0
    assert "⚠️  Error checking file stats: statvfs failed" in capsys.readouterr().out


def test_locked_database_is_fatal(tmp_path: Path, capsys) -> None:
    config = _config(tmp_path)
    _healthy(config)
    holder = sqlite3.connect(config.db_path, isolation_level=None)
    holder.execute("BEGIN EXCLUSIVE")
    try:
        code = _run(config)
    finally:
        holder.execute("ROLLBACK")
        holder.close()

    assert code == 1
    out = capsys.readouterr().out
    assert "❌ Database is locked by another process" in out
    assert "lsof hotspot.db" in out
    assert "Step 5" not in out


def test_corrupt_database_without_repair_suggests_flag(tmp_path: Path, capsys) -> None:
    config = _config(tmp_path)
    config.db_path.write_bytes(b"definitely not sqlite " * 100)

    assert _run(config) == 1

    out = capsys.readouterr().out
    assert "❌ Error checking database:" in out
    assert "Run with --repair flag" in out
    assert not config.backup_dir.exists()


def test_failed_repair_is_fatal_but_leaves_backup(tmp_path: Path, capsys) -> None:
    config = _config(tmp_path)
    config.db_path.write_bytes(b"definitely not sqlite " * 100)

    assert _run(config, repair=True) == 1

    out = capsys.readouterr().out
    assert "🔧 Attempting to repair database..." in out
    assert "❌ Error repairing database:" in out
    assert "Restore from backup" in out
    assert len(list(config.backup_dir.iterdir())) == 1


def test_successful_repair_continues_to_backup_and_stats(tmp_path: Path, capsys, monkeypatch) -> None:
    config = _config(tmp_path)
    _healthy(config)
    monkeypatch.setattr(
        driver.db_helper,
        "check_database_integrity",
        lambda db_path: IntegrityResult(
            valid=False, message="Database integrity check failed", details={}
        ),
    )

    assert _run(config, repair=True) == 0

    out = capsys.readouterr().out
    assert "✓ Database repaired successfully" in out
    assert "Backup saved to:" in out
    assert "Step 6: Creating backup..." in out
    assert "Database is healthy and ready to use." in out
    # one copy taken by the repair, one by step 6
    assert len(list(config.backup_dir.iterdir())) == 2


def test_healthy_database_prints_full_report(tmp_path: Path, capsys) -> None:
    config = _config(tmp_path)
    _healthy(config)

    assert _run(config) == 0

    out = capsys.readouterr().out
    for step in (1, 2, 3, 4, 5, 7):
        assert f"Step {step}:" in out
    assert "Step 6" not in out
    assert "✓ Database is not locked" in out
    assert "✓ Database integrity OK" in out
    assert "  Tables: 3" in out
    assert "  Users: 1" in out
    assert "  Audit logs: 1" in out
    assert out.rstrip().endswith("Database is healthy and ready to use.")
    assert not config.backup_dir.exists()


def test_backup_flag_writes_a_copy(tmp_path: Path, capsys) -> None:
    config = _config(tmp_path)
    _healthy(config)

    assert _run(config, backup=True) == 0

    out = capsys.readouterr().out
    assert "✓ Backup created:" in out
    backups = list(config.backup_dir.iterdir())
    assert len(backups) == 1
    assert backups[0].read_bytes() == config.db_path.read_bytes()


def test_backup_failure_is_only_a_warning(tmp_path: Path, capsys) -> None:
    config = _config(tmp_path)
    _healthy(config)
    config.backup_dir.write_text("a file where the directory should be")

    assert _run(config, backup=True) == 0
    assert "⚠️  Backup failed:" in capsys.readouterr().out


def test_statistics_failure_is_only_a_warning(tmp_path: Path, capsys) -> None:
    config = _config(tmp_path)
    _healthy(config, with_audit_logs=False)

    assert _run(config) == 0

    out = capsys.readouterr().out
    assert "⚠️  Could not get statistics: no such table: audit_logs" in out
    assert "Database is healthy and ready to use." in out


def test_main_parses_flags(tmp_path: Path, capsys, monkeypatch) -> None:
    config = _config(tmp_path)
    _healthy(config)
    monkeypatch.setattr(driver, "setup_logging", lambda **kwargs: LOGGER)

    assert main(["--backup"], config=config) == 0
    assert "Step 6: Creating backup..." in capsys.readouterr().out

    with pytest.raises(SystemExit):
        main(["--vacuum"], config=config)


def test_repair_flag_fixes_orphaned_index_pages(tmp_path: Path, capsys) -> None:
    config = _config(tmp_path)
    _healthy(config)
    conn = sqlite3.connect(config.db_path, isolation_level=None)
    try:
        conn.execute("CREATE INDEX ix ON users(username)")
        conn.executemany(
            "INSERT INTO users(username) VALUES (?)", [(f"siswa-{n:04d}",) for n in range(500)]
        )
        conn.execute("PRAGMA writable_schema=ON")
        conn.execute("DELETE FROM sqlite_master WHERE name = 'ix'")
    finally:
        conn.close()
    before = config.db_path.read_bytes()

    assert _run(config, repair=True) == 0

    out = capsys.readouterr().out
    assert "❌ Database integrity check failed" in out
    assert "is never used" in out
    assert "✓ Database repaired successfully" in out
    assert "  Users: 501" in out
    backups = sorted(config.backup_dir.iterdir())
    assert len(backups) == 2
    assert before in [path.read_bytes() for path in backups]
