# Rev 1.0.0

"""Entry point for the hotspot database diagnostic tool.

Usage: dbdoctor [--repair] [--backup]
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import List, Optional

from dbdoctor.config import ConfigError, DiagnosticConfig, load_config
from dbdoctor.logging_setup import setup_logging
from dbdoctor.models.results import StatsError
from dbdoctor.services import db_helper
from dbdoctor.utils.formatting import bytes_to_mb, format_file_size

RULE = "=" * 60


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dbdoctor",
        description="Diagnose, back up and repair the hotspot SQLite database.",
    )
    parser.add_argument(
        "--repair",
        action="store_true",
        help="attempt a VACUUM repair when the integrity check fails (implies --backup)",
    )
    parser.add_argument(
        "--backup",
        action="store_true",
        help="write a timestamped copy of the database to the backups directory",
    )
    return parser.parse_args(argv)


def _hint(first: str, *rest: str) -> None:
    print()
    print(f"💡 Solution: {first}".rstrip())
    for line in rest:
        print(f"   {line}")


def ensure_access(db_path: Path) -> None:
    """Raise PermissionError unless the file is both readable and writable."""
    if not os.access(db_path, os.R_OK | os.W_OK):
        raise PermissionError(f"{db_path} is not readable and writable by this user")


def _free_space(directory: Path) -> int:
    return shutil.disk_usage(directory).free


def _check_exists(db_path: Path) -> bool:
    print("Step 1: Checking database file...")
    if not db_path.exists():
        print(f"❌ Database file does not exist: {db_path}")
        _hint('Run "npm run setup-db" to create the database.')
        return False
    print(f"✓ Database file exists: {db_path}")
    return True


def _check_permissions(db_path: Path, logger: logging.Logger) -> bool:
    print("Step 2: Checking file permissions...")
    try:
        ensure_access(db_path)
    except PermissionError as exc:
        logger.error("Permission check failed: %s", exc)
        print(f"❌ Database file permission error: {exc}")
        _hint(f'Check file permissions with "ls -l {db_path.name}"', f"Fix permissions: chmod 644 {db_path.name}")
        return False
    print("✓ Database file is readable and writable")
    return True


def _check_disk(db_path: Path, logger: logging.Logger) -> bool:
    print("Step 3: Checking disk space...")
    try:
        size = db_path.stat().st_size
        print(f"✓ Database file size: {bytes_to_mb(size):.2f} MB")
        if size == 0:
            print("❌ Database file is 0 bytes - possible disk space issue")
            _hint('Check disk space with "df -h"')
            return False
        free = _free_space(db_path.parent)
        print(f"✓ Free disk space: {format_file_size(free)}")
    except OSError as exc:
        logger.warning("Error checking file stats for %s: %s", db_path, exc)
        print(f"⚠️  Error checking file stats: {exc}")
    return True


def _check_lock(config: DiagnosticConfig) -> bool:
    print("Step 4: Checking database lock...")
    lock = db_helper.check_database_lock(config.db_path, timeout=config.lock_timeout)
    if lock.locked:
        print(f"❌ {lock.message}")
        _hint(
            "",
            "1. Check for other application processes: ps aux | grep node",
            "2. Stop PM2: pm2 stop smansada-hotspot",
            f"3. Check for SQLite processes: lsof {config.db_path.name}",
        )
        return False
    print(f"✓ {lock.message}")
    return True


def _check_integrity(config: DiagnosticConfig, repair: bool) -> bool:
    print("Step 5: Checking database integrity...")
    integrity = db_helper.check_database_integrity(config.db_path)
    if integrity.valid:
        print(f"✓ {integrity.message}")
        return True

    print(f"❌ {integrity.message}")
    print(f"Details: {json.dumps(dict(integrity.details), indent=2, default=str)}")
    if not repair:
        _hint("Run with --repair flag to attempt repair:", "dbdoctor --repair")
        return False

    print()
    print("🔧 Attempting to repair database...")
    result = db_helper.repair_database(config.db_path, config.backup_dir)
    if not result.success:
        print(f"❌ {result.message}")
        _hint('Restore from backup or run "npm run setup-db" to recreate database.')
        return False
    print(f"✓ {result.message}")
    if result.backup_path:
        print(f"  Backup saved to: {result.backup_path}")
    return True


def _run_backup(config: DiagnosticConfig) -> None:
    print("Step 6: Creating backup...")
    backup = db_helper.backup_database(config.db_path, config.backup_dir, keep=config.backup_keep or 0)
    if backup.success:
        print(f"✓ Backup created: {backup.backup_path}")
        if backup.verified is False:
            print("⚠️  Backup copy did not pass its integrity check")
    else:
        print(f"⚠️  Backup failed: {backup.error}")
    print()


def _report_stats(config: DiagnosticConfig) -> None:
    print("Step 7: Database statistics...")
    stats = db_helper.get_database_stats(config.db_path)
    if isinstance(stats, StatsError):
        print(f"⚠️  Could not get statistics: {stats.error}")
    elif stats is not None:
        print(f"  File size: {stats.file_size_mb:.2f} MB")
        print(f"  Tables: {stats.tables}")
        print(f"  Users: {stats.users}")
        print(f"  Settings: {stats.settings}")
        print(f"  Audit logs: {stats.audit_logs}")
        print(f"  Last modified: {stats.modified.isoformat(sep=' ', timespec='seconds')}")
    print()


def _print_summary() -> None:
    print(RULE)
    print("Diagnostic Summary")
    print(RULE)
    print("✓ Database file exists and is accessible")
    print("✓ Database is not locked")
    print("✓ Database integrity check passed")
    print()
    print("Database is healthy and ready to use.")
    print()


def run_diagnostics(
    config: DiagnosticConfig,
    *,
    repair: bool = False,
    backup: bool = False,
    logger: Optional[logging.Logger] = None,
) -> int:
    """Run the seven diagnostic steps; return the process exit status."""
    logger = logger or setup_logging(log_dir=config.log_dir)
    db_path = Path(config.db_path)
    logger.info("Diagnosing %s (repair=%s, backup=%s)", db_path, repair, backup)

    print(RULE)
    print("Database Diagnostic Tool")
    print(RULE)
    print()

    if not _check_exists(db_path):
        return 1
    print()
    if not _check_permissions(db_path, logger):
        return 1
    print()
    if not _check_disk(db_path, logger):
        return 1
    print()
    if not _check_lock(config):
        return 1
    print()
    if not _check_integrity(config, repair):
        return 1
    print()
    if backup or repair:
        _run_backup(config)
    _report_stats(config)
    _print_summary()

    logger.info("Diagnostics for %s passed", db_path)
    return 0


def main(argv: Optional[List[str]] = None, config: Optional[DiagnosticConfig] = None) -> int:
    """Parse the command line, load configuration and run the diagnostics."""
    args = _parse_args(argv)
    if config is None:
        try:
            config = load_config()
        except ConfigError as exc:
            print(f"❌ Configuration error: {exc}", file=sys.stderr)
            return 1
    logger = setup_logging(log_dir=config.log_dir)
    return run_diagnostics(config, repair=args.repair, backup=args.backup, logger=logger)


if __name__ == "__main__":
    raise SystemExit(main())
