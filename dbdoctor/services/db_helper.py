# Rev 1.0.0

"""Diagnostic, backup and repair operations for the hotspot SQLite database.

Every operation takes the database path explicitly, opens its own handle and
closes it before returning. Expected failures (missing file, SQLite errors,
I/O errors) come back as result values; deciding what is fatal is left to the
caller.
"""
from __future__ import annotations

import logging
import shutil
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from dbdoctor.models.results import (
    BackupResult,
    DatabaseStats,
    IntegrityResult,
    LockResult,
    RepairResult,
    StatsError,
    StatsResult,
)
from dbdoctor.repositories.db import Database
from dbdoctor.utils.formatting import bytes_to_mb
from dbdoctor.utils.paths import BACKUP_DIR
from dbdoctor.utils.timestamp import filesystem_timestamp

logger = logging.getLogger(__name__)

OK = "ok"

# Primary SQLite result codes treated as "another process holds the file".
SQLITE_BUSY = 5
SQLITE_LOCKED = 6
LOCK_ERROR_CODES = frozenset({SQLITE_BUSY, SQLITE_LOCKED})

STATS_TABLES = ("users", "settings", "audit_logs")


def is_lock_error(code: Optional[int]) -> bool:
    """True only for SQLITE_BUSY / SQLITE_LOCKED, extended variants included.

    Every other failure (I/O, corruption, permissions) is deliberately *not*
    a lock, even though it may also keep the application from the file.
    """
    if code is None:
        return False
    return (code & 0xFF) in LOCK_ERROR_CODES


def _error_name(exc: BaseException) -> Optional[str]:
    return getattr(exc, "sqlite_errorname", None) or getattr(exc, "errno", None)


def check_database_integrity(db_path: Path) -> IntegrityResult:
    """Run ``integrity_check`` and ``quick_check``; valid only if both say ok."""
    db_path = Path(db_path)
    if not db_path.exists():
        return IntegrityResult(
            valid=False,
            message="Database file does not exist",
            details={"path": str(db_path)},
        )

    try:
        size = db_path.stat().st_size
        if size == 0:
            return IntegrityResult(
                valid=False,
                message="Database file is empty (0 bytes)",
                details={"path": str(db_path), "size": 0},
            )

        with Database(db_path) as db:
            integrity = db.pragma_result("integrity_check")
            quick = db.pragma_result("quick_check")
        disk_free = shutil.disk_usage(db_path.parent).free
    except (sqlite3.Error, OSError) as exc:
        logger.error("Integrity check of %s failed: %s", db_path, exc)
        return IntegrityResult(
            valid=False,
            message=f"Error checking database: {exc}",
            details={"error": _error_name(exc), "path": str(db_path)},
        )

    return IntegrityResult(
        valid=integrity == OK and quick == OK,
        message="Database integrity OK" if integrity == OK else "Database integrity check failed",
        details={
            "integrity_check": integrity,
            "quick_check": quick,
            "file_size": size,
            "file_path": str(db_path),
            "disk_free": disk_free,
        },
    )


def verify_backup_integrity(backup_path: Path) -> bool:
    """Read-only full integrity check of a backup copy."""
    try:
        with Database(backup_path, readonly=True) as db:
            return db.pragma_result("integrity_check") == OK
    except sqlite3.Error as exc:
        logger.error("Integrity check of backup %s failed: %s", backup_path, exc)
        return False


def list_backups(backup_dir: Path, db_name: str) -> List[Path]:
    """Backups of ``db_name`` in ``backup_dir``, newest first."""
    if not backup_dir.is_dir():
        return []
    files = [p for p in backup_dir.glob(f"{db_name}.backup.*") if p.is_file()]
    return sorted(files, key=lambda p: (p.stat().st_mtime, p.name), reverse=True)


def cleanup_old_backups(backup_dir: Path, db_name: str, keep: int) -> int:
    """Delete all but the newest ``keep`` backups of ``db_name``.

    Returns the number of files removed. A file that cannot be removed is
    logged and skipped.
    """
    if keep <= 0:
        return 0
    deleted = 0
    for stale in list_backups(Path(backup_dir), db_name)[keep:]:
        try:
            stale.unlink()
            deleted += 1
        except OSError as exc:
            logger.error("Failed to delete old backup %s: %s", stale.name, exc)
    if deleted:
        logger.info("Cleaned up %d old backup(s)", deleted)
    return deleted


def _unique_backup_path(backup_dir: Path, db_name: str) -> Path:
    base = backup_dir / f"{db_name}.backup.{filesystem_timestamp()}"
    candidate = base
    counter = 1
    # two backups inside the same millisecond (repair, then step 6)
    while candidate.exists():
        candidate = base.with_name(f"{base.name}-{counter}")
        counter += 1
    return candidate


def backup_database(
    db_path: Path,
    backup_dir: Path = BACKUP_DIR,
    *,
    keep: int = 0,
) -> BackupResult:
    """Copy the database byte-for-byte into ``backup_dir``.

    The copy is named ``<name>.backup.<timestamp>`` where the ISO-8601
    timestamp has its colons and periods replaced by hyphens.
    """
    db_path = Path(db_path)
    backup_dir = Path(backup_dir)
    if not db_path.exists():
        return BackupResult(success=False, error="Database file does not exist")

    backup_path: Optional[Path] = None
    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path = _unique_backup_path(backup_dir, db_path.name)
        shutil.copyfile(db_path, backup_path)
    except OSError as exc:
        logger.error("Backup of %s failed: %s", db_path, exc)
        # a truncated copy must not be counted as a backup by the retention pass
        if backup_path is not None:
            try:
                backup_path.unlink(missing_ok=True)
            except OSError as unlink_exc:
                logger.error("Failed to remove failed backup file %s: %s", backup_path, unlink_exc)
        return BackupResult(success=False, error=str(exc))

    verified = verify_backup_integrity(backup_path)
    if not verified:
        logger.warning("Backup integrity check failed, but file was created: %s", backup_path)
    logger.info("Backup created at %s", backup_path)

    cleanup_old_backups(backup_dir, db_path.name, keep)
    return BackupResult(success=True, backup_path=backup_path, verified=verified)


def repair_database(db_path: Path, backup_dir: Path = BACKUP_DIR) -> RepairResult:
    """Back up, then rebuild the file with VACUUM and re-check it.

    A failed backup does not stop the repair: an attempted repair is preferred
    over refusing to act without a safety copy.
    """
    db_path = Path(db_path)
    if not db_path.exists():
        return RepairResult(success=False, message="Database file does not exist")

    backup = backup_database(db_path, backup_dir)
    if not backup.success:
        logger.warning("Backup failed (%s), but continuing with repair...", backup.error)

    try:
        with Database(db_path) as db:
            db.vacuum()
            integrity = db.pragma_result("integrity_check")
    except sqlite3.Error as exc:
        logger.error("Repair of %s failed: %s", db_path, exc)
        return RepairResult(
            success=False,
            message=f"Error repairing database: {exc}",
            backup_path=backup.backup_path,
        )

    if integrity == OK:
        logger.info("Database %s repaired", db_path)
        return RepairResult(
            success=True,
            message="Database repaired successfully",
            backup_path=backup.backup_path,
        )
    return RepairResult(
        success=False,
        message=f"Repair completed but integrity check still failed: {integrity}",
        backup_path=backup.backup_path,
    )


def check_database_lock(db_path: Path, timeout: float = 1.0) -> LockResult:
    """Try a trivial read with a short busy timeout."""
    try:
        with Database(db_path, timeout=timeout) as db:
            db.scalar("SELECT COUNT(*) FROM sqlite_master")
    except sqlite3.Error as exc:
        if is_lock_error(getattr(exc, "sqlite_errorcode", None)):
            return LockResult(locked=True, message="Database is locked by another process")
        return LockResult(locked=False, message=f"Error checking lock: {exc}")
    return LockResult(locked=False, message="Database is not locked")


def _created_at(stat_result) -> datetime:
    # st_birthtime is not available on every platform/filesystem.
    created = getattr(stat_result, "st_birthtime", None) or stat_result.st_ctime
    return datetime.fromtimestamp(created)


def get_database_stats(db_path: Path) -> StatsResult:
    """File and row statistics, ``None`` when the file does not exist."""
    db_path = Path(db_path)
    if not db_path.exists():
        return None

    try:
        stat_result = db_path.stat()
        with Database(db_path) as db:
            tables = db.scalar(
                "SELECT COUNT(*) FROM sqlite_master "
                "WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
            )
            counts = {
                table: db.scalar(f"SELECT COUNT(*) FROM {table}")
                for table in STATS_TABLES
            }
    except (sqlite3.Error, OSError) as exc:
        logger.warning("Could not collect statistics for %s: %s", db_path, exc)
        return StatsError(error=str(exc))

    return DatabaseStats(
        file_size=stat_result.st_size,
        file_size_mb=bytes_to_mb(stat_result.st_size),
        created=_created_at(stat_result),
        modified=datetime.fromtimestamp(stat_result.st_mtime),
        tables=tables or 0,
        users=counts["users"] or 0,
        settings=counts["settings"] or 0,
        audit_logs=counts["audit_logs"] or 0,
    )
