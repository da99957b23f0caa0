# Rev 1.0.0

"""Standalone backup run for cron: copy, verify, report and prune."""
from __future__ import annotations

import logging
import sys
from typing import Optional

from dbdoctor.config import ConfigError, DiagnosticConfig, load_config
from dbdoctor.logging_setup import setup_logging
from dbdoctor.services import db_helper
from dbdoctor.utils.formatting import format_file_size

RULE = "=" * 42
DEFAULT_KEEP = 10


def run_backup(config: DiagnosticConfig, logger: Optional[logging.Logger] = None) -> int:
    """Take one backup and print the report; return the process exit status."""
    logger = logger or setup_logging(log_dir=config.log_dir)
    keep = DEFAULT_KEEP if config.backup_keep is None else config.backup_keep

    print(RULE)
    print("Database Backup")
    print(RULE)
    print()

    if not config.db_path.exists():
        print(f"❌ ERROR: Database file not found: {config.db_path}")
        return 1

    print("Creating database backup...")
    result = db_helper.backup_database(config.db_path, config.backup_dir, keep=keep)
    if not result.success:
        logger.error("Backup failed: %s", result.error)
        print(f"❌ ERROR: Failed to create backup: {result.error}")
        return 1

    print("✓ Backup created successfully")
    print()
    print(f"Database: {config.db_path}")
    print(f"  Size: {format_file_size(config.db_path.stat().st_size)}")
    print()
    print(f"Backup: {result.backup_path}")
    print(f"  Size: {format_file_size(result.backup_path.stat().st_size)}")
    print()
    if result.verified:
        print("✓ Backup integrity verified")
    else:
        print("⚠️  WARNING: Backup integrity check failed!")
        print("   Backup file may be corrupted.")
    print()

    remaining = len(db_helper.list_backups(config.backup_dir, config.db_path.name))
    retention = f"keeping last {keep}" if keep else "keeping all"
    print(f"Total backups: {remaining} ({retention})")
    print()
    print("To restore from backup:")
    print(f"  cp {result.backup_path} {config.db_path}")
    print()
    return 0


def main(config: Optional[DiagnosticConfig] = None) -> int:
    if config is None:
        try:
            config = load_config()
        except ConfigError as exc:
            print(f"❌ Configuration error: {exc}", file=sys.stderr)
            return 1
    return run_backup(config)


if __name__ == "__main__":
    raise SystemExit(main())
