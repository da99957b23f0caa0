# Rev 1.0.0

"""Filesystem path helpers for the hotspot database doctor."""
from __future__ import annotations

import os
from pathlib import Path


APP_NAME = "dbdoctor"
DB_FILENAME = "hotspot.db"


def _xdg_dir(env_var: str, default: Path) -> Path:
    value = os.environ.get(env_var)
    return Path(value) if value else default


def _resolve_root() -> Path:
    override = os.environ.get("DBDOCTOR_ROOT")
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[2]


def _resolve_state_home() -> Path:
    override = os.environ.get("DBDOCTOR_STATE_DIR")
    if override:
        return Path(override)
    state_home = _xdg_dir("XDG_STATE_HOME", Path.home() / ".local" / "state")
    return state_home / APP_NAME


ROOT = _resolve_root()
STATE_HOME = _resolve_state_home()

DB_PATH = Path(os.environ.get("DBDOCTOR_DB_PATH") or ROOT / DB_FILENAME)
BACKUP_DIR = Path(os.environ.get("DBDOCTOR_BACKUP_DIR") or ROOT / "backups")
LOG_DIR = STATE_HOME / "logs"
ENV_FILE = ROOT / ".env"


def ensure_runtime_dirs() -> None:
    """Ensure the log directory exists before anything writes to it.

    The backup directory is created on demand by the backup operation and the
    database directory is never created here: a diagnostic must not conjure up
    the file it is about to inspect.
    """
    LOG_DIR.mkdir(parents=True, exist_ok=True)
