# Rev 1.0.0

"""Runtime configuration for the database doctor."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from dbdoctor.utils import paths


class ConfigError(Exception):
    """Raised when an environment value cannot be parsed."""


@dataclass(frozen=True)
class DiagnosticConfig:
    db_path: Path = paths.DB_PATH
    backup_dir: Path = paths.BACKUP_DIR
    log_dir: Path = paths.LOG_DIR
    lock_timeout: float = 1.0
    # None: unset, each entry point applies its own retention default
    backup_keep: Optional[int] = None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


def load_config(env_file: Optional[Path | str] = None) -> DiagnosticConfig:
    """Build the configuration from the environment and an optional .env file.

    Values already present in the process environment win over the file.
    Path variables are read here rather than from the import-time constants in
    :mod:`dbdoctor.utils.paths` so a freshly loaded .env file takes effect.
    """
    load_dotenv(env_file or paths.ENV_FILE)

    root = Path(os.environ.get("DBDOCTOR_ROOT") or paths.ROOT)
    db_path = Path(os.environ.get("DBDOCTOR_DB_PATH") or root / paths.DB_FILENAME)
    backup_dir = Path(os.environ.get("DBDOCTOR_BACKUP_DIR") or root / "backups")
    state_dir = os.environ.get("DBDOCTOR_STATE_DIR")
    log_dir = Path(state_dir) / "logs" if state_dir else paths.LOG_DIR

    return DiagnosticConfig(
        db_path=db_path,
        backup_dir=backup_dir,
        log_dir=log_dir,
        lock_timeout=_env_float("DBDOCTOR_LOCK_TIMEOUT", 1.0),
        backup_keep=_env_int("DBDOCTOR_BACKUP_KEEP", None),
    )
