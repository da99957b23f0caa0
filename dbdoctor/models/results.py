# Rev 1.0.0

"""Typed result values returned by the database helper operations."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Union


@dataclass(frozen=True)
class IntegrityResult:
    valid: bool
    message: str
    details: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class BackupResult:
    success: bool
    backup_path: Optional[Path] = None
    error: Optional[str] = None
    verified: Optional[bool] = None


@dataclass(frozen=True)
class RepairResult:
    success: bool
    message: str
    backup_path: Optional[Path] = None


@dataclass(frozen=True)
class LockResult:
    locked: bool
    message: str


@dataclass(frozen=True)
class DatabaseStats:
    file_size: int
    file_size_mb: float
    created: datetime
    modified: datetime
    tables: int
    users: int
    settings: int
    audit_logs: int


@dataclass(frozen=True)
class StatsError:
    error: str


# None means "no database file", which callers must handle separately from
# StatsError.
StatsResult = Optional[Union[DatabaseStats, StatsError]]
