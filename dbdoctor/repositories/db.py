# Rev 1.0.0

"""SQLite handle helpers for the database doctor."""
from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import List, Optional


def _configure_connection(conn: sqlite3.Connection) -> None:
    """Apply consistent settings to any diagnostic connection.

    Nothing here may change the file (journal mode, page size...): the
    database under inspection belongs to another application.
    """
    conn.row_factory = sqlite3.Row


def database_uri(path: Path | str, *, readonly: bool = False) -> str:
    """SQLite URI that refuses to create a missing file."""
    mode = "ro" if readonly else "rw"
    return f"{Path(path).resolve().as_uri()}?mode={mode}"


class Database:
    """Short-lived SQLite handle used by a single diagnostic operation."""

    def __init__(
        self,
        path: Path | str,
        *,
        timeout: float = 5.0,
        readonly: bool = False,
    ) -> None:
        self.path = Path(path)
        self.conn = sqlite3.connect(
            database_uri(self.path, readonly=readonly),
            timeout=timeout,
            uri=True,
            isolation_level=None,
        )
        _configure_connection(self.conn)

    def close(self) -> None:
        self.conn.close()

    # -- queries --------------------------------------------------------
    def pragma_rows(self, name: str) -> List[str]:
        """Run a check PRAGMA and return every message row as text."""
        rows = self.conn.execute(f"PRAGMA {name}").fetchall()
        return [str(row[0]) for row in rows]

    def pragma_result(self, name: str) -> str:
        """Collapse a check PRAGMA into one string; ``ok`` when clean."""
        return "; ".join(self.pragma_rows(name)) or "no result"

    def scalar(self, sql: str, params: tuple = ()) -> Optional[int]:
        row = self.conn.execute(sql, params).fetchone()
        return row[0] if row else None

    def vacuum(self) -> None:
        self.conn.execute("VACUUM")

    # -- context manager ------------------------------------------------
    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
