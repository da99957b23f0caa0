# Rev 1.0.0

"""Logging setup helpers for the database doctor."""
from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Tuple

from dbdoctor.utils.paths import LOG_DIR, ensure_runtime_dirs


def _make_handlers(logfile: Path) -> Tuple[logging.Handler, logging.Handler]:
    file_handler = RotatingFileHandler(
        logfile,
        maxBytes=1_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    file_handler.setFormatter(formatter)

    # The printed report owns stdout; only problems reach the console.
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(formatter)
    return file_handler, console


def setup_logging(name: str = "dbdoctor", log_dir: Optional[Path] = None) -> logging.Logger:
    """Configure logging for the tool and return the package logger."""
    if log_dir is None:
        ensure_runtime_dirs()
        log_dir = LOG_DIR
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / f"{name}.log"

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    if not logger.handlers:
        file_handler, console = _make_handlers(logfile)
        logger.addHandler(file_handler)
        logger.addHandler(console)

    logger.debug("Logging ready at %s", logfile)
    return logger
