# Rev 1.0.0

"""Human-readable formatting for the diagnostic report."""
from __future__ import annotations

_UNITS = ("B", "KB", "MB", "GB", "TB")


def bytes_to_mb(size: int) -> float:
    return round(size / 1024 / 1024, 2)


def format_file_size(size: int) -> str:
    """Render a byte count with a binary unit, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_UNITS[unit]}"
