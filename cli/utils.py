"""Formatting helpers for CLI output."""

from datetime import datetime
from typing import Optional

_UNITS = ('B', 'KiB', 'MiB', 'GiB', 'TiB', 'PiB')


def format_file_size(size_bytes: int) -> str:
    """
    Human-readable size with binary units: "512 B", "1.50 MiB".
    """
    size = float(size_bytes)
    unit = 0
    while size >= 1024 and unit < len(_UNITS) - 1:
        size /= 1024
        unit += 1

    if unit == 0:
        return f"{size_bytes} B"
    return f"{size:.2f} {_UNITS[unit]}"


def format_timestamp(value: Optional[str]) -> str:
    """
    Render an API timestamp in local time as "YYYY-MM-DD HH:MM:SS".

    Unparseable values are shown as received; missing ones as "-".
    """
    if not value:
        return "-"
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return value
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime('%Y-%m-%d %H:%M:%S')
