"""Utility helper functions for the storage server."""

import re
import uuid
from datetime import datetime, timezone
from typing import Optional, List

_FRACTION_RE = re.compile(r'\.(\d{7,})')


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def get_current_timestamp() -> datetime:
    """
    Get the current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse an RFC 3339 / ISO 8601 timestamp.

    Accepts a trailing 'Z' and fractional seconds with more than six digits
    (nanosecond precision is truncated to microseconds).

    Args:
        value: Timestamp string, datetime, or None

    Returns:
        Parsed datetime, or None for empty input

    Raises:
        ValueError: If the string is not a valid timestamp
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    text = _FRACTION_RE.sub(lambda m: '.' + m.group(1)[:6], text)
    return datetime.fromisoformat(text)


def parse_tags(tags_str: str) -> List[str]:
    """
    Parse comma-separated tags string into list.

    Args:
        tags_str: Comma-separated tags (e.g., "tag1,tag2,tag3")

    Returns:
        List of trimmed tag strings
    """
    return clean_tags(tags_str.split(','))


def clean_tags(tags) -> List[str]:
    """
    Trim tags and drop empty ones, keeping order and duplicates.
    """
    if not tags:
        return []
    return [tag.strip() for tag in tags if tag and tag.strip()]


def extension_of(filename: str) -> str:
    """
    Return the extension of the final path element, including the dot.

    'note.txt' -> '.txt', 'archive.tar.gz' -> '.gz', '.env' -> '.env',
    'README' -> ''.
    """
    base = re.split(r'[\\/]', filename or "")[-1]
    dot = base.rfind('.')
    if dot == -1:
        return ""
    return base[dot:]


def blob_name_for(file_id: str, filename: str) -> str:
    """
    Derive the blob store name for a record: id followed by the filename's extension.
    """
    return f"{file_id}{extension_of(filename)}"
