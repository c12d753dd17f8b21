"""Server-specific data type definitions."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class FileRecord:
    """
    Descriptive metadata for one stored file.

    The blob backing a record is never named explicitly: it lives at
    ``id + extension_of(filename)`` in the blob store.
    """
    id: str
    filename: str
    content_type: str = ""
    size: int = 0
    tags: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
