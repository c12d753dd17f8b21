"""Pydantic schemas for backup and restore endpoints."""

from typing import List
from pydantic import BaseModel


class RestoreResponse(BaseModel):
    """Response model for archive restore."""
    message: str
    restored_count: int
    inserted: int
    updated: int
    skipped_entries: List[str]
