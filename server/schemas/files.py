"""Pydantic schemas for file operation endpoints."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from server.types import FileRecord


class FileRecordResponse(BaseModel):
    """Response model for a single file record."""
    id: str
    filename: str
    content_type: str
    size: int
    tags: List[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileRecordResponse":
        return cls(
            id=record.id,
            filename=record.filename,
            content_type=record.content_type,
            size=record.size,
            tags=record.tags,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class UploadFileResponse(BaseModel):
    """Response model for file upload."""
    message: str
    file: FileRecordResponse


class FileListItem(BaseModel):
    """One search result, with a preview URL."""
    id: str
    filename: str
    content_type: str
    size: int
    tags: List[str]
    created_at: Optional[datetime] = None
    url: str


class UpdateFileRequest(BaseModel):
    """Request model for replacing tags and optionally renaming."""
    tags: Optional[List[str]] = None
    filename: Optional[str] = None


class MessageResponse(BaseModel):
    """Plain acknowledgement."""
    message: str
