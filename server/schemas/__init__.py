"""Pydantic schemas for API requests and responses."""

from server.schemas.files import (
    FileListItem,
    FileRecordResponse,
    MessageResponse,
    UpdateFileRequest,
    UploadFileResponse,
)
from server.schemas.backup import RestoreResponse
from server.schemas.common import ErrorResponse

__all__ = [
    "FileListItem",
    "FileRecordResponse",
    "MessageResponse",
    "UpdateFileRequest",
    "UploadFileResponse",
    "RestoreResponse",
    "ErrorResponse",
]
