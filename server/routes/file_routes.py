"""File operation API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse

from server.config import DEFAULT_PAGE_LIMIT
from server.dependencies import get_file_service
from server.exceptions import InvalidUploadError
from server.schemas.common import ErrorResponse
from server.schemas.files import (
    FileListItem,
    FileRecordResponse,
    MessageResponse,
    UpdateFileRequest,
    UploadFileResponse,
)
from server.services.file_service import FileService
from server.utils import parse_tags

router = APIRouter(
    prefix="/api",
    tags=["Files"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.post("/upload", response_model=UploadFileResponse)
def upload_file(
    file: Optional[UploadFile] = File(None),
    tags: str = Form(""),
    file_service: FileService = Depends(get_file_service),
):
    """
    Upload a file with associated tags.

    Parameters:
        - file: File to upload (multipart/form-data)
        - tags: Comma-separated list of tags (e.g., "tag1,tag2,tag3"); may be empty

    Returns:
        - message and the created file record

    Raises:
        - 400: No file provided
        - 500: Blob or metadata write failed
    """
    if file is None or not file.filename:
        raise InvalidUploadError("No file provided")

    record = file_service.upload_file(
        filename=file.filename,
        file_data=file.file,
        content_type=file.content_type,
        tags=parse_tags(tags),
    )

    return UploadFileResponse(
        message="File uploaded successfully",
        file=FileRecordResponse.from_record(record),
    )


@router.get("/files", response_model=List[FileListItem])
def search_files(
    q: str = Query("", description="Tag to match exactly; empty lists everything"),
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_LIMIT),
    file_service: FileService = Depends(get_file_service),
):
    """
    List files newest first, optionally filtered by tag.

    Returns:
        - list of file records, each with a preview download URL
    """
    records = file_service.search_files(q, page, limit)

    return [
        FileListItem(
            id=record.id,
            filename=record.filename,
            content_type=record.content_type,
            size=record.size,
            tags=record.tags,
            created_at=record.created_at,
            url=f"/api/files/{record.id}/download?preview=true",
        )
        for record in records
    ]


@router.get("/files/{file_id}/download")
def download_file(
    file_id: str,
    preview: bool = Query(False),
    file_service: FileService = Depends(get_file_service),
):
    """
    Download a file by id.

    Raises:
        - 404: Record or its content not found
    """
    record, path = file_service.get_download(file_id)

    return FileResponse(
        path,
        media_type=record.content_type or "application/octet-stream",
        filename=record.filename,
        content_disposition_type="inline" if preview else "attachment",
    )


@router.delete("/files/{file_id}", response_model=MessageResponse)
def delete_file(
    file_id: str,
    file_service: FileService = Depends(get_file_service),
):
    """
    Delete a file record and its blob.

    Raises:
        - 404: File not found
    """
    file_service.delete_file(file_id)
    return MessageResponse(message="File deleted")


@router.put("/files/{file_id}", response_model=FileRecordResponse, status_code=status.HTTP_200_OK)
def update_file(
    file_id: str,
    request: UpdateFileRequest,
    file_service: FileService = Depends(get_file_service),
):
    """
    Replace a file's tags and optionally rename it.

    Raises:
        - 404: File not found
    """
    record = file_service.update_file(file_id, request.tags, request.filename)
    return FileRecordResponse.from_record(record)


@router.get("/tags", response_model=List[str])
def list_tags(file_service: FileService = Depends(get_file_service)):
    """
    List distinct tags across all files.
    """
    return file_service.list_tags()
