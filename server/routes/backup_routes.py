"""Backup and restore API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse

from server.dependencies import get_backup_service, get_restore_service
from server.exceptions import InvalidUploadError
from server.schemas.backup import RestoreResponse
from server.schemas.common import ErrorResponse
from server.services.backup_service import BackupService
from server.services.restore_service import RestoreService

router = APIRouter(prefix="/api", tags=["Backup"], responses={400: {"model": ErrorResponse}})


@router.get("/backup")
def create_backup(backup_service: BackupService = Depends(get_backup_service)):
    """
    Download a ZIP archive of all file records and their content.

    Returns:
        - StreamingResponse with application/zip body
    """
    stream = backup_service.create_backup()
    filename = BackupService.backup_filename()

    return StreamingResponse(
        stream,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/restore", response_model=RestoreResponse)
def restore_backup(
    file: Optional[UploadFile] = File(None),
    restore_service: RestoreService = Depends(get_restore_service),
):
    """
    Restore a backup archive into the current store.

    Existing records with the same id are updated; others are inserted.

    Raises:
        - 400: No file, malformed archive, or empty manifest
    """
    if file is None:
        raise InvalidUploadError("No file provided")

    result = restore_service.restore_backup(file.file)

    return RestoreResponse(
        message=f"Restored {result.restored_count} files",
        restored_count=result.restored_count,
        inserted=result.inserted,
        updated=result.updated,
        skipped_entries=result.skipped_entries,
    )
