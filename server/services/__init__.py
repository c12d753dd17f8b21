"""Service layer for business logic."""

from server.services.backup_service import BackupService
from server.services.file_service import FileService
from server.services.restore_service import RestoreResult, RestoreService

__all__ = [
    "BackupService",
    "FileService",
    "RestoreResult",
    "RestoreService",
]
