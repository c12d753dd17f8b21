"""FastAPI dependency providers for services.

Routes receive services through ``Depends`` so tests can swap them with
``app.dependency_overrides``.
"""

from server.services.backup_service import BackupService
from server.services.file_service import FileService
from server.services.restore_service import RestoreService


def get_file_service() -> FileService:
    return FileService()


def get_backup_service() -> BackupService:
    return BackupService()


def get_restore_service() -> RestoreService:
    return RestoreService()
