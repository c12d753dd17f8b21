"""File service for business logic."""

from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple

from common.logging_config import get_logger
from server.blob_store import BlobStore
from server.exceptions import BlobUnavailableError, InvalidUploadError, RecordNotFoundError
from server.repositories.file_repository import FileRepository
from server.types import FileRecord
from server.utils import blob_name_for, clean_tags, generate_uuid, get_current_timestamp

logger = get_logger(__name__)


class FileService:
    def __init__(self, file_repo: Optional[FileRepository] = None, blob_store: Optional[BlobStore] = None):
        self.file_repo = file_repo or FileRepository()
        self.blob_store = blob_store or BlobStore()

    def upload_file(
        self,
        filename: str,
        file_data: BinaryIO,
        content_type: Optional[str],
        tags: List[str],
    ) -> FileRecord:
        if not filename:
            raise InvalidUploadError("No file provided")

        file_id = generate_uuid()
        blob_name = blob_name_for(file_id, filename)

        size = self.blob_store.put(blob_name, file_data)

        now = get_current_timestamp()
        record = FileRecord(
            id=file_id,
            filename=filename,
            content_type=content_type or "",
            size=size,
            tags=clean_tags(tags),
            created_at=now,
            updated_at=now,
        )

        try:
            self.file_repo.create_file(record)
        except Exception:
            logger.error(f"Upload failed for {filename}, removing blob {blob_name}")
            self.blob_store.delete(blob_name)
            raise

        logger.info(f"Uploaded file {filename} [id={file_id}, size={size}, tags={record.tags}]")
        return record

    def search_files(self, query: str, page: int, limit: int) -> List[FileRecord]:
        page = max(page, 1)
        limit = max(limit, 1)
        offset = (page - 1) * limit
        return self.file_repo.search(query.strip() if query else "", limit, offset)

    def get_file(self, file_id: str) -> FileRecord:
        record = self.file_repo.get_by_id(file_id)
        if record is None:
            raise RecordNotFoundError(f"File {file_id} not found")
        return record

    def get_download(self, file_id: str) -> Tuple[FileRecord, Path]:
        """
        Resolve a record and the path of its blob on disk.

        Raises:
            RecordNotFoundError: If no record has this id
            BlobUnavailableError: If the record exists but its content does not
        """
        record = self.get_file(file_id)
        blob_name = blob_name_for(record.id, record.filename)
        if not self.blob_store.exists(blob_name):
            logger.warning(f"File {file_id} has no content at {blob_name}")
            raise BlobUnavailableError("File content not found")
        return record, self.blob_store.path_for(blob_name)

    def delete_file(self, file_id: str) -> None:
        record = self.get_file(file_id)
        self.blob_store.delete(blob_name_for(record.id, record.filename))
        self.file_repo.delete_file(record.id)
        logger.info(f"Deleted file {record.filename} [id={file_id}]")

    def update_file(self, file_id: str, tags: Optional[List[str]], filename: Optional[str] = None) -> FileRecord:
        """
        Replace a record's tags and optionally rename it.

        A rename that changes the extension moves the blob to its new derived
        name before the record is saved, so the record never points at a
        missing blob.
        """
        record = self.get_file(file_id)

        if tags is not None:
            record.tags = clean_tags(tags)

        moved = None
        if filename and filename != record.filename:
            old_blob = blob_name_for(record.id, record.filename)
            new_blob = blob_name_for(record.id, filename)
            if old_blob != new_blob and self.blob_store.exists(old_blob):
                self.blob_store.rename(old_blob, new_blob)
                moved = (old_blob, new_blob)
                logger.info(f"Moved blob {old_blob} -> {new_blob} [id={file_id}]")
            record.filename = filename

        try:
            self.file_repo.update_file(record)
        except Exception:
            if moved:
                logger.error(f"Update failed for {file_id}, moving blob back to {moved[0]}")
                self.blob_store.rename(moved[1], moved[0])
            raise
        logger.info(f"Updated file {file_id} [tags={record.tags}]")
        return record

    def list_tags(self) -> List[str]:
        return self.file_repo.list_tags()
