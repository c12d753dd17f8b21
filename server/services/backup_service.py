"""Backup service: exports the metadata index and all blobs as one archive."""

from datetime import datetime
from typing import BinaryIO, Iterator, Optional

from common.logging_config import get_logger
from server.archive.codec import ArchiveWriter
from server.blob_store import BlobStore
from server.config import ARCHIVE_PIECE_SIZE
from server.repositories.file_repository import FileRepository
from server.types import FileRecord
from server.utils import blob_name_for, get_current_timestamp

logger = get_logger(__name__)


class BackupService:
    """
    Reads the metadata index and blob store and streams a ZIP archive.

    Never mutates either store.
    """

    def __init__(
        self,
        file_repo: Optional[FileRepository] = None,
        blob_store: Optional[BlobStore] = None,
        piece_size: int = ARCHIVE_PIECE_SIZE,
    ):
        self.file_repo = file_repo or FileRepository()
        self.blob_store = blob_store or BlobStore()
        self.piece_size = piece_size

    def _open_blob(self, record: FileRecord) -> BinaryIO:
        return self.blob_store.open(blob_name_for(record.id, record.filename))

    def create_backup(self) -> Iterator[bytes]:
        """
        Stream a backup archive of every record and its blob.

        Records are read up front, in creation order (ties broken by id).
        A missing blob drops only that blob entry; the record stays in the manifest.

        Yields:
            Archive bytes
        """
        records = self.file_repo.list_all()
        logger.info(f"Starting backup of {len(records)} records")

        writer = ArchiveWriter(self._open_blob, self.piece_size)

        def stream() -> Iterator[bytes]:
            bytes_streamed = 0
            for piece in writer.stream(records):
                bytes_streamed += len(piece)
                yield piece

            if writer.skipped_blobs:
                logger.warning(
                    f"Backup skipped {len(writer.skipped_blobs)} unavailable blobs: {writer.skipped_blobs}"
                )
            logger.info(
                f"Backup complete: {len(records)} records, {writer.blobs_written} blobs, "
                f"{len(writer.skipped_blobs)} skipped, {bytes_streamed} bytes"
            )

        return stream()

    @staticmethod
    def backup_filename(now: Optional[datetime] = None) -> str:
        """
        Download name for an archive, e.g. backup-20240101-120000.zip.
        """
        now = now or get_current_timestamp()
        return f"backup-{now.strftime('%Y%m%d-%H%M%S')}.zip"
