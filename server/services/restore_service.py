"""Restore service: reconciles a backup archive into the live stores."""

import zipfile
import zlib
from dataclasses import dataclass, field
from typing import BinaryIO, Dict, List, Optional, Union

from common.constants import BLOB_ENTRY_PREFIX
from common.logging_config import get_logger
from server.archive.codec import decode_archive
from server.blob_store import BlobStore
from server.config import ARCHIVE_PIECE_SIZE, RESTORE_SPOOL_MAX_BYTES
from server.exceptions import BlobUnavailableError, EmptyManifestError, MetadataWriteError
from server.repositories.file_repository import FileRepository
from server.types import FileRecord
from server.utils import blob_name_for, generate_uuid

logger = get_logger(__name__)

_ENTRY_READ_ERRORS = (BlobUnavailableError, zipfile.BadZipFile, zlib.error, OSError, EOFError, RuntimeError)


@dataclass
class RestoreResult:
    """
    Outcome of a restore.

    restored_count counts entries whose blob write and metadata upsert both succeeded.
    """
    restored_count: int = 0
    inserted: int = 0
    updated: int = 0
    skipped_entries: List[str] = field(default_factory=list)


class RestoreService:
    """
    Restores an archive into a possibly non-empty metadata index and blob store.

    Blob entries are matched to manifest records by the current naming
    convention (``files/<id><ext>``) first and by original filename second, for
    archives written with the legacy ``files/<filename>`` layout. When several
    manifest records share a filename, the last one in the manifest wins.
    """

    def __init__(
        self,
        file_repo: Optional[FileRepository] = None,
        blob_store: Optional[BlobStore] = None,
        spool_max_bytes: int = RESTORE_SPOOL_MAX_BYTES,
        piece_size: int = ARCHIVE_PIECE_SIZE,
    ):
        self.file_repo = file_repo or FileRepository()
        self.blob_store = blob_store or BlobStore()
        self.spool_max_bytes = spool_max_bytes
        self.piece_size = piece_size

    def restore_backup(self, source: Union[bytes, BinaryIO]) -> RestoreResult:
        """
        Restore every reconcilable blob entry of an archive.

        Args:
            source: Archive bytes or a binary stream

        Returns:
            RestoreResult; partial success is still success

        Raises:
            MalformedArchiveError: If the archive or its manifest cannot be read
            EmptyManifestError: If the manifest holds zero records
        """
        result = RestoreResult()

        with decode_archive(source, self.spool_max_bytes, self.piece_size) as archive:
            if not archive.manifest:
                raise EmptyManifestError("metadata.json is empty; refusing to restore")

            logger.info(f"Restoring archive with {len(archive.manifest)} manifest records")

            by_blob_name: Dict[str, FileRecord] = {}
            by_filename: Dict[str, FileRecord] = {}
            for record in archive.manifest:
                if record.id:
                    by_blob_name[blob_name_for(record.id, record.filename)] = record
                by_filename[record.filename] = record

            for entry in archive.blob_entries():
                candidate = entry.name[len(BLOB_ENTRY_PREFIX):]
                record = by_blob_name.get(candidate) or by_filename.get(candidate)
                if record is None:
                    logger.info(f"No manifest record for archive entry {entry.name}, skipping")
                    result.skipped_entries.append(entry.name)
                    continue

                if not record.id:
                    record.id = generate_uuid()
                    logger.info(f"Minted id {record.id} for legacy record {record.filename}")

                if self._restore_entry(entry, record, result):
                    result.restored_count += 1
                else:
                    result.skipped_entries.append(entry.name)

        logger.info(
            f"Restore complete: {result.restored_count} restored "
            f"({result.inserted} inserted, {result.updated} updated), "
            f"{len(result.skipped_entries)} skipped"
        )
        return result

    def _restore_entry(self, entry, record: FileRecord, result: RestoreResult) -> bool:
        destination = blob_name_for(record.id, record.filename)

        try:
            with entry.open() as data:
                self.blob_store.put(destination, data, self.piece_size)
        except _ENTRY_READ_ERRORS as e:
            logger.warning(f"Blob unavailable for {entry.name} -> {destination}: {e}")
            return False

        try:
            outcome = self.file_repo.upsert(record)
        except MetadataWriteError as e:
            logger.error(f"Metadata write failed for {record.filename} [id={record.id}]: {e}")
            return False

        if outcome == "inserted":
            result.inserted += 1
        else:
            result.updated += 1
        logger.debug(f"Restored {entry.name} as {destination} ({outcome})")
        return True
