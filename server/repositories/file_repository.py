"""File repository for database operations."""

import json
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional

from common.logging_config import get_logger
from server.database import get_db_connection
from server.exceptions import MetadataWriteError
from server.types import FileRecord
from server.utils import get_current_timestamp

logger = get_logger(__name__)

_COLUMNS = "id, filename, content_type, size, tags, created_at, updated_at"


def _to_db_timestamp(value: Optional[datetime]) -> str:
    """Normalize to fixed-width UTC ISO text so that lexical order is time order."""
    if value is None:
        value = get_current_timestamp()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _tags_to_db(tags) -> str:
    # Stored as UTF-8 text so the quoted-tag LIKE filter matches non-ASCII tags
    return json.dumps(list(tags or []), ensure_ascii=False)


def _row_to_record(row: sqlite3.Row) -> FileRecord:
    return FileRecord(
        id=row["id"],
        filename=row["filename"],
        content_type=row["content_type"],
        size=row["size"],
        tags=json.loads(row["tags"]) if row["tags"] else [],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class FileRepository:
    """
    Metadata index over the ``files`` table.

    Each method opens its own short-lived connection.
    """

    def __init__(self, database_path: Optional[str] = None):
        self.database_path = database_path

    def _connect(self):
        return get_db_connection(self.database_path)

    def create_file(self, record: FileRecord) -> FileRecord:
        """
        Insert a new record. Missing timestamps are set to now.

        Raises:
            MetadataWriteError: If the insert fails (e.g. duplicate id)
        """
        now = get_current_timestamp()
        created = FileRecord(
            id=record.id,
            filename=record.filename,
            content_type=record.content_type or "",
            size=record.size or 0,
            tags=list(record.tags or []),
            created_at=record.created_at or now,
            updated_at=record.updated_at or now,
        )

        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"INSERT INTO files ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        created.id,
                        created.filename,
                        created.content_type,
                        created.size,
                        _tags_to_db(created.tags),
                        _to_db_timestamp(created.created_at),
                        _to_db_timestamp(created.updated_at),
                    )
                )
                conn.commit()
        except sqlite3.Error as e:
            raise MetadataWriteError(f"Failed to insert metadata for {created.filename}: {e}") from e

        logger.debug(f"File record created [id={created.id}]")
        return created

    def get_by_id(self, file_id: str) -> Optional[FileRecord]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_COLUMNS} FROM files WHERE id = ?", (file_id,))
            row = cursor.fetchone()

            if row is None:
                return None

            return _row_to_record(row)

    def list_all(self) -> List[FileRecord]:
        """
        Return every record in creation order, ties broken by id.
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_COLUMNS} FROM files ORDER BY created_at ASC, id ASC")
            return [_row_to_record(row) for row in cursor.fetchall()]

    def search(self, query: str, limit: int, offset: int) -> List[FileRecord]:
        """
        Page through records newest first, optionally filtered by tag.

        The filter matches the quoted query inside the stored JSON tag list,
        so 'work' matches the tag "work" but not "homework".
        """
        sql = f"SELECT {_COLUMNS} FROM files"
        params: list = []
        if query:
            sql += " WHERE tags LIKE ?"
            params.append(f'%"{query}"%')
        sql += " ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(sql, params)
            return [_row_to_record(row) for row in cursor.fetchall()]

    def update_file(self, record: FileRecord) -> FileRecord:
        """
        Overwrite the mutable fields of an existing record and refresh updated_at.

        Raises:
            MetadataWriteError: If the update fails or the record does not exist
        """
        updated_at = get_current_timestamp()

        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    UPDATE files
                    SET filename = ?, content_type = ?, size = ?, tags = ?, created_at = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        record.filename,
                        record.content_type or "",
                        record.size or 0,
                        _tags_to_db(record.tags),
                        _to_db_timestamp(record.created_at),
                        _to_db_timestamp(updated_at),
                        record.id,
                    )
                )
                if cursor.rowcount == 0:
                    raise MetadataWriteError(f"No record with id {record.id} to update")
                conn.commit()
        except sqlite3.Error as e:
            raise MetadataWriteError(f"Failed to update metadata for {record.filename}: {e}") from e

        record.updated_at = updated_at
        return record

    def upsert(self, record: FileRecord) -> str:
        """
        Insert the record if its id is unknown, otherwise update it in place.

        An update overwrites filename, tags, size, content_type and created_at
        from the given record; the id never changes.

        Returns:
            "inserted" or "updated"

        Raises:
            MetadataWriteError: If the write fails
        """
        try:
            existing = self.get_by_id(record.id)
        except sqlite3.Error as e:
            raise MetadataWriteError(f"Failed to look up record {record.id}: {e}") from e

        if existing is None:
            self.create_file(record)
            return "inserted"

        existing.filename = record.filename
        existing.tags = list(record.tags or [])
        existing.size = record.size
        existing.content_type = record.content_type
        existing.created_at = record.created_at or existing.created_at
        self.update_file(existing)
        return "updated"

    def delete_file(self, file_id: str) -> bool:
        """
        Delete a record by id.

        Returns:
            True if a row was deleted
        """
        logger.debug(f"Deleting file record [id={file_id}]")
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM files WHERE id = ?", (file_id,))
            conn.commit()
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info(f"File record deleted [id={file_id}]")
        return deleted

    def list_tags(self) -> List[str]:
        """
        Return the distinct trimmed tags across all records, sorted.
        """
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT tags FROM files")
            rows = cursor.fetchall()

        tags = set()
        for row in rows:
            for tag in json.loads(row["tags"] or "[]"):
                tag = tag.strip()
                if tag:
                    tags.add(tag)
        return sorted(tags)
