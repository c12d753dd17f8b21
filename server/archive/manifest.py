"""Manifest (metadata.json) serialization with tolerance for older shapes."""

import json
from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from server.exceptions import MalformedArchiveError
from server.types import FileRecord
from server.utils import parse_timestamp


class ManifestEntry(BaseModel):
    """
    One FileRecord as stored in metadata.json.

    Older archives may omit fields or carry nulls; every field has a default
    and unknown fields are ignored.
    """
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    filename: str = ""
    content_type: str = ""
    size: int = 0
    tags: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", "filename", "content_type", mode="before")
    @classmethod
    def _null_to_empty_string(cls, value):
        return "" if value is None else value

    @field_validator("size", mode="before")
    @classmethod
    def _null_to_zero(cls, value):
        return 0 if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _null_to_empty_list(cls, value):
        return [] if value is None else value

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _parse_timestamp(cls, value):
        parsed = parse_timestamp(value)
        # Year 1 is the zero time written for unset timestamps
        if parsed is not None and parsed.year == 1:
            return None
        return parsed

    def to_record(self) -> FileRecord:
        return FileRecord(
            id=self.id,
            filename=self.filename,
            content_type=self.content_type,
            size=self.size,
            tags=list(self.tags),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def record_to_manifest_dict(record: FileRecord) -> dict:
    return {
        "id": record.id,
        "filename": record.filename,
        "content_type": record.content_type,
        "size": record.size,
        "tags": list(record.tags),
        "created_at": _format_timestamp(record.created_at),
        "updated_at": _format_timestamp(record.updated_at),
    }


def encode_manifest(records: Iterable[FileRecord]) -> bytes:
    """
    Serialize records to the metadata.json payload (a JSON array).
    """
    payload = [record_to_manifest_dict(record) for record in records]
    return (json.dumps(payload, ensure_ascii=False) + "\n").encode("utf-8")


def decode_manifest(data: bytes) -> List[FileRecord]:
    """
    Parse a metadata.json payload.

    A JSON null decodes to an empty list.

    Raises:
        MalformedArchiveError: If the payload is not a JSON array of valid records
    """
    try:
        payload = json.loads(data.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedArchiveError(f"metadata.json is not valid JSON: {e}") from e

    if payload is None:
        return []
    if not isinstance(payload, list):
        raise MalformedArchiveError("metadata.json must contain a JSON array")

    records = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise MalformedArchiveError(f"metadata.json entry {index} is not an object")
        try:
            records.append(ManifestEntry.model_validate(item).to_record())
        except ValidationError as e:
            raise MalformedArchiveError(f"metadata.json entry {index} is invalid: {e}") from e
    return records
