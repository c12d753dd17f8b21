"""ZIP archive codec: manifest plus one blob entry per record."""

import io
import os
import shutil
import tempfile
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import BinaryIO, Callable, Iterable, Iterator, List, Optional, Union

from common.constants import BLOB_ENTRY_PREFIX, DEFAULT_PIECE_SIZE, MANIFEST_ENTRY_NAME
from common.logging_config import get_logger
from server.archive.manifest import decode_manifest, encode_manifest
from server.exceptions import BlobUnavailableError, MalformedArchiveError
from server.types import FileRecord
from server.utils import blob_name_for

logger = get_logger(__name__)

BlobReader = Callable[[FileRecord], BinaryIO]

_ZIP_EPOCH = datetime(1980, 1, 1, tzinfo=timezone.utc)


def blob_entry_name(record: FileRecord) -> str:
    """
    Archive entry name for a record's blob: ``files/<id><ext>``.
    """
    return f"{BLOB_ENTRY_PREFIX}{blob_name_for(record.id, record.filename)}"


def _zip_date_time(value: Optional[datetime]) -> tuple:
    if value is None:
        value = _ZIP_EPOCH
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    if value.replace(tzinfo=timezone.utc) < _ZIP_EPOCH:
        value = _ZIP_EPOCH
    return (value.year, value.month, value.day, value.hour, value.minute, value.second)


def _entry_info(name: str, timestamp: Optional[datetime], size: Optional[int] = None) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=_zip_date_time(timestamp))
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    if size is not None:
        info.file_size = size
    return info


class _StreamSink:
    """
    Write-only, non-seekable target for ZipFile.

    ZipFile falls back to data descriptors when it cannot seek, so entries are
    emitted strictly in order and the encoder can drain bytes after each write.
    """

    def __init__(self):
        self._pieces: List[bytes] = []

    def write(self, data) -> int:
        self._pieces.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        data = b"".join(self._pieces)
        self._pieces.clear()
        return data


class ArchiveWriter:
    """
    Encodes records and their blobs into a ZIP stream.

    After the stream is exhausted, ``blobs_written`` and ``skipped_blobs``
    describe what made it into the archive.
    """

    def __init__(self, blob_reader: BlobReader, piece_size: int = DEFAULT_PIECE_SIZE):
        self.blob_reader = blob_reader
        self.piece_size = piece_size
        self.blobs_written = 0
        self.skipped_blobs: List[str] = []

    def stream(self, records: Iterable[FileRecord]) -> Iterator[bytes]:
        records = list(records)
        sink = _StreamSink()
        newest = max(
            (r.updated_at or r.created_at for r in records if (r.updated_at or r.created_at)),
            default=None,
        )

        with zipfile.ZipFile(sink, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(_entry_info(MANIFEST_ENTRY_NAME, newest), encode_manifest(records))
            yield sink.drain()

            for record in records:
                yield from self._write_blob(archive, sink, record)

        tail = sink.drain()
        if tail:
            yield tail

    def _write_blob(self, archive: zipfile.ZipFile, sink: _StreamSink, record: FileRecord) -> Iterator[bytes]:
        entry_name = blob_entry_name(record)
        # Copied out in full first: a read error must not leave a partial entry
        spool = tempfile.SpooledTemporaryFile(max_size=self.piece_size)
        try:
            with self.blob_reader(record) as blob:
                shutil.copyfileobj(blob, spool, self.piece_size)
        except (BlobUnavailableError, OSError) as e:
            spool.close()
            logger.warning(f"Skipping blob for record {record.id} ({record.filename}): {e}")
            self.skipped_blobs.append(record.id)
            return

        with spool:
            spool.seek(0, os.SEEK_END)
            size = spool.tell()
            spool.seek(0)
            info = _entry_info(entry_name, record.updated_at or record.created_at, size)
            with archive.open(info, mode="w") as dest:
                while True:
                    piece = spool.read(self.piece_size)
                    if not piece:
                        break
                    dest.write(piece)
                    data = sink.drain()
                    if data:
                        yield data

        self.blobs_written += 1
        data = sink.drain()
        if data:
            yield data


def encode_archive(
    records: Iterable[FileRecord],
    blob_reader: BlobReader,
    piece_size: int = DEFAULT_PIECE_SIZE,
) -> Iterator[bytes]:
    """
    Encode records and their blobs as a ZIP stream.

    Args:
        records: Records in the order they should appear in the manifest
        blob_reader: Opens a record's blob; raises BlobUnavailableError when absent
        piece_size: Bytes copied per step

    Yields:
        Archive bytes, incrementally
    """
    return ArchiveWriter(blob_reader, piece_size).stream(records)


@dataclass
class ArchiveEntry:
    """A non-manifest entry of a decoded archive, named verbatim."""
    name: str
    is_dir: bool
    _archive: zipfile.ZipFile
    _info: zipfile.ZipInfo

    def open(self) -> BinaryIO:
        return self._archive.open(self._info)


class DecodedArchive:
    """
    Manifest records plus lazily readable entries of an archive.

    Use as a context manager; entries can only be read while it is open.
    """

    def __init__(self, archive: zipfile.ZipFile, manifest_info: zipfile.ZipInfo,
                 manifest: List[FileRecord], spool: Optional[BinaryIO] = None):
        self._archive = archive
        self._manifest_info = manifest_info
        self.manifest = manifest
        self._spool = spool

    def entries(self) -> Iterator[ArchiveEntry]:
        """Every entry except the manifest, in archive order."""
        for info in self._archive.infolist():
            if info is self._manifest_info:
                continue
            yield ArchiveEntry(name=info.filename, is_dir=info.is_dir(), _archive=self._archive, _info=info)

    def blob_entries(self) -> Iterator[ArchiveEntry]:
        """Non-directory entries under the blob prefix, in archive order."""
        for entry in self.entries():
            if entry.is_dir or not entry.name.startswith(BLOB_ENTRY_PREFIX):
                continue
            yield entry

    def close(self) -> None:
        self._archive.close()
        if self._spool is not None:
            self._spool.close()

    def __enter__(self) -> "DecodedArchive":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _is_seekable(stream) -> bool:
    try:
        return bool(stream.seekable())
    except (AttributeError, ValueError):
        return False


def decode_archive(
    source: Union[bytes, BinaryIO],
    spool_max_bytes: int = 32 * 1024 * 1024,
    piece_size: int = DEFAULT_PIECE_SIZE,
) -> DecodedArchive:
    """
    Open an archive and parse its manifest.

    Non-seekable streams are spooled first: in memory up to spool_max_bytes,
    on disk beyond that.

    Raises:
        MalformedArchiveError: If the container is unreadable or the manifest
            is missing or unparseable
    """
    spool = None
    if isinstance(source, (bytes, bytearray)):
        stream = io.BytesIO(source)
    elif _is_seekable(source):
        stream = source
    else:
        spool = tempfile.SpooledTemporaryFile(max_size=spool_max_bytes)
        while True:
            piece = source.read(piece_size)
            if not piece:
                break
            spool.write(piece)
        spool.seek(0)
        stream = spool

    try:
        archive = zipfile.ZipFile(stream)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, EOFError, ValueError) as e:
        if spool is not None:
            spool.close()
        raise MalformedArchiveError(f"Archive is not a readable ZIP file: {e}") from e

    try:
        manifest_info = next(
            (info for info in archive.infolist() if info.filename == MANIFEST_ENTRY_NAME),
            None,
        )
        if manifest_info is None:
            raise MalformedArchiveError(f"Archive has no {MANIFEST_ENTRY_NAME}")

        try:
            data = archive.read(manifest_info)
        except (zipfile.BadZipFile, OSError, EOFError, RuntimeError, ValueError) as e:
            raise MalformedArchiveError(f"Cannot read {MANIFEST_ENTRY_NAME}: {e}") from e

        manifest = decode_manifest(data)
    except MalformedArchiveError:
        archive.close()
        if spool is not None:
            spool.close()
        raise

    return DecodedArchive(archive, manifest_info, manifest, spool)
