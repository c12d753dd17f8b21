"""Backup archive format: ZIP with metadata.json and files/ blob entries."""

from server.archive.codec import (
    ArchiveEntry,
    ArchiveWriter,
    DecodedArchive,
    blob_entry_name,
    decode_archive,
    encode_archive,
)
from server.archive.manifest import ManifestEntry, decode_manifest, encode_manifest

__all__ = [
    "ArchiveEntry",
    "ArchiveWriter",
    "DecodedArchive",
    "ManifestEntry",
    "blob_entry_name",
    "decode_archive",
    "decode_manifest",
    "encode_archive",
    "encode_manifest",
]
