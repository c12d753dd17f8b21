"""Command data types for the CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class UploadCommand:
    """Upload one file with tags."""

    path: str
    tag_list: tuple[str, ...]
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ListCommand:
    """List files, optionally filtered by a tag."""

    query: str = ""
    command: Literal["list"] = "list"


@dataclass(frozen=True)
class DownloadCommand:
    """Download file by id."""

    file_id: str
    output_path: str | None = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete file by id."""

    file_id: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class TagCommand:
    """Replace a file's tags."""

    file_id: str
    tag_list: tuple[str, ...]
    command: Literal["tag"] = "tag"


@dataclass(frozen=True)
class TagsCommand:
    """List all tags."""

    command: Literal["tags"] = "tags"


@dataclass(frozen=True)
class BackupCommand:
    """Download a backup archive."""

    output_path: str | None = None
    command: Literal["backup"] = "backup"


@dataclass(frozen=True)
class RestoreCommand:
    """Upload a backup archive for restore."""

    archive_path: str
    command: Literal["restore"] = "restore"


CommandRequest = (
    UploadCommand
    | ListCommand
    | DownloadCommand
    | DeleteCommand
    | TagCommand
    | TagsCommand
    | BackupCommand
    | RestoreCommand
)
