"""Command parser for CLI input."""

import shlex

from cli.models import (
    BackupCommand,
    CommandRequest,
    DeleteCommand,
    DownloadCommand,
    ListCommand,
    RestoreCommand,
    TagCommand,
    TagsCommand,
    UploadCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a command object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        One of the command dataclasses in cli.models

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]
    args = tokens[1:]

    if command_name == "upload":
        return _parse_upload(args)
    elif command_name == "list":
        return _parse_list(args)
    elif command_name == "download":
        return _parse_download(args)
    elif command_name == "delete":
        return _parse_delete(args)
    elif command_name == "tag":
        return _parse_tag(args)
    elif command_name == "tags":
        return TagsCommand()
    elif command_name == "backup":
        return _parse_backup(args)
    elif command_name == "restore":
        return _parse_restore(args)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <path> [tag ...]' command."""
    if not args:
        raise ParseError("upload requires a file path")

    return UploadCommand(path=args[0], tag_list=tuple(args[1:]))


def _parse_list(args: list[str]) -> ListCommand:
    """Parse 'list [tag]' command."""
    if len(args) > 1:
        raise ParseError("list accepts at most one tag")

    return ListCommand(query=args[0] if args else "")


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <id> [output_path]' command."""
    if not args or len(args) > 2:
        raise ParseError("download requires 1 or 2 arguments: <id> [output_path]")

    return DownloadCommand(file_id=args[0], output_path=args[1] if len(args) > 1 else None)


def _parse_delete(args: list[str]) -> DeleteCommand:
    """Parse 'delete <id>' command."""
    if len(args) != 1:
        raise ParseError("delete requires exactly 1 argument: <id>")

    return DeleteCommand(file_id=args[0])


def _parse_tag(args: list[str]) -> TagCommand:
    """Parse 'tag <id> <tag ...>' command."""
    if len(args) < 2:
        raise ParseError("tag requires a file id and at least one tag")

    return TagCommand(file_id=args[0], tag_list=tuple(args[1:]))


def _parse_backup(args: list[str]) -> BackupCommand:
    """Parse 'backup [output.zip]' command."""
    if len(args) > 1:
        raise ParseError("backup accepts at most one output path")

    return BackupCommand(output_path=args[0] if args else None)


def _parse_restore(args: list[str]) -> RestoreCommand:
    """Parse 'restore <archive.zip>' command."""
    if len(args) != 1:
        raise ParseError("restore requires exactly 1 argument: <archive.zip>")

    return RestoreCommand(archive_path=args[0])
