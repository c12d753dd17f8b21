"""Command handler functions for CLI operations."""

import os
from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from cli.client import StorageClient
from cli.config import Config
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

logger = get_logger(__name__)


_client: Optional[StorageClient] = None


def get_config_path() -> Path:
    """Location of the CLI config file, overridable with TAGVAULT_CONFIG."""
    override = os.environ.get('TAGVAULT_CONFIG')
    if override:
        return Path(override)
    return Path.home() / '.tagvault' / 'config.json'


def get_client() -> StorageClient:
    """
    Get or create global StorageClient instance.

    Returns:
        StorageClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new StorageClient instance")
        _client = StorageClient(Config(get_config_path()))
    return _client


def handle_upload(cmd: UploadCommand, client: Optional[StorageClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with path and tag_list
        client: Optional StorageClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing upload command: path={cmd.path}, tags={list(cmd.tag_list)}")
    if client is None:
        client = get_client()
    return client.upload(cmd.path, list(cmd.tag_list))


def handle_list(cmd: ListCommand, client: Optional[StorageClient] = None) -> str:
    """
    Handle 'list' command.

    Args:
        cmd: ListCommand with optional tag query
        client: Optional StorageClient for dependency injection (testing)

    Returns:
        Formatted list of files
    """
    if client is None:
        client = get_client()
    return client.list_files(cmd.query)


def handle_download(cmd: DownloadCommand, client: Optional[StorageClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.download(cmd.file_id, cmd.output_path)


def handle_delete(cmd: DeleteCommand, client: Optional[StorageClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.delete(cmd.file_id)


def handle_tag(cmd: TagCommand, client: Optional[StorageClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.set_tags(cmd.file_id, list(cmd.tag_list))


def handle_tags(cmd: TagsCommand, client: Optional[StorageClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.list_tags()


def handle_backup(cmd: BackupCommand, client: Optional[StorageClient] = None) -> str:
    """
    Handle 'backup' command.

    Args:
        cmd: BackupCommand with optional output path
        client: Optional StorageClient for dependency injection (testing)

    Returns:
        Location of the saved archive or an error message
    """
    logger.info(f"Executing backup command: output={cmd.output_path}")
    if client is None:
        client = get_client()
    return client.backup(cmd.output_path)


def handle_restore(cmd: RestoreCommand, client: Optional[StorageClient] = None) -> str:
    """
    Handle 'restore' command.

    Args:
        cmd: RestoreCommand with archive path
        client: Optional StorageClient for dependency injection (testing)

    Returns:
        Restore summary or an error message
    """
    logger.info(f"Executing restore command: archive={cmd.archive_path}")
    if client is None:
        client = get_client()
    return client.restore(cmd.archive_path)


_HANDLERS = {
    UploadCommand: handle_upload,
    ListCommand: handle_list,
    DownloadCommand: handle_download,
    DeleteCommand: handle_delete,
    TagCommand: handle_tag,
    TagsCommand: handle_tags,
    BackupCommand: handle_backup,
    RestoreCommand: handle_restore,
}


def dispatch_command(cmd_obj: CommandRequest, client: Optional[StorageClient] = None) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = _HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj, client)
