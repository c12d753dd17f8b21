"""Tests for CLI command handlers."""

from unittest.mock import Mock

from cli.client import StorageClient
from cli.commands import (
    dispatch_command,
    handle_backup,
    handle_restore,
    handle_tag,
    handle_upload,
)
from cli.models import (
    BackupCommand,
    ListCommand,
    RestoreCommand,
    TagCommand,
    TagsCommand,
    UploadCommand,
)


def test_handle_upload():
    mock_client = Mock(spec=StorageClient)
    mock_client.upload.return_value = "Uploaded: note.txt"

    result = handle_upload(UploadCommand(path='note.txt', tag_list=('work', 'draft')), client=mock_client)

    assert result == "Uploaded: note.txt"
    mock_client.upload.assert_called_once_with('note.txt', ['work', 'draft'])


def test_handle_tag():
    mock_client = Mock(spec=StorageClient)
    mock_client.set_tags.return_value = "Updated"

    handle_tag(TagCommand(file_id='abc', tag_list=('final',)), client=mock_client)

    mock_client.set_tags.assert_called_once_with('abc', ['final'])


def test_handle_backup():
    mock_client = Mock(spec=StorageClient)
    mock_client.backup.return_value = "Saved to: nightly.zip"

    result = handle_backup(BackupCommand(output_path='nightly.zip'), client=mock_client)

    assert 'nightly.zip' in result
    mock_client.backup.assert_called_once_with('nightly.zip')


def test_handle_restore():
    mock_client = Mock(spec=StorageClient)
    mock_client.restore.return_value = "Restored 2 files"

    result = handle_restore(RestoreCommand(archive_path='nightly.zip'), client=mock_client)

    assert result == "Restored 2 files"
    mock_client.restore.assert_called_once_with('nightly.zip')


def test_dispatch_routes_by_type():
    mock_client = Mock(spec=StorageClient)
    mock_client.list_files.return_value = "Found 1 file(s)"
    mock_client.list_tags.return_value = "  - work"

    assert dispatch_command(ListCommand(query='work'), mock_client) == "Found 1 file(s)"
    assert dispatch_command(TagsCommand(), mock_client) == "  - work"
    mock_client.list_files.assert_called_once_with('work')


def test_dispatch_unknown_type():
    assert dispatch_command(object(), Mock(spec=StorageClient)).startswith("Unknown command type")


def test_run_once(monkeypatch, capsys):
    from cli.main import run_once

    monkeypatch.setattr("cli.main.dispatch_command", lambda cmd: f"ran {cmd.command}")

    assert run_once(['backup', 'nightly.zip']) == 0
    assert capsys.readouterr().out.strip() == "ran backup"
    assert run_once(['frobnicate']) == 2
