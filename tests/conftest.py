"""Shared pytest fixtures for all tests."""

import pytest

from cli.config import Config
from server.blob_store import BlobStore
from server.database import init_database
from server.repositories.file_repository import FileRepository
from server.services.backup_service import BackupService
from server.services.file_service import FileService
from server.services.restore_service import RestoreService


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .tagvault directory
    """
    config_dir = tmp_path / '.tagvault'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir, monkeypatch):
    """Config instance backed by a temp config file; retry backoff does not sleep."""
    monkeypatch.setattr("cli.client.time.sleep", lambda seconds: None)
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing file uploads.

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'test.txt'
    file_path.write_text('Sample content for testing')
    return file_path


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """
    Fresh SQLite database for each test.

    The module-level default is patched too so code that opens its own
    repository lands in the same file.
    """
    path = tmp_path / 'storage.db'
    monkeypatch.setattr("server.database.DATABASE_PATH", str(path))
    init_database(str(path))
    return path


@pytest.fixture
def file_repo(db_path):
    return FileRepository(str(db_path))


@pytest.fixture
def blob_store(tmp_path):
    store = BlobStore(tmp_path / 'uploads')
    store.ensure_directory()
    return store


@pytest.fixture
def file_service(file_repo, blob_store):
    return FileService(file_repo, blob_store)


@pytest.fixture
def backup_service(file_repo, blob_store):
    return BackupService(file_repo, blob_store, piece_size=16)


@pytest.fixture
def restore_service(file_repo, blob_store):
    return RestoreService(file_repo, blob_store, spool_max_bytes=1024, piece_size=16)


@pytest.fixture
def fresh_stores(tmp_path):
    """A second, empty database and blob store, for restoring into."""
    path = tmp_path / 'restored.db'
    init_database(str(path))
    store = BlobStore(tmp_path / 'restored-uploads')
    store.ensure_directory()
    return FileRepository(str(path)), store
