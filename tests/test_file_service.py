"""Tests for FileService business logic."""

import io
from unittest.mock import Mock

import pytest

from server.exceptions import (
    BlobUnavailableError,
    InvalidUploadError,
    MetadataWriteError,
    RecordNotFoundError,
)
from server.services.file_service import FileService


def upload(service, filename="note.txt", data=b"hello", tags=("work", "draft")):
    return service.upload_file(filename, io.BytesIO(data), "text/plain", list(tags))


class TestUpload:

    def test_upload_stores_blob_and_record(self, file_service, file_repo, blob_store):
        record = upload(file_service)

        assert record.size == 5
        assert record.tags == ["work", "draft"]
        assert blob_store.get(f"{record.id}.txt") == b"hello"
        assert file_repo.get_by_id(record.id).filename == "note.txt"

    def test_upload_requires_filename(self, file_service):
        with pytest.raises(InvalidUploadError):
            upload(file_service, filename="")

    def test_upload_removes_blob_when_record_fails(self, blob_store):
        repo = Mock()
        repo.create_file.side_effect = MetadataWriteError("locked")
        service = FileService(repo, blob_store)

        with pytest.raises(MetadataWriteError):
            upload(service)

        assert list(blob_store.base_dir.iterdir()) == []


class TestQueries:

    def test_search_pages_and_filters(self, file_service):
        first = upload(file_service, "a.txt", tags=["work"])
        upload(file_service, "b.txt", tags=["home"])

        assert [r.id for r in file_service.search_files("work", 1, 10)] == [first.id]
        assert len(file_service.search_files("", 1, 1)) == 1
        assert len(file_service.search_files("", 0, 0)) == 1

    def test_search_non_ascii_tag(self, file_service):
        tagged = upload(file_service, tags=["café"])
        upload(file_service, filename="other.txt", tags=["cafe"])

        assert [r.id for r in file_service.search_files("café", 1, 50)] == [tagged.id]

    def test_get_missing(self, file_service):
        with pytest.raises(RecordNotFoundError):
            file_service.get_file("nope")

    def test_get_download(self, file_service):
        record = upload(file_service)
        found, path = file_service.get_download(record.id)
        assert found.id == record.id
        assert path.read_bytes() == b"hello"

    def test_get_download_missing_blob(self, file_service, blob_store):
        record = upload(file_service)
        blob_store.delete(f"{record.id}.txt")

        with pytest.raises(BlobUnavailableError):
            file_service.get_download(record.id)

    def test_list_tags(self, file_service):
        upload(file_service, "a.txt", tags=["work", "draft"])
        upload(file_service, "b.txt", tags=["archive"])
        assert file_service.list_tags() == ["archive", "draft", "work"]


class TestMutations:

    def test_delete(self, file_service, file_repo, blob_store):
        record = upload(file_service)
        file_service.delete_file(record.id)

        assert file_repo.get_by_id(record.id) is None
        assert not blob_store.exists(f"{record.id}.txt")

    def test_delete_missing(self, file_service):
        with pytest.raises(RecordNotFoundError):
            file_service.delete_file("nope")

    def test_update_tags(self, file_service, file_repo):
        record = upload(file_service)
        file_service.update_file(record.id, [" final ", ""])
        assert file_repo.get_by_id(record.id).tags == ["final"]

    def test_rename_with_new_extension_moves_blob(self, file_service, file_repo, blob_store):
        record = upload(file_service)

        file_service.update_file(record.id, None, "note.md")

        assert file_repo.get_by_id(record.id).filename == "note.md"
        assert not blob_store.exists(f"{record.id}.txt")
        assert blob_store.get(f"{record.id}.md") == b"hello"
        assert file_repo.get_by_id(record.id).tags == ["work", "draft"]

    def test_rename_rolled_back_when_update_fails(self, file_service, blob_store, monkeypatch):
        record = upload(file_service)
        monkeypatch.setattr(
            file_service.file_repo, "update_file", Mock(side_effect=MetadataWriteError("locked"))
        )

        with pytest.raises(MetadataWriteError):
            file_service.update_file(record.id, None, "note.md")

        assert blob_store.get(f"{record.id}.txt") == b"hello"
        assert not blob_store.exists(f"{record.id}.md")
