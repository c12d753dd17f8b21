"""Integration tests for the file repository."""

from datetime import datetime, timedelta, timezone

import pytest

from server.database import get_db_connection
from server.exceptions import MetadataWriteError
from server.types import FileRecord

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_record(file_id, filename="note.txt", tags=None, minutes=0):
    return FileRecord(
        id=file_id,
        filename=filename,
        content_type="text/plain",
        size=5,
        tags=tags if tags is not None else [],
        created_at=BASE_TIME + timedelta(minutes=minutes),
        updated_at=BASE_TIME + timedelta(minutes=minutes),
    )


class TestTagStorage:

    def test_tags_stored_as_readable_json(self, file_repo, db_path):
        file_repo.create_file(make_record("r1", tags=["café", "work"]))
        with get_db_connection(str(db_path)) as conn:
            row = conn.execute("SELECT tags FROM files WHERE id = ?", ("r1",)).fetchone()
        assert row["tags"] == '["café", "work"]'

    def test_search_matches_non_ascii_tag(self, file_repo):
        file_repo.create_file(make_record("r1", tags=["café"]))
        file_repo.create_file(make_record("r2", tags=["cafe"], minutes=1))

        assert [r.id for r in file_repo.search("café", limit=10, offset=0)] == ["r1"]

    def test_update_keeps_non_ascii_tag_searchable(self, file_repo):
        file_repo.create_file(make_record("r1", tags=["work"]))
        record = file_repo.get_by_id("r1")
        record.tags = ["日本"]
        file_repo.update_file(record)

        assert [r.id for r in file_repo.search("日本", limit=10, offset=0)] == ["r1"]


class TestFileRepository:

    def test_create_and_get(self, file_repo):
        file_repo.create_file(make_record("r1", tags=["work", "draft"]))

        record = file_repo.get_by_id("r1")
        assert record.filename == "note.txt"
        assert record.tags == ["work", "draft"]
        assert record.created_at == BASE_TIME

    def test_get_missing(self, file_repo):
        assert file_repo.get_by_id("nope") is None

    def test_create_fills_timestamps(self, file_repo):
        created = file_repo.create_file(FileRecord(id="r1", filename="a.txt"))
        assert created.created_at is not None
        assert created.updated_at is not None

    def test_duplicate_id_raises(self, file_repo):
        file_repo.create_file(make_record("r1"))
        with pytest.raises(MetadataWriteError):
            file_repo.create_file(make_record("r1"))

    def test_list_all_creation_order_ties_by_id(self, file_repo):
        file_repo.create_file(make_record("b", minutes=0))
        file_repo.create_file(make_record("c", minutes=1))
        file_repo.create_file(make_record("a", minutes=0))

        assert [r.id for r in file_repo.list_all()] == ["a", "b", "c"]

    def test_search_newest_first(self, file_repo):
        for i in range(3):
            file_repo.create_file(make_record(f"r{i}", minutes=i))

        assert [r.id for r in file_repo.search("", 10, 0)] == ["r2", "r1", "r0"]

    def test_search_pagination(self, file_repo):
        for i in range(5):
            file_repo.create_file(make_record(f"r{i}", minutes=i))

        assert [r.id for r in file_repo.search("", 2, 2)] == ["r2", "r1"]

    def test_search_matches_whole_tag(self, file_repo):
        file_repo.create_file(make_record("r1", tags=["work"]))
        file_repo.create_file(make_record("r2", tags=["homework"]))

        assert [r.id for r in file_repo.search("work", 10, 0)] == ["r1"]

    def test_update_file(self, file_repo):
        file_repo.create_file(make_record("r1"))
        record = file_repo.get_by_id("r1")
        record.tags = ["final"]

        updated = file_repo.update_file(record)

        assert updated.updated_at > BASE_TIME
        assert file_repo.get_by_id("r1").tags == ["final"]

    def test_update_missing_raises(self, file_repo):
        with pytest.raises(MetadataWriteError):
            file_repo.update_file(make_record("ghost"))

    def test_upsert_inserts_then_updates(self, file_repo):
        assert file_repo.upsert(make_record("r1", tags=["a"])) == "inserted"

        replacement = make_record("r1", filename="renamed.md", tags=["b"], minutes=5)
        replacement.size = 42
        assert file_repo.upsert(replacement) == "updated"

        stored = file_repo.get_by_id("r1")
        assert stored.filename == "renamed.md"
        assert stored.tags == ["b"]
        assert stored.size == 42
        assert stored.created_at == BASE_TIME + timedelta(minutes=5)
        assert len(file_repo.list_all()) == 1

    def test_upsert_keeps_created_at_when_missing(self, file_repo):
        file_repo.create_file(make_record("r1"))
        replacement = make_record("r1", tags=["x"])
        replacement.created_at = None

        file_repo.upsert(replacement)

        assert file_repo.get_by_id("r1").created_at == BASE_TIME

    def test_delete_file(self, file_repo):
        file_repo.create_file(make_record("r1"))
        assert file_repo.delete_file("r1") is True
        assert file_repo.delete_file("r1") is False
        assert file_repo.get_by_id("r1") is None

    def test_list_tags_distinct_sorted(self, file_repo):
        file_repo.create_file(make_record("r1", tags=["work", " draft "]))
        file_repo.create_file(make_record("r2", tags=["draft", "archive"]))

        assert file_repo.list_tags() == ["archive", "draft", "work"]
