"""Tests for server utility helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from server.utils import (
    blob_name_for,
    clean_tags,
    extension_of,
    generate_uuid,
    parse_tags,
    parse_timestamp,
)


class TestExtensionOf:

    @pytest.mark.parametrize("filename,expected", [
        ("note.txt", ".txt"),
        ("archive.tar.gz", ".gz"),
        ("README", ""),
        (".env", ".env"),
        ("photo.JPG", ".JPG"),
        ("dir.d/file", ""),
        ("", ""),
    ])
    def test_extension_of(self, filename, expected):
        assert extension_of(filename) == expected

    def test_blob_name_for(self):
        assert blob_name_for("r1", "note.txt") == "r1.txt"
        assert blob_name_for("r2", "Makefile") == "r2"


class TestParseTimestamp:

    def test_utc_z_suffix(self):
        parsed = parse_timestamp("2024-03-01T10:20:30Z")
        assert parsed == datetime(2024, 3, 1, 10, 20, 30, tzinfo=timezone.utc)

    def test_nanoseconds_truncated(self):
        parsed = parse_timestamp("2024-03-01T10:20:30.123456789+02:00")
        assert parsed.microsecond == 123456
        assert parsed.utcoffset() == timedelta(hours=2)

    def test_empty_and_none(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None

    def test_datetime_passthrough(self):
        now = datetime.now(timezone.utc)
        assert parse_timestamp(now) is now

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestTags:

    def test_parse_tags_trims_and_drops_empty(self):
        assert parse_tags(" work, draft ,,") == ["work", "draft"]

    def test_parse_tags_empty_string(self):
        assert parse_tags("") == []

    def test_clean_tags_none(self):
        assert clean_tags(None) == []


def test_generate_uuid_unique():
    assert generate_uuid() != generate_uuid()
