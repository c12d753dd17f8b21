"""Tests for CLI helpers and REPL builtins."""

from datetime import datetime

import pytest

from cli.repl import build_completer, handle_builtin
from cli.utils import format_file_size, format_timestamp


@pytest.mark.parametrize("size,expected", [
    (0, "0 B"),
    (512, "512 B"),
    (1536, "1.50 KiB"),
    (5 * 1024 * 1024, "5.00 MiB"),
    (3 * 1024 ** 4, "3.00 TiB"),
])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_format_timestamp_local_time():
    expected = datetime.fromisoformat('2024-01-01T12:30:00+00:00').astimezone().strftime('%Y-%m-%d %H:%M:%S')
    assert format_timestamp('2024-01-01T12:30:00Z') == expected


def test_format_timestamp_missing_or_garbage():
    assert format_timestamp(None) == '-'
    assert format_timestamp('soon') == 'soon'


def test_handle_builtin(capsys):
    assert handle_builtin('help') is True
    assert 'restore <archive.zip>' in capsys.readouterr().out
    assert handle_builtin('exit') is False
    assert handle_builtin('list') is None


def test_completer_offers_commands():
    from prompt_toolkit.document import Document

    completions = {c.text for c in build_completer().get_completions(Document('re'), None)}
    assert completions == {'restore'}
