"""Unit tests for delimited row sources."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from core.errors import RowSourceError
from ingest.row_source import iter_delimited_rows, iter_stream_rows, split_line
from tests.fixture_paths import fixture_path


def test_split_line_honors_quotes() -> None:
    """Quoted delimiters should stay inside one value."""
    assert split_line('Lee,"Finance, North",34') == ["Lee", "Finance, North", "34"]


def test_split_line_uses_custom_delimiter() -> None:
    """Pipe-delimited lines should split on the pipe."""
    assert split_line("01112|05|", "|") == ["01112", "05", ""]


def test_split_line_returns_single_empty_value_for_empty_line() -> None:
    """An empty line should map to one empty value."""
    assert split_line("") == [""]


def test_iter_delimited_rows_skips_blank_lines() -> None:
    """File reader should skip blank lines and keep quoted commas."""
    rows = list(iter_delimited_rows(fixture_path("csv/cost_index.txt"), delimiter="|"))

    assert len(rows) == 2 and rows[0][2] == "NORTHERN CALIFORNIA, REST OF STATE"


def test_iter_delimited_rows_rejects_missing_file(tmp_path: Path) -> None:
    """Missing sources should fail before iteration starts."""
    with pytest.raises(RowSourceError):
        iter_delimited_rows(tmp_path / "missing.csv")


def test_iter_delimited_rows_wraps_decode_errors(tmp_path: Path) -> None:
    """Undecodable bytes should raise a row source error."""
    source = tmp_path / "latin.csv"
    source.write_bytes(b"Lee,\xff\xfe\n")

    with pytest.raises(RowSourceError):
        list(iter_delimited_rows(source, encoding="utf-8"))


def test_iter_stream_rows_reads_open_stream() -> None:
    """Stream reader should yield rows lazily from text streams."""
    stream = io.StringIO("Lee,34\n\nSam,29\n")

    assert list(iter_stream_rows(stream)) == [["Lee", "34"], ["Sam", "29"]]
