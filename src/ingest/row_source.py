"""Delimited text row sources.

This module tokenizes CSV, TSV and pipe-delimited text into raw rows.
Readers are lazy and single-pass: one row is held in memory at a time.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterator, TextIO

from core.constants import DEFAULT_DELIMITER, DEFAULT_ENCODING
from core.errors import RowSourceError


def split_line(line: str, delimiter: str = DEFAULT_DELIMITER) -> list[str]:
    """Split one delimited line into raw values.

    Quoted values follow the ``csv`` module's default dialect. An empty
    line yields a single empty value.

    Args:
        line: Raw text line, with or without its line terminator.
        delimiter: Field delimiter.

    Returns:
        Raw values in column order.

    Raises:
        RowSourceError: If the line has malformed quoting.
    """
    if line == "":
        return [""]
    try:
        return next(csv.reader([line], delimiter=delimiter), [""])
    except csv.Error as error:
        raise RowSourceError(
            f"Failed to split delimited line: {error}. Check quoting and the delimiter."
        ) from error


def iter_delimited_rows(
    source_path: str | Path,
    delimiter: str = DEFAULT_DELIMITER,
    encoding: str = DEFAULT_ENCODING,
) -> Iterator[list[str]]:
    """Lazily read raw rows from a delimited text file.

    Blank lines are skipped.

    Args:
        source_path: Path to the delimited file.
        delimiter: Field delimiter.
        encoding: Text encoding of the file.

    Returns:
        Iterator over raw rows.

    Raises:
        RowSourceError: If the path does not exist or is not a file.
    """
    path = Path(source_path).expanduser()
    if not path.is_file():
        raise RowSourceError(
            f"Failed to read source at {path}: path does not exist or is not a file. "
            "Provide an existing delimited text file."
        )
    return _iter_file_rows(path, delimiter, encoding)


def iter_stream_rows(stream: TextIO, delimiter: str = DEFAULT_DELIMITER) -> Iterator[list[str]]:
    """Lazily read raw rows from an open text stream.

    Args:
        stream: Text stream opened with ``newline=""``.
        delimiter: Field delimiter.

    Yields:
        Raw rows, skipping blank lines.

    Raises:
        RowSourceError: If the stream has malformed quoting.
    """
    reader = csv.reader(stream, delimiter=delimiter)
    try:
        for row in reader:
            if row:
                yield row
    except csv.Error as error:
        raise RowSourceError(
            f"Failed to parse delimited input at line {reader.line_num}: {error}. "
            "Check quoting and the delimiter."
        ) from error


def _iter_file_rows(path: Path, delimiter: str, encoding: str) -> Iterator[list[str]]:
    try:
        with path.open("r", encoding=encoding, newline="") as stream:
            yield from iter_stream_rows(stream, delimiter)
    except UnicodeDecodeError as error:
        raise RowSourceError(
            f"Failed to decode {path} as {encoding}: {error.reason}. "
            "Set the source encoding to match the file."
        ) from error
    except OSError as error:
        raise RowSourceError(
            f"Failed to read source at {path}: {error}. Check file permissions."
        ) from error
