"""Avro container file reader.

This module reads converted records back out of an Avro container file,
for inspection from the CLI and for verifying conversions.
"""

from __future__ import annotations

from itertools import islice
from pathlib import Path
from typing import Any, Iterator

from fastavro import reader

from core.errors import AvroReadError


def iter_avro_records(avro_path: str | Path, limit: int | None = None) -> Iterator[dict[str, Any]]:
    """Lazily yield records from an Avro container file.

    Args:
        avro_path: Path to the ``.avro`` file.
        limit: Optional maximum number of records to yield.

    Yields:
        Decoded records in file order.

    Raises:
        AvroReadError: If the file is missing or not a valid Avro container.
    """
    path = Path(avro_path).expanduser()
    if not path.is_file():
        raise AvroReadError(f"Avro file does not exist at {path}. Provide a valid .avro path.")
    if limit is not None and limit < 0:
        raise AvroReadError(f"Invalid record limit {limit}: expected an integer >= 0.")
    try:
        with path.open("rb") as stream:
            yield from islice(reader(stream), limit)
    except (OSError, ValueError, EOFError) as error:
        raise AvroReadError(
            f"Failed to read Avro records from {path}: {error}. "
            "Check the file is a complete Avro container."
        ) from error


def read_avro_records(avro_path: str | Path) -> list[dict[str, Any]]:
    """Read every record from an Avro container file.

    Args:
        avro_path: Path to the ``.avro`` file.

    Returns:
        Decoded records in file order.
    """
    return list(iter_avro_records(avro_path))


def read_avro_schema(avro_path: str | Path) -> dict[str, Any]:
    """Return the writer schema stored in an Avro file header.

    Args:
        avro_path: Path to the ``.avro`` file.

    Returns:
        Writer schema as a JSON-compatible mapping.

    Raises:
        AvroReadError: If the file is missing or not a valid Avro container.
    """
    path = Path(avro_path).expanduser()
    if not path.is_file():
        raise AvroReadError(f"Avro file does not exist at {path}. Provide a valid .avro path.")
    try:
        with path.open("rb") as stream:
            return dict(reader(stream).writer_schema)
    except (OSError, ValueError, EOFError) as error:
        raise AvroReadError(f"Failed to read Avro header from {path}: {error}.") from error
