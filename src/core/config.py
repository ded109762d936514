"""Runtime configuration model for csvavro.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import codecs
import os

from core.constants import (
    DEFAULT_CODEC,
    DEFAULT_DELIMITER,
    DEFAULT_ENCODING,
    DEFAULT_SYNC_INTERVAL,
    SUPPORTED_CODECS,
)
from core.errors import CsvAvroConfigError


@dataclass(frozen=True)
class CsvAvroConfig:
    """Validated runtime configuration.

    Attributes:
        codec: Avro block compression codec.
        encoding: Text encoding used to read delimited input files.
        delimiter: Default single-character field delimiter.
        sync_interval: Approximate Avro block size in bytes.
    """

    codec: str = DEFAULT_CODEC
    encoding: str = DEFAULT_ENCODING
    delimiter: str = DEFAULT_DELIMITER
    sync_interval: int = DEFAULT_SYNC_INTERVAL

    @classmethod
    def from_env(cls) -> "CsvAvroConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            CsvAvroConfigError: If environment values are invalid.
        """
        codec = validate_codec(os.getenv("CSVAVRO_CODEC", DEFAULT_CODEC))
        encoding = _parse_encoding(os.getenv("CSVAVRO_ENCODING", DEFAULT_ENCODING))
        delimiter = validate_delimiter(os.getenv("CSVAVRO_DELIMITER", DEFAULT_DELIMITER))
        sync_interval = _parse_sync_interval(
            os.getenv("CSVAVRO_SYNC_INTERVAL", str(DEFAULT_SYNC_INTERVAL))
        )
        return cls(
            codec=codec,
            encoding=encoding,
            delimiter=delimiter,
            sync_interval=sync_interval,
        )


def validate_codec(raw_value: str) -> str:
    """Validate an Avro codec name.

    Args:
        raw_value: Codec name from environment, CLI or job file.

    Returns:
        Normalized codec name.

    Raises:
        CsvAvroConfigError: If the codec is not supported.
    """
    codec = raw_value.strip().lower()
    if codec not in SUPPORTED_CODECS:
        raise CsvAvroConfigError(
            f"Unsupported Avro codec '{raw_value}'. "
            f"Use one of: {', '.join(SUPPORTED_CODECS)}."
        )
    return codec


def validate_delimiter(raw_value: str) -> str:
    """Validate a field delimiter.

    Args:
        raw_value: Candidate delimiter. ``\\t`` is accepted as an escape for tab.

    Returns:
        Single-character delimiter.

    Raises:
        CsvAvroConfigError: If the delimiter is not exactly one character.
    """
    delimiter = "\t" if raw_value == "\\t" else raw_value
    if len(delimiter) != 1:
        raise CsvAvroConfigError(
            f"Invalid delimiter '{raw_value}': expected exactly one character."
        )
    return delimiter


def _parse_encoding(raw_value: str) -> str:
    try:
        return codecs.lookup(raw_value).name
    except LookupError as error:
        raise CsvAvroConfigError(
            f"Invalid CSVAVRO_ENCODING value: unknown encoding '{raw_value}'. "
            "Set CSVAVRO_ENCODING to a Python codec name such as utf-8."
        ) from error


def _parse_sync_interval(raw_value: str) -> int:
    """Parse the sync interval environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed positive integer.

    Raises:
        CsvAvroConfigError: If value is not a positive integer.
    """
    try:
        sync_interval = int(raw_value)
    except ValueError as error:
        raise CsvAvroConfigError(
            "Invalid CSVAVRO_SYNC_INTERVAL value: "
            f"expected integer, got '{raw_value}'. "
            "Set CSVAVRO_SYNC_INTERVAL to a numeric value."
        ) from error
    if sync_interval <= 0:
        raise CsvAvroConfigError(
            f"Invalid CSVAVRO_SYNC_INTERVAL value: expected a positive integer, got {sync_interval}."
        )
    return sync_interval
