"""Conversion driver for delimited rows.

This module streams raw rows through record building into a record sink,
counting appended rows. The first failure aborts the conversion and the
sink is closed on every exit path.
"""

from __future__ import annotations

from itertools import islice
from typing import Iterable, Protocol

from core.errors import CsvAvroConfigError, CsvAvroError
from core.logging_config import get_logger
from core.record_schema import RecordSchema
from core.types import RawRow, Record
from ingest.field_resolver import HeaderMapping
from ingest.record_builder import build_record

_LOGGER = get_logger(__name__)


class RecordSink(Protocol):
    """Destination for validated records."""

    def append(self, record: Record) -> None:
        """Encode and append one record."""

    def close(self) -> None:
        """Flush buffered records and release the output."""


def append_row(
    schema: RecordSchema,
    header_mapping: HeaderMapping | None,
    sink: RecordSink,
    raw_row: RawRow,
    row_number: int | None = None,
) -> Record:
    """Build one record from a raw row and append it to the sink.

    Args:
        schema: Record schema.
        header_mapping: Optional column names.
        sink: Record destination.
        raw_row: Raw values in column order.
        row_number: Optional one-based source row number for diagnostics.

    Returns:
        The appended record.

    Raises:
        CoercionFailure: If the row cannot be mapped or coerced.
        SinkError: If the sink rejects the record.
    """
    result = build_record(schema, header_mapping, raw_row)
    if result.error is not None:
        result.error.row_number = row_number
        raise result.error
    sink.append(result.record)
    return result.record


def convert_rows(
    rows: Iterable[RawRow],
    schema: RecordSchema,
    header_mapping: HeaderMapping | None,
    sink: RecordSink,
    skip_rows: int = 0,
) -> int:
    """Convert every row of a source into the sink.

    Args:
        rows: Lazy single-pass row source.
        schema: Record schema.
        header_mapping: Optional column names.
        sink: Record destination, closed before returning or raising.
        skip_rows: Leading rows to discard without coercion.

    Returns:
        Number of rows appended.

    Raises:
        CsvAvroConfigError: If skip_rows is negative.
        CoercionFailure: On the first row that cannot be mapped or coerced.
        SinkError: If the sink rejects a record or fails to close.
    """
    if skip_rows < 0:
        config_error = CsvAvroConfigError(
            f"Invalid skip_rows value {skip_rows}: expected an integer >= 0."
        )
        close_sink_after_failure(sink, config_error)
        raise config_error
    row_count = 0
    try:
        data_rows = islice(rows, skip_rows, None)
        for row_number, raw_row in enumerate(data_rows, start=skip_rows + 1):
            append_row(schema, header_mapping, sink, raw_row, row_number)
            row_count += 1
    except BaseException as error:
        close_sink_after_failure(sink, error)
        if isinstance(error, CsvAvroError):
            _log_conversion_failed(schema, row_count, error)
        raise
    try:
        sink.close()
    except CsvAvroError as error:
        _log_conversion_failed(schema, row_count, error)
        raise
    _LOGGER.info(
        "conversion_completed",
        record_name=schema.name,
        row_count=row_count,
        skip_rows=skip_rows,
    )
    return row_count


def close_sink_after_failure(sink: RecordSink, error: BaseException) -> None:
    """Close a sink while another error is propagating.

    A failure to close is logged and dropped so the caller can re-raise
    the original error unchanged.

    Args:
        sink: Record destination to release.
        error: Error already in flight.
    """
    try:
        sink.close()
    except Exception as close_error:
        _LOGGER.error(
            "sink_close_failed",
            error_type=type(close_error).__name__,
            error=str(close_error),
            pending_error_type=type(error).__name__,
        )


def _log_conversion_failed(schema: RecordSchema, row_count: int, error: CsvAvroError) -> None:
    _LOGGER.error(
        "conversion_failed",
        record_name=schema.name,
        row_count=row_count,
        error_type=type(error).__name__,
        error=str(error),
    )
