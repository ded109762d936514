"""Record assembly and whole-record null auditing.

This module turns one raw row into a complete typed record. A row either
produces a full record or a single failure; partial records never escape.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.errors import CoercionFailure, ColumnOutOfRangeError, NullNotAllowedError
from core.logging_config import get_logger
from core.record_schema import RecordSchema
from core.types import RawRow, Record
from ingest.field_resolver import HeaderMapping, resolve_field
from ingest.value_coercion import Err, coerce_value

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class RecordResult:
    """Outcome of building one record.

    Attributes:
        record: Complete record when the row was valid.
        error: First failure when the row was rejected.
    """

    record: Record | None = None
    error: CoercionFailure | None = None

    @property
    def ok(self) -> bool:
        """Whether the row produced a record."""
        return self.error is None


def build_record(
    schema: RecordSchema,
    header_mapping: HeaderMapping | None,
    raw_row: RawRow,
) -> RecordResult:
    """Build and validate one record from a raw row.

    Columns whose header name is not in the schema are omitted. Schema
    fields with no column in the row stay absent rather than null.

    Args:
        schema: Record schema.
        header_mapping: Optional column names; positional mapping when None.
        raw_row: Raw values in column order.

    Returns:
        Result holding either the record or the first failure.
    """
    record: Record = {}
    for column_index, raw_value in enumerate(raw_row):
        try:
            field = resolve_field(schema, header_mapping, column_index)
        except ColumnOutOfRangeError as error:
            return RecordResult(error=error)
        if field is None:
            _LOGGER.debug("column_skipped", column_index=column_index)
            continue
        outcome = coerce_value(field, raw_value)
        if isinstance(outcome, Err):
            return RecordResult(error=outcome.error)
        record[field.name] = outcome.value
    invalid_null_fields = find_invalid_null_fields(schema, record)
    if invalid_null_fields:
        return RecordResult(error=NullNotAllowedError(invalid_null_fields))
    return RecordResult(record=record)


def find_invalid_null_fields(schema: RecordSchema, record: Record) -> tuple[str, ...]:
    """Return names of present fields holding null without a null alternative.

    Args:
        schema: Record schema.
        record: Record under construction.

    Returns:
        Offending field names in schema order.
    """
    return tuple(
        field.name
        for field in schema.fields
        if field.name in record
        and record[field.name] is None
        and not field.type_spec.nullable
    )
