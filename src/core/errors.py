"""csvavro exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class CsvAvroError(Exception):
    """Base exception for all csvavro failures."""


class CsvAvroConfigError(CsvAvroError):
    """Raised for invalid runtime or conversion configuration."""


class HeaderMappingError(CsvAvroConfigError):
    """Raised when a header mapping is missing or empty."""


class JobSpecError(CsvAvroConfigError):
    """Raised for invalid or unsupported job files."""


class SchemaError(CsvAvroError):
    """Raised when an Avro schema cannot be loaded or is not a record."""


class RowSourceError(CsvAvroError):
    """Raised when delimited input cannot be read."""


class SinkError(CsvAvroError):
    """Raised when the Avro output file cannot be opened, written or closed."""


class CoercionFailure(CsvAvroError):
    """Base class for row-level mapping and coercion failures.

    Attributes:
        field_name: Schema field the failure refers to, when known.
        row_number: One-based data row number, set by the conversion driver.
    """

    def __init__(self, message: str, field_name: str | None = None) -> None:
        super().__init__(message)
        self.field_name = field_name
        self.row_number: int | None = None

    def __str__(self) -> str:
        message = super().__str__()
        if self.row_number is None:
            return message
        return f"Row {self.row_number}: {message}"


class ColumnOutOfRangeError(CoercionFailure):
    """Raised when a row has more columns than the schema or header mapping."""

    def __init__(self, column_index: int, column_count: int) -> None:
        super().__init__(
            f"Column index {column_index} is out of range: only {column_count} "
            "columns are mapped. Check the delimiter or supply a header mapping."
        )
        self.column_index = column_index
        self.column_count = column_count


class NullNotAllowedError(CoercionFailure):
    """Raised when a null value targets a field without a null alternative."""

    def __init__(self, field_names: tuple[str, ...]) -> None:
        joined_names = ", ".join(f"'{name}'" for name in field_names)
        super().__init__(
            f"Value of 'null' is not allowed for field {joined_names}. "
            'Declare the field as ["null", <type>] or supply a value.',
            field_name=field_names[0] if field_names else None,
        )
        self.field_names = field_names


class ValueCoercionError(CoercionFailure):
    """Raised when a raw value cannot be parsed into a field's type."""

    def __init__(self, value: str, field_name: str, target_type: str) -> None:
        super().__init__(
            f"Value '{value}' of field '{field_name}' could not be converted "
            f"to {target_type}.",
            field_name=field_name,
        )
        self.value = value
        self.target_type = target_type


class UnsupportedTypeError(CoercionFailure):
    """Raised when a field declares a type outside the supported primitives."""

    def __init__(self, field_name: str, declared_type: str) -> None:
        super().__init__(
            f"Type {declared_type} is not supported for field '{field_name}'. "
            "Use string, int, long, float, double or boolean.",
            field_name=field_name,
        )
        self.declared_type = declared_type


class AvroReadError(CsvAvroError):
    """Raised when an Avro container file cannot be read back."""
