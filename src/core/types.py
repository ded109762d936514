"""Shared typed models.

This module defines immutable data models used by the schema, ingest,
store, SDK, and CLI layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from core.constants import DEFAULT_SKIP_ROWS

TypedValue = Union[None, str, int, float, bool]
Record = dict[str, TypedValue]
RawRow = Sequence[Optional[str]]


class PrimitiveType(Enum):
    """Avro primitive types the coercion engine can produce."""

    STRING = "string"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_avro_name(cls, type_name: str) -> "PrimitiveType":
        """Map an Avro type name onto a primitive, or UNSUPPORTED."""
        for member in cls:
            if member is not cls.UNSUPPORTED and member.value == type_name:
                return member
        return cls.UNSUPPORTED


class WriteMode(Enum):
    """Output file lifecycle for a conversion session."""

    CREATE = "create"
    APPEND = "append"


@dataclass(frozen=True)
class TypeSpec:
    """Resolved field type, decided once when the schema is loaded.

    Attributes:
        primitive: Effective primitive type (the non-null union member).
        nullable: Whether the declared type is a union containing ``null``.
        declared: Readable rendering of the declared Avro type.
    """

    primitive: PrimitiveType
    nullable: bool
    declared: str


@dataclass(frozen=True)
class FieldSpec:
    """One named, typed, positioned slot in a record schema.

    Attributes:
        name: Field name, unique within the schema.
        position: Zero-based field index in declaration order.
        type_spec: Resolved field type.
    """

    name: str
    position: int
    type_spec: TypeSpec


@dataclass(frozen=True)
class ConversionOptions:
    """Options for converting one delimited file into one Avro file.

    Attributes:
        schema_path: Path to the ``.avsc`` schema file.
        source_path: Path to the delimited input file.
        output_path: Path of the Avro file to create or append to.
        mode: Create a new file or append to an existing one.
        delimiter: Field delimiter; falls back to config when omitted.
        skip_rows: Leading data rows to discard without coercion.
        header: Use the first row of the source as the header mapping.
        codec: Avro codec; falls back to config when omitted.
    """

    schema_path: str
    source_path: str
    output_path: str
    mode: WriteMode = WriteMode.CREATE
    delimiter: str | None = None
    skip_rows: int = DEFAULT_SKIP_ROWS
    header: bool = False
    codec: str | None = None


@dataclass(frozen=True)
class ConversionResult:
    """Summary of a completed conversion.

    Attributes:
        output_path: Avro file that received the records.
        row_count: Number of records appended during the conversion.
    """

    output_path: str
    row_count: int
