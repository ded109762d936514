"""Schema field resolution for input columns.

This module decides which schema field an input column targets, either
by position or through a header mapping of column names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from core.constants import DEFAULT_DELIMITER
from core.errors import ColumnOutOfRangeError, HeaderMappingError
from core.record_schema import RecordSchema
from core.types import FieldSpec
from ingest.row_source import split_line


@dataclass(frozen=True)
class HeaderMapping:
    """Ordered column names aligned with incoming raw rows.

    Attributes:
        names: Column names in input order, kept verbatim.
    """

    names: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.names)

    def unmatched_names(self, schema: RecordSchema) -> tuple[str, ...]:
        """Return column names that no schema field carries."""
        return tuple(name for name in self.names if schema.get_field(name) is None)


def build_header_mapping(names: Iterable[str] | None) -> HeaderMapping:
    """Validate and freeze a header mapping.

    Individual names are accepted verbatim, including blank ones; such
    columns simply never match a schema field.

    Args:
        names: Column names in input order.

    Returns:
        Immutable header mapping.

    Raises:
        HeaderMappingError: If names is None or empty.
    """
    if names is None:
        raise HeaderMappingError(
            "Header mapping is missing. Provide the list of column names."
        )
    if isinstance(names, str):
        raise HeaderMappingError(
            "Header mapping must be a sequence of column names, not a single string. "
            "Use parse_header_line to split a raw header line."
        )
    frozen_names = tuple("" if name is None else str(name) for name in names)
    if not frozen_names:
        raise HeaderMappingError(
            "Header mapping is empty. Provide at least one column name."
        )
    return HeaderMapping(names=frozen_names)


def parse_header_line(line: str | None, delimiter: str = DEFAULT_DELIMITER) -> HeaderMapping:
    """Build a header mapping from one raw delimited line.

    Args:
        line: Header line such as ``name,age``.
        delimiter: Field delimiter.

    Returns:
        Immutable header mapping.

    Raises:
        HeaderMappingError: If the line is None or empty.
    """
    if line is None or line == "":
        raise HeaderMappingError("Header line is empty. Provide a delimited list of column names.")
    return build_header_mapping(split_line(line, delimiter))


def resolve_field(
    schema: RecordSchema,
    header_mapping: HeaderMapping | None,
    column_index: int,
) -> FieldSpec | None:
    """Resolve the schema field targeted by one input column.

    Args:
        schema: Record schema.
        header_mapping: Optional column names; positional mapping when None.
        column_index: Zero-based input column index.

    Returns:
        Target field, or None when a header column names no schema field.

    Raises:
        ColumnOutOfRangeError: If the index exceeds the mapped columns.
    """
    if header_mapping is None:
        if not 0 <= column_index < len(schema.fields):
            raise ColumnOutOfRangeError(column_index, len(schema.fields))
        return schema.fields[column_index]
    if not 0 <= column_index < len(header_mapping.names):
        raise ColumnOutOfRangeError(column_index, len(header_mapping.names))
    return schema.get_field(header_mapping.names[column_index])
