"""Avro record schema loading.

This module parses Avro schema JSON with fastavro and resolves every field
into a typed ``FieldSpec`` once, so per-row coercion never re-inspects the
declared union members.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from fastavro import parse_schema
from fastavro.schema import SchemaParseException, UnknownType

from core.constants import DEFAULT_ENCODING
from core.errors import SchemaError
from core.logging_config import get_logger
from core.types import FieldSpec, PrimitiveType, TypeSpec

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class RecordSchema:
    """Immutable record schema consumed by the coercion engine.

    Attributes:
        name: Fully-qualified record name.
        fields: Ordered field definitions.
        avro_schema: fastavro-parsed schema handed to the Avro writer.
    """

    name: str
    fields: tuple[FieldSpec, ...]
    avro_schema: Mapping[str, Any] = field(repr=False, compare=False)
    _fields_by_name: Mapping[str, FieldSpec] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_fields_by_name", {spec.name: spec for spec in self.fields}
        )

    @property
    def field_names(self) -> tuple[str, ...]:
        """Field names in declaration order."""
        return tuple(spec.name for spec in self.fields)

    def get_field(self, name: str) -> FieldSpec | None:
        """Look up a field by name, returning None when absent."""
        return self._fields_by_name.get(name)

    @classmethod
    def from_avro(cls, schema: Mapping[str, Any]) -> "RecordSchema":
        """Build a record schema from an Avro schema mapping.

        Args:
            schema: Avro schema as decoded JSON or as returned by
                ``fastavro.parse_schema``.

        Returns:
            Resolved record schema.

        Raises:
            SchemaError: If the schema is invalid or not a record.
        """
        if not isinstance(schema, Mapping):
            raise SchemaError(
                f"Invalid Avro schema: expected a JSON object, got {type(schema).__name__}."
            )
        if schema.get("type") != "record":
            raise SchemaError(
                f"Invalid Avro schema: top-level type must be 'record', got {schema.get('type')!r}."
            )
        parsed_schema = _parse_avro_schema(schema)
        raw_fields = schema.get("fields")
        if not isinstance(raw_fields, list) or not raw_fields:
            raise SchemaError("Invalid Avro schema: record must declare at least one field.")
        field_specs = tuple(
            _build_field_spec(raw_field, position)
            for position, raw_field in enumerate(raw_fields)
        )
        _validate_unique_names(field_specs)
        return cls(
            name=str(parsed_schema.get("name", schema.get("name", ""))),
            fields=field_specs,
            avro_schema=parsed_schema,
        )


def load_schema_text(schema_text: str) -> RecordSchema:
    """Parse Avro schema JSON text into a record schema.

    Args:
        schema_text: Avro schema document.

    Returns:
        Resolved record schema.

    Raises:
        SchemaError: If text is empty, not JSON, or not a valid record schema.
    """
    if schema_text is None or not schema_text.strip():
        raise SchemaError("Avro schema text is empty. Provide a record schema JSON document.")
    try:
        payload = json.loads(schema_text)
    except json.JSONDecodeError as error:
        raise SchemaError(
            f"Failed to parse Avro schema JSON at line {error.lineno}: {error.msg}. "
            "Fix the JSON syntax and retry."
        ) from error
    schema = RecordSchema.from_avro(payload)
    _LOGGER.info("schema_loaded", record_name=schema.name, field_count=len(schema.fields))
    return schema


def load_schema_file(schema_path: str | Path, encoding: str = DEFAULT_ENCODING) -> RecordSchema:
    """Read and parse an Avro schema file.

    Args:
        schema_path: Path to the ``.avsc`` file.
        encoding: Text encoding of the schema file.

    Returns:
        Resolved record schema.

    Raises:
        SchemaError: If the file cannot be read or holds an invalid schema.
    """
    schema_file = Path(schema_path).expanduser()
    if not schema_file.is_file():
        raise SchemaError(
            f"Avro schema file does not exist at {schema_file}. Provide a valid .avsc path."
        )
    try:
        schema_text = schema_file.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as error:
        raise SchemaError(
            f"Failed to read Avro schema at {schema_file}: {error}. Check file permissions and encoding."
        ) from error
    return load_schema_text(schema_text)


def resolve_type_spec(declared_type: Any) -> TypeSpec:
    """Resolve a declared Avro field type into its effective primitive.

    Unions resolve to their first non-null member and are nullable when
    they contain ``null``. Every other declaration is non-nullable.

    Args:
        declared_type: Field ``type`` value from the schema.

    Returns:
        Resolved type spec.
    """
    if isinstance(declared_type, list):
        members = [_type_name(member) for member in declared_type]
        non_null_members = [member for member in declared_type if _type_name(member) != "null"]
        primitive = (
            _primitive_of(non_null_members[0]) if non_null_members else PrimitiveType.UNSUPPORTED
        )
        return TypeSpec(
            primitive=primitive,
            nullable="null" in members,
            declared="[" + ", ".join(members) + "]",
        )
    return TypeSpec(
        primitive=_primitive_of(declared_type),
        nullable=False,
        declared=_type_name(declared_type),
    )


def _parse_avro_schema(schema: Mapping[str, Any]) -> Mapping[str, Any]:
    try:
        return parse_schema(dict(schema))
    except (SchemaParseException, UnknownType, ValueError, TypeError, KeyError) as error:
        raise SchemaError(
            f"Invalid Avro schema: {error}. Check field types and names against Avro schema rules."
        ) from error


def _build_field_spec(raw_field: object, position: int) -> FieldSpec:
    if not isinstance(raw_field, Mapping) or not isinstance(raw_field.get("name"), str):
        raise SchemaError(f"Invalid Avro schema: field #{position + 1} must declare a string name.")
    return FieldSpec(
        name=raw_field["name"],
        position=position,
        type_spec=resolve_type_spec(raw_field.get("type")),
    )


def _primitive_of(declared_type: Any) -> PrimitiveType:
    if isinstance(declared_type, str):
        return PrimitiveType.from_avro_name(declared_type)
    if isinstance(declared_type, Mapping) and "logicalType" not in declared_type:
        inner_type = declared_type.get("type")
        if isinstance(inner_type, str):
            return PrimitiveType.from_avro_name(inner_type)
    return PrimitiveType.UNSUPPORTED


def _type_name(declared_type: Any) -> str:
    if isinstance(declared_type, str):
        return declared_type
    if isinstance(declared_type, Mapping):
        logical_type = declared_type.get("logicalType")
        inner_type = declared_type.get("type")
        if logical_type:
            return f"{inner_type}({logical_type})"
        return str(declared_type.get("name") or inner_type)
    if isinstance(declared_type, list):
        return "[" + ", ".join(_type_name(member) for member in declared_type) + "]"
    return repr(declared_type)


def _validate_unique_names(field_specs: tuple[FieldSpec, ...]) -> None:
    seen: set[str] = set()
    for spec in field_specs:
        if spec.name in seen:
            raise SchemaError(
                f"Invalid Avro schema: field name '{spec.name}' is declared more than once."
            )
        seen.add(spec.name)
