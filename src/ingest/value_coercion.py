"""String-to-value coercion for Avro primitive fields.

This module converts one raw text value into the typed value its field
declares. Coercion never raises: it returns ``Ok`` or ``Err`` so callers
decide where a failure becomes an exception.
"""

from __future__ import annotations

import math
import re
import struct
from dataclasses import dataclass
from typing import Callable, Union

from core.constants import (
    FALSE_LITERALS,
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    TRUE_LITERALS,
)
from core.errors import (
    CoercionFailure,
    NullNotAllowedError,
    UnsupportedTypeError,
    ValueCoercionError,
)
from core.types import FieldSpec, PrimitiveType, TypedValue

_INTEGER_PATTERN = re.compile(r"\s*[+-]?[0-9]+\s*")
_DECIMAL_PATTERN = re.compile(
    r"\s*[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|nan|inf|infinity)\s*",
    re.IGNORECASE,
)
_FLOAT32 = struct.Struct("<f")


@dataclass(frozen=True)
class Ok:
    """Successful coercion carrying the typed value."""

    value: TypedValue


@dataclass(frozen=True)
class Err:
    """Failed coercion carrying the diagnostic error."""

    error: CoercionFailure


CoercionResult = Union[Ok, Err]


def is_null_value(raw: str | None) -> bool:
    """Return whether a raw value counts as null (None, empty or whitespace)."""
    return raw is None or raw == "" or raw.isspace()


def coerce_value(field: FieldSpec, raw: str | None) -> CoercionResult:
    """Coerce one raw value into its field's effective primitive type.

    Args:
        field: Target schema field.
        raw: Raw text value from the input row.

    Returns:
        ``Ok`` with the typed value, or ``Err`` with a coercion failure.
    """
    type_spec = field.type_spec
    if is_null_value(raw):
        if type_spec.nullable:
            return Ok(None)
        return Err(NullNotAllowedError((field.name,)))
    parser = _PARSERS.get(type_spec.primitive)
    if parser is None:
        return Err(UnsupportedTypeError(field.name, type_spec.declared))
    try:
        return Ok(parser(raw))
    except ValueError:
        return Err(ValueCoercionError(raw, field.name, type_spec.primitive.value))


def supported_primitives() -> tuple[PrimitiveType, ...]:
    """Return primitive types with a registered parser."""
    return tuple(_PARSERS)


def _parse_string(raw: str) -> str:
    return raw


def _parse_int(raw: str) -> int:
    return _parse_integer(raw, INT32_MIN, INT32_MAX)


def _parse_long(raw: str) -> int:
    return _parse_integer(raw, INT64_MIN, INT64_MAX)


def _parse_integer(raw: str, minimum: int, maximum: int) -> int:
    if not _INTEGER_PATTERN.fullmatch(raw):
        raise ValueError(f"not a base-10 integer: {raw!r}")
    value = int(raw)
    if not minimum <= value <= maximum:
        raise ValueError(f"integer out of range: {value}")
    return value


def _parse_double(raw: str) -> float:
    if not _DECIMAL_PATTERN.fullmatch(raw):
        raise ValueError(f"not a decimal number: {raw!r}")
    value = float(raw)
    if math.isinf(value) and "inf" not in raw.lower():
        raise ValueError(f"decimal out of range: {raw!r}")
    return value


def _parse_float(raw: str) -> float:
    value = _parse_double(raw)
    try:
        return _FLOAT32.unpack(_FLOAT32.pack(value))[0]
    except OverflowError as error:
        raise ValueError(f"decimal out of single-precision range: {raw!r}") from error


def _parse_boolean(raw: str) -> bool:
    literal = raw.strip()
    if literal in TRUE_LITERALS:
        return True
    if literal in FALSE_LITERALS:
        return False
    raise ValueError(f"not a boolean literal: {raw!r}")


_PARSERS: dict[PrimitiveType, Callable[[str], TypedValue]] = {
    PrimitiveType.STRING: _parse_string,
    PrimitiveType.INT: _parse_int,
    PrimitiveType.LONG: _parse_long,
    PrimitiveType.FLOAT: _parse_float,
    PrimitiveType.DOUBLE: _parse_double,
    PrimitiveType.BOOLEAN: _parse_boolean,
}
