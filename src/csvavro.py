"""Public SDK surface for csvavro.

This module provides a stable import path for library users.
It re-exports the conversion session, schema loaders and typed options.
"""

from __future__ import annotations

from core.config import CsvAvroConfig
from core.errors import (
    CoercionFailure,
    ColumnOutOfRangeError,
    CsvAvroConfigError,
    CsvAvroError,
    HeaderMappingError,
    NullNotAllowedError,
    SchemaError,
    SinkError,
    UnsupportedTypeError,
    ValueCoercionError,
)
from core.job_spec import load_job_spec
from core.record_schema import RecordSchema, load_schema_file, load_schema_text
from core.types import ConversionOptions, ConversionResult, WriteMode
from ingest.conversion_session import CsvAvroWriter, convert_csv_file
from store.avro_reader import iter_avro_records, read_avro_records

__all__ = [
    "CoercionFailure",
    "ColumnOutOfRangeError",
    "ConversionOptions",
    "ConversionResult",
    "CsvAvroConfig",
    "CsvAvroConfigError",
    "CsvAvroError",
    "CsvAvroWriter",
    "HeaderMappingError",
    "NullNotAllowedError",
    "RecordSchema",
    "SchemaError",
    "SinkError",
    "UnsupportedTypeError",
    "ValueCoercionError",
    "WriteMode",
    "convert_csv_file",
    "iter_avro_records",
    "load_job_spec",
    "load_schema_file",
    "load_schema_text",
    "read_avro_records",
]
