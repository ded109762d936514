"""Caller-owned CSV to Avro conversion session.

This module exposes ``CsvAvroWriter``, which holds one schema, an optional
header mapping and one exclusively-owned Avro sink. Sessions share no
state, so independent conversions can run side by side.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from types import TracebackType
from typing import Iterable, Iterator, Sequence, TextIO

from core.config import CsvAvroConfig, validate_delimiter
from core.errors import CsvAvroConfigError, CsvAvroError, SinkError
from core.logging_config import get_logger
from core.record_schema import RecordSchema, load_schema_file, load_schema_text
from core.types import ConversionOptions, ConversionResult, RawRow, Record, WriteMode
from ingest.field_resolver import HeaderMapping, build_header_mapping, parse_header_line
from ingest.pipeline import append_row, close_sink_after_failure, convert_rows
from ingest.row_source import iter_delimited_rows, iter_stream_rows, split_line
from store.avro_sink import AvroRecordSink

_LOGGER = get_logger(__name__)


class CsvAvroWriter:
    """Conversion session writing delimited rows into one Avro file."""

    def __init__(
        self,
        schema: RecordSchema,
        sink: AvroRecordSink,
        config: CsvAvroConfig | None = None,
    ) -> None:
        """Create a session around an already-open sink.

        Prefer the ``from_schema_path``, ``from_schema_text`` and
        ``from_schema`` constructors, which open the sink.

        Args:
            schema: Record schema.
            sink: Open Avro sink owned by this session.
            config: Optional runtime configuration.
        """
        self._schema = schema
        self._sink = sink
        self._config = config or CsvAvroConfig()
        self._header_mapping: HeaderMapping | None = None

    @classmethod
    def from_schema_path(
        cls,
        schema_path: str | Path,
        output_path: str | Path,
        mode: WriteMode = WriteMode.CREATE,
        config: CsvAvroConfig | None = None,
    ) -> "CsvAvroWriter":
        """Open a session from an ``.avsc`` schema file.

        Raises:
            CsvAvroConfigError: If a path is empty or the mode is invalid.
            SchemaError: If the schema file is missing or invalid.
            SinkError: If the output cannot be opened.
        """
        if schema_path is None or not str(schema_path).strip():
            raise CsvAvroConfigError(
                "Schema path is empty. Provide the path to an .avsc schema file."
            )
        resolved_config = config or CsvAvroConfig()
        schema = load_schema_file(schema_path, encoding=resolved_config.encoding)
        return cls.from_schema(schema, output_path, mode, resolved_config)

    @classmethod
    def from_schema_text(
        cls,
        schema_text: str,
        output_path: str | Path,
        mode: WriteMode = WriteMode.CREATE,
        config: CsvAvroConfig | None = None,
    ) -> "CsvAvroWriter":
        """Open a session from Avro schema JSON text."""
        schema = load_schema_text(schema_text)
        return cls.from_schema(schema, output_path, mode, config)

    @classmethod
    def from_schema(
        cls,
        schema: RecordSchema,
        output_path: str | Path,
        mode: WriteMode = WriteMode.CREATE,
        config: CsvAvroConfig | None = None,
    ) -> "CsvAvroWriter":
        """Open a session from an already-parsed record schema."""
        if not isinstance(mode, WriteMode):
            raise CsvAvroConfigError(
                f"Unsupported write mode {mode!r}. Use WriteMode.CREATE or WriteMode.APPEND."
            )
        resolved_config = config or CsvAvroConfig()
        sink = AvroRecordSink.open(
            output_path,
            schema,
            mode=mode,
            codec=resolved_config.codec,
            sync_interval=resolved_config.sync_interval,
        )
        return cls(schema, sink, resolved_config)

    @property
    def schema(self) -> RecordSchema:
        """Record schema for this session."""
        return self._schema

    @property
    def header_mapping(self) -> HeaderMapping | None:
        """Current header mapping, or None for positional mapping."""
        return self._header_mapping

    @property
    def row_count(self) -> int:
        """Rows appended during this session."""
        return self._sink.appended_count

    @property
    def output_path(self) -> Path:
        """Avro output file path."""
        return self._sink.output_path

    def set_header(self, names: Sequence[str] | None) -> None:
        """Map columns to fields by name instead of by position.

        Args:
            names: Column names aligned with incoming rows.

        Raises:
            HeaderMappingError: If names is None or empty.
        """
        self._header_mapping = build_header_mapping(names)
        _log_header_mapping(self._schema, self._header_mapping)

    def set_header_line(self, line: str | None, delimiter: str | None = None) -> None:
        """Set the header mapping from one raw delimited line."""
        self._header_mapping = parse_header_line(line, self._resolve_delimiter(delimiter))
        _log_header_mapping(self._schema, self._header_mapping)

    def append(self, row: RawRow) -> Record:
        """Coerce one row of raw values and append it to the output.

        Args:
            row: Raw values in column order.

        Returns:
            The appended record.

        Raises:
            CoercionFailure: If the row cannot be mapped or coerced.
            SinkError: If the session is closed or the sink rejects the record.
        """
        self._ensure_open()
        return append_row(self._schema, self._header_mapping, self._sink, row)

    def append_line(self, line: str, delimiter: str | None = None) -> Record:
        """Split one delimited line and append it to the output."""
        return self.append(split_line(line, self._resolve_delimiter(delimiter)))

    def convert_rows(self, rows: Iterable[RawRow], skip_rows: int = 0) -> int:
        """Convert a whole row source and close the session.

        Args:
            rows: Lazy single-pass row source.
            skip_rows: Leading rows to discard without coercion.

        Returns:
            Rows appended by this call.
        """
        self._ensure_open()
        return convert_rows(rows, self._schema, self._header_mapping, self._sink, skip_rows)

    def convert_file(
        self,
        source_path: str | Path,
        skip_rows: int = 0,
        delimiter: str | None = None,
        header: bool = False,
    ) -> int:
        """Convert a delimited file and close the session.

        Args:
            source_path: Delimited input file.
            skip_rows: Data rows to discard after the optional header row.
            delimiter: Field delimiter; config default when omitted.
            header: Read the first row as the header mapping.

        Returns:
            Rows appended by this call.

        Raises:
            RowSourceError: If the source cannot be read.
            CoercionFailure: On the first invalid row.
            SinkError: If the output cannot be written.
        """
        try:
            rows = iter_delimited_rows(
                source_path, self._resolve_delimiter(delimiter), self._config.encoding
            )
            if header:
                rows = self._consume_header(rows)
        except CsvAvroError as error:
            close_sink_after_failure(self._sink, error)
            raise
        return self.convert_rows(rows, skip_rows)

    def convert_stream(
        self,
        stream: TextIO,
        skip_rows: int = 0,
        delimiter: str | None = None,
        header: bool = False,
    ) -> int:
        """Convert delimited text from an open stream and close the session."""
        try:
            rows = iter_stream_rows(stream, self._resolve_delimiter(delimiter))
            if header:
                rows = self._consume_header(rows)
        except CsvAvroError as error:
            close_sink_after_failure(self._sink, error)
            raise
        return self.convert_rows(rows, skip_rows)

    def close(self) -> None:
        """Flush and close the Avro output. Safe to call twice."""
        self._sink.close()

    @property
    def closed(self) -> bool:
        """Whether the output has been closed."""
        return self._sink.closed

    def __enter__(self) -> "CsvAvroWriter":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc_value is None:
            self.close()
            return
        close_sink_after_failure(self._sink, exc_value)

    def _consume_header(self, rows: Iterator[list[str]]) -> Iterator[list[str]]:
        self.set_header(next(rows, None))
        return rows

    def _resolve_delimiter(self, delimiter: str | None) -> str:
        if delimiter is None:
            return self._config.delimiter
        return validate_delimiter(delimiter)

    def _ensure_open(self) -> None:
        if self._sink.closed:
            raise SinkError(
                f"Conversion session for {self._sink.output_path} is closed. "
                "Open a new writer in append mode to add more rows."
            )


def _log_header_mapping(schema: RecordSchema, header_mapping: HeaderMapping) -> None:
    _LOGGER.info(
        "header_mapping_set",
        record_name=schema.name,
        column_count=len(header_mapping),
        unmatched_columns=list(header_mapping.unmatched_names(schema)),
    )


def convert_csv_file(
    options: ConversionOptions,
    config: CsvAvroConfig | None = None,
) -> ConversionResult:
    """Run one delimited file to Avro conversion end to end.

    Args:
        options: Conversion request options.
        config: Optional runtime configuration; read from env when omitted.

    Returns:
        Output path and appended row count.

    Raises:
        CsvAvroError: If any stage of the conversion fails.
    """
    resolved_config = config or CsvAvroConfig.from_env()
    if options.codec is not None:
        resolved_config = replace(resolved_config, codec=options.codec)
    writer = CsvAvroWriter.from_schema_path(
        options.schema_path,
        options.output_path,
        mode=options.mode,
        config=resolved_config,
    )
    with writer:
        row_count = writer.convert_file(
            options.source_path,
            skip_rows=options.skip_rows,
            delimiter=options.delimiter,
            header=options.header,
        )
    return ConversionResult(output_path=str(writer.output_path), row_count=row_count)
