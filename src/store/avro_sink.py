"""Avro container file sink.

This module owns the output file lifecycle for one conversion session:
create or append mode, codec selection, record encoding through fastavro,
and flush/close on every exit path.
"""

from __future__ import annotations

from pathlib import Path
from types import TracebackType
from typing import Any, BinaryIO

from fastavro.write import Writer

from core.config import validate_codec
from core.constants import DEFAULT_CODEC, DEFAULT_SYNC_INTERVAL
from core.errors import CsvAvroConfigError, SinkError
from core.logging_config import get_logger
from core.record_schema import RecordSchema
from core.types import Record, WriteMode

_LOGGER = get_logger(__name__)


class AvroRecordSink:
    """Exclusively-owned Avro writer for one output file."""

    def __init__(self, output_path: Path, stream: BinaryIO, writer: Any) -> None:
        """Wrap an open stream and fastavro writer.

        Use ``AvroRecordSink.open`` instead of calling this directly.

        Args:
            output_path: Resolved output file path.
            stream: Binary stream the writer encodes into.
            writer: fastavro ``Writer`` bound to the stream.
        """
        self._output_path = output_path
        self._stream = stream
        self._writer = writer
        self._appended_count = 0
        self._closed = False

    @classmethod
    def open(
        cls,
        output_path: str | Path,
        schema: RecordSchema,
        mode: WriteMode = WriteMode.CREATE,
        codec: str = DEFAULT_CODEC,
        sync_interval: int = DEFAULT_SYNC_INTERVAL,
    ) -> "AvroRecordSink":
        """Open an Avro container file for writing.

        In append mode an existing non-empty file keeps its header, schema,
        codec and sync marker; new blocks are added at the end.

        Args:
            output_path: Destination file path.
            schema: Record schema written into a new file header.
            mode: Create (truncate) or append.
            codec: Block compression codec for new files.
            sync_interval: Approximate block size in bytes.

        Returns:
            Open sink.

        Raises:
            CsvAvroConfigError: If the path, mode or codec is invalid.
            SinkError: If the file cannot be opened or is not an Avro file.
        """
        resolved_path = _validate_output_path(output_path)
        file_mode = _file_mode(mode)
        codec_name = validate_codec(codec)
        try:
            stream = resolved_path.open(file_mode)
        except OSError as error:
            raise SinkError(
                f"Failed to open Avro output at {resolved_path}: {error}. "
                "Check the directory exists and is writable."
            ) from error
        try:
            writer = Writer(
                stream,
                dict(schema.avro_schema),
                codec=codec_name,
                sync_interval=sync_interval,
                validator=True,
            )
        except Exception as error:
            stream.close()
            raise SinkError(
                f"Failed to initialize Avro writer at {resolved_path}: {error}. "
                "In append mode the existing file must be an Avro container."
            ) from error
        _LOGGER.info(
            "sink_opened",
            output_path=str(resolved_path),
            mode=mode.value,
            codec=codec_name,
        )
        return cls(resolved_path, stream, writer)

    @property
    def output_path(self) -> Path:
        """Destination file path."""
        return self._output_path

    @property
    def appended_count(self) -> int:
        """Number of records accepted by this sink."""
        return self._appended_count

    @property
    def closed(self) -> bool:
        """Whether the sink has been closed."""
        return self._closed

    def append(self, record: Record) -> None:
        """Encode and append one record.

        Args:
            record: Validated record keyed by field name.

        Raises:
            SinkError: If the sink is closed or the record cannot be encoded.
        """
        if self._closed:
            raise SinkError(f"Cannot append to closed Avro output at {self._output_path}.")
        try:
            self._writer.write(record)
        except Exception as error:
            raise SinkError(
                f"Failed to append record to {self._output_path}: {error}. "
                "Check that every required field has a column or a schema default."
            ) from error
        self._appended_count += 1

    def close(self) -> None:
        """Flush pending blocks and close the file. Safe to call twice.

        Raises:
            SinkError: If buffered records cannot be flushed.
        """
        if self._closed:
            return
        self._closed = True
        try:
            self._writer.flush()
        except Exception as error:
            raise SinkError(
                f"Failed to flush Avro output at {self._output_path}: {error}."
            ) from error
        finally:
            self._stream.close()
        _LOGGER.info(
            "sink_closed",
            output_path=str(self._output_path),
            appended_count=self._appended_count,
        )

    def __enter__(self) -> "AvroRecordSink":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


def _validate_output_path(output_path: str | Path | None) -> Path:
    if output_path is None or not str(output_path).strip():
        raise CsvAvroConfigError(
            "Output path is empty. Provide a destination file path for the Avro output."
        )
    resolved_path = Path(output_path).expanduser()
    if resolved_path.is_dir():
        raise CsvAvroConfigError(
            f"Output path {resolved_path} is a directory. Provide a file path."
        )
    if not resolved_path.parent.is_dir():
        raise SinkError(
            f"Output directory {resolved_path.parent} does not exist. Create it and retry."
        )
    return resolved_path


def _file_mode(mode: WriteMode) -> str:
    if mode is WriteMode.CREATE:
        return "wb"
    if mode is WriteMode.APPEND:
        return "a+b"
    raise CsvAvroConfigError(
        f"Unsupported write mode {mode!r}. Use WriteMode.CREATE or WriteMode.APPEND."
    )
