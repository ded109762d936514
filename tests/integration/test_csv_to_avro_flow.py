"""Integration tests for end-to-end CSV to Avro conversion."""

from __future__ import annotations

import io
from dataclasses import replace
from pathlib import Path

import pytest

from core.config import CsvAvroConfig
from core.errors import NullNotAllowedError, ValueCoercionError
from core.types import ConversionOptions, WriteMode
from csvavro import CsvAvroWriter, convert_csv_file, load_job_spec, read_avro_records
from tests.fixture_paths import fixture_path

_CONFIG = CsvAvroConfig(codec="null")

_SCORE_SCHEMA_TEMPLATE = (
    '{"type": "record", "name": "Score", "fields": [{"name": "score", "type": %s}]}'
)


def test_positional_row_becomes_record(tmp_path: Path, employee_schema_json: str) -> None:
    """One positional row should produce one typed record."""
    output = tmp_path / "out.avro"
    with CsvAvroWriter.from_schema_text(employee_schema_json, output, config=_CONFIG) as writer:
        writer.append(["Lee", "34"])

    assert writer.row_count == 1 and read_avro_records(output) == [{"name": "Lee", "age": 34}]


def test_invalid_value_aborts_run(tmp_path: Path, employee_schema_json: str) -> None:
    """A bad int should abort the run with full diagnostics and no rows."""
    output = tmp_path / "out.avro"
    writer = CsvAvroWriter.from_schema_text(employee_schema_json, output, config=_CONFIG)

    with pytest.raises(ValueCoercionError) as error_info:
        writer.convert_rows([["Lee", "not-a-number"]])

    error = error_info.value
    assert (error.field_name, error.value, error.target_type) == ("age", "not-a-number", "int")
    assert writer.row_count == 0 and read_avro_records(output) == []


def test_blank_value_becomes_null_for_nullable_float(tmp_path: Path) -> None:
    """Blank values should be accepted as null for nullable unions."""
    output = tmp_path / "out.avro"
    schema_text = _SCORE_SCHEMA_TEMPLATE % '["float", "null"]'
    with CsvAvroWriter.from_schema_text(schema_text, output, config=_CONFIG) as writer:
        writer.append([""])

    assert read_avro_records(output) == [{"score": None}]


def test_whitespace_value_rejected_for_required_float(tmp_path: Path) -> None:
    """Whitespace should fail for non-nullable fields and abort the run."""
    output = tmp_path / "out.avro"
    schema_text = _SCORE_SCHEMA_TEMPLATE % '"float"'
    writer = CsvAvroWriter.from_schema_text(schema_text, output, config=_CONFIG)

    with pytest.raises(NullNotAllowedError) as error_info:
        writer.convert_rows([["   "]])

    assert error_info.value.field_names == ("score",) and writer.closed


def test_header_mapping_skips_extra_column(tmp_path: Path, employee_schema_json: str) -> None:
    """Unmatched header columns should be silently skipped."""
    output = tmp_path / "out.avro"
    writer = CsvAvroWriter.from_schema_text(employee_schema_json, output, config=_CONFIG)
    writer.set_header(["age", "name", "extra"])

    row_count = writer.convert_rows([["34", "Lee", "ignored"]])

    assert row_count == 1 and read_avro_records(output) == [{"name": "Lee", "age": 34}]


def test_skip_rows_discards_header_line(tmp_path: Path, employee_schema_json: str) -> None:
    """skip_rows=1 should discard the header and convert the rest."""
    output = tmp_path / "out.avro"
    writer = CsvAvroWriter.from_schema_text(employee_schema_json, output, config=_CONFIG)

    row_count = writer.convert_stream(io.StringIO("name,age\nLee,34\nSam,29\n"), skip_rows=1)

    assert row_count == 2 and [record["name"] for record in read_avro_records(output)] == [
        "Lee",
        "Sam",
    ]


def test_pipe_delimited_file_with_nullable_float(tmp_path: Path) -> None:
    """Pipe files with quoted values and blank nullable floats should convert."""
    output = tmp_path / "cost_index.avro"
    options = ConversionOptions(
        schema_path=str(fixture_path("schemas/cost_index.avsc")),
        source_path=str(fixture_path("csv/cost_index.txt")),
        output_path=str(output),
        delimiter="|",
    )

    result = convert_csv_file(options, _CONFIG)
    records = read_avro_records(output)

    assert result.row_count == 2 and records[1]["mp_gpci"] is None
    assert records[0]["locality_name"] == "NORTHERN CALIFORNIA, REST OF STATE"
    assert records[0]["pw_gpci"] == pytest.approx(1.027, rel=1e-6)


def test_append_mode_adds_to_earlier_run(tmp_path: Path) -> None:
    """A second run in append mode should keep the first run's rows."""
    output = tmp_path / "employees.avro"
    options = ConversionOptions(
        schema_path=str(fixture_path("schemas/employee.avsc")),
        source_path=str(fixture_path("csv/employees.csv")),
        output_path=str(output),
        header=True,
    )
    convert_csv_file(options, _CONFIG)

    convert_csv_file(replace(options, mode=WriteMode.APPEND), _CONFIG)

    assert len(read_avro_records(output)) == 4


def test_failed_run_keeps_rows_before_failure(tmp_path: Path) -> None:
    """Rows converted before a failing row should remain in the output."""
    output = tmp_path / "employees.avro"
    options = ConversionOptions(
        schema_path=str(fixture_path("schemas/employee.avsc")),
        source_path=str(fixture_path("csv/employees_bad_age.csv")),
        output_path=str(output),
    )

    with pytest.raises(ValueCoercionError) as error_info:
        convert_csv_file(options, _CONFIG)

    assert error_info.value.row_number == 2 and read_avro_records(output) == [
        {"Name": "Lee", "Age": 34}
    ]


def test_job_file_drives_conversion(tmp_path: Path) -> None:
    """Job files should resolve into runnable conversion options."""
    job_file = tmp_path / "job.yaml"
    job_file.write_text(
        "\n".join(
            [
                "version: 1",
                f"schema: {fixture_path('schemas/employee.avsc')}",
                f"source: {fixture_path('csv/employees.csv')}",
                "output: employees.avro",
                "skip_rows: 1",
            ]
        ),
        encoding="utf-8",
    )

    result = convert_csv_file(load_job_spec(job_file), _CONFIG)

    assert result.row_count == 2 and Path(result.output_path) == tmp_path / "employees.avro"
