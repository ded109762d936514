"""csvavro CLI entry points.
This module exposes commands for converting delimited files to Avro
and inspecting Avro output. It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import json
from typing import Any, Sequence

from core.config import CsvAvroConfig
from core.constants import DEFAULT_SKIP_ROWS, SUPPORTED_CODECS
from core.errors import CsvAvroError
from core.job_spec import load_job_spec
from core.types import ConversionOptions, ConversionResult, WriteMode
from ingest.conversion_session import convert_csv_file
from store.avro_reader import iter_avro_records


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="csvavro",
        description="Convert delimited text into schema-validated Avro files",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_convert_command(subparsers)
    _add_run_job_command(subparsers)
    _add_dump_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the csvavro CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        if args.command == "convert":
            return _run_convert_command(args)
        if args.command == "run-job":
            return _run_job_command(args)
        if args.command == "dump":
            return _run_dump_command(args)
    except CsvAvroError as error:
        print(f"error={error}")
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_convert_command(args: argparse.Namespace) -> int:
    """Handle convert command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    options = ConversionOptions(
        schema_path=args.schema,
        source_path=args.source,
        output_path=args.output,
        mode=WriteMode(args.mode),
        delimiter=args.delimiter,
        skip_rows=args.skip_rows,
        header=args.header,
        codec=args.codec,
    )
    result = convert_csv_file(options, CsvAvroConfig.from_env())
    _print_result(result)
    return 0


def _run_job_command(args: argparse.Namespace) -> int:
    """Handle run-job command."""
    options = load_job_spec(args.job_file)
    result = convert_csv_file(options, CsvAvroConfig.from_env())
    _print_result(result)
    return 0


def _run_dump_command(args: argparse.Namespace) -> int:
    """Handle dump command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    for record in iter_avro_records(args.avro_file, limit=args.limit):
        print(json.dumps(record, sort_keys=False, default=str))
    return 0


def _print_result(result: ConversionResult) -> None:
    print(f"rows={result.row_count}")
    print(f"output={result.output_path}")


def _add_convert_command(subparsers: Any) -> None:
    """Register convert subcommand."""
    parser = subparsers.add_parser("convert", help="Convert one delimited file to Avro")
    parser.add_argument("source", help="Delimited input file")
    parser.add_argument("--schema", required=True, help="Avro schema (.avsc) file")
    parser.add_argument("--output", required=True, help="Avro output file")
    parser.add_argument(
        "--mode",
        choices=tuple(mode.value for mode in WriteMode),
        default=WriteMode.CREATE.value,
        help="Create a new file or append to an existing one",
    )
    parser.add_argument("--delimiter", help="Field delimiter, e.g. ',' '|' or '\\t'")
    parser.add_argument(
        "--skip-rows",
        type=int,
        default=DEFAULT_SKIP_ROWS,
        help="Leading data rows to discard",
    )
    parser.add_argument(
        "--header",
        action="store_true",
        help="Map columns by the names in the first row",
    )
    parser.add_argument("--codec", choices=SUPPORTED_CODECS, help="Avro block codec")


def _add_run_job_command(subparsers: Any) -> None:
    """Register run-job subcommand."""
    parser = subparsers.add_parser("run-job", help="Run one conversion from a YAML job file")
    parser.add_argument("job_file", help="Path to YAML job file")


def _add_dump_command(subparsers: Any) -> None:
    """Register dump subcommand."""
    parser = subparsers.add_parser("dump", help="Print Avro records as JSON lines")
    parser.add_argument("avro_file", help="Avro container file")
    parser.add_argument("--limit", type=int, help="Maximum records to print")
