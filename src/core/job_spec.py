"""Typed job-file parsing for single conversions.

This module loads and validates YAML job files describing one CSV to Avro
conversion, so CLI and SDK callers share the same declarative format.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, cast

import yaml

from core.config import validate_codec, validate_delimiter
from core.constants import DEFAULT_SKIP_ROWS, JOB_SPEC_VERSION
from core.errors import JobSpecError
from core.types import ConversionOptions, WriteMode

_REQUIRED_KEYS = ("schema", "source", "output")
_ALLOWED_KEYS = {
    "version",
    "schema",
    "source",
    "output",
    "mode",
    "delimiter",
    "skip_rows",
    "header",
    "codec",
}


def load_job_spec(job_path: str | Path) -> ConversionOptions:
    """Load and validate a YAML job file from disk.

    Relative paths inside the job resolve against the job file's directory.

    Args:
        job_path: File path to the YAML job.

    Returns:
        Conversion options for the job.

    Raises:
        JobSpecError: If the file is missing, malformed, or fails validation.
    """
    job_file = Path(job_path).expanduser().resolve()
    payload = _load_yaml_payload(job_file)
    root_mapping = _expect_mapping(payload, "job root")
    _validate_root_keys(root_mapping)
    _parse_version(root_mapping)
    base_dir = job_file.parent
    return ConversionOptions(
        schema_path=_required_path(root_mapping, "schema", base_dir),
        source_path=_required_path(root_mapping, "source", base_dir),
        output_path=_required_path(root_mapping, "output", base_dir),
        mode=_parse_mode(root_mapping),
        delimiter=_parse_delimiter(root_mapping),
        skip_rows=_parse_skip_rows(root_mapping),
        header=_parse_header(root_mapping),
        codec=_parse_codec(root_mapping),
    )


def _load_yaml_payload(job_file: Path) -> object:
    if not job_file.is_file():
        raise JobSpecError(
            f"Job file does not exist at {job_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(job_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise JobSpecError(
            f"Failed to read job file at {job_file}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise JobSpecError(
            f"Failed to parse YAML job file at {job_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise JobSpecError(
            f"Job file at {job_file} is empty. Define 'version', 'schema', 'source' and 'output'."
        )
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise JobSpecError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise JobSpecError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _validate_root_keys(root_mapping: Mapping[str, object]) -> None:
    unknown_keys = sorted(set(root_mapping) - _ALLOWED_KEYS)
    if unknown_keys:
        raise JobSpecError(f"Job file contains unknown fields: {', '.join(unknown_keys)}.")
    missing_keys = [key for key in _REQUIRED_KEYS if key not in root_mapping]
    if missing_keys:
        raise JobSpecError(f"Job file missing required fields: {', '.join(missing_keys)}.")


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise JobSpecError(
            f"Job field 'version' must be an integer. Set version: {JOB_SPEC_VERSION}."
        )
    if raw_version != JOB_SPEC_VERSION:
        raise JobSpecError(
            f"Unsupported job file version {raw_version}. Use version: {JOB_SPEC_VERSION}."
        )
    return raw_version


def _required_path(root_mapping: Mapping[str, object], field_name: str, base_dir: Path) -> str:
    raw_value = root_mapping.get(field_name)
    if not isinstance(raw_value, str) or not raw_value.strip():
        raise JobSpecError(f"Job field '{field_name}' must be a non-empty path string.")
    path = Path(raw_value.strip()).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return str(path)


def _parse_mode(root_mapping: Mapping[str, object]) -> WriteMode:
    raw_mode = root_mapping.get("mode", WriteMode.CREATE.value)
    for mode in WriteMode:
        if raw_mode == mode.value:
            return mode
    supported_modes = ", ".join(mode.value for mode in WriteMode)
    raise JobSpecError(f"Unsupported job mode {raw_mode!r}. Use one of: {supported_modes}.")


def _parse_delimiter(root_mapping: Mapping[str, object]) -> str | None:
    raw_delimiter = root_mapping.get("delimiter")
    if raw_delimiter is None:
        return None
    if not isinstance(raw_delimiter, str):
        raise JobSpecError("Job field 'delimiter' must be a string when provided.")
    return validate_delimiter(raw_delimiter)


def _parse_skip_rows(root_mapping: Mapping[str, object]) -> int:
    raw_skip_rows = root_mapping.get("skip_rows", DEFAULT_SKIP_ROWS)
    if not isinstance(raw_skip_rows, int) or isinstance(raw_skip_rows, bool) or raw_skip_rows < 0:
        raise JobSpecError("Job field 'skip_rows' must be an integer >= 0.")
    return raw_skip_rows


def _parse_header(root_mapping: Mapping[str, object]) -> bool:
    raw_header = root_mapping.get("header", False)
    if not isinstance(raw_header, bool):
        raise JobSpecError("Job field 'header' must be true or false.")
    return raw_header


def _parse_codec(root_mapping: Mapping[str, object]) -> str | None:
    raw_codec = root_mapping.get("codec")
    if raw_codec is None:
        return None
    if not isinstance(raw_codec, str):
        raise JobSpecError("Job field 'codec' must be a string when provided.")
    return validate_codec(raw_codec)
