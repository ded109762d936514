"""Core constants used across csvavro modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

DEFAULT_DELIMITER = ","
DEFAULT_ENCODING = "utf-8"
DEFAULT_CODEC = "deflate"
SUPPORTED_CODECS = ("null", "deflate", "bzip2", "xz")
DEFAULT_SYNC_INTERVAL = 16000
DEFAULT_SKIP_ROWS = 0
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
TRUE_LITERALS = ("True", "true")
FALSE_LITERALS = ("False", "false")
JOB_SPEC_VERSION = 1
