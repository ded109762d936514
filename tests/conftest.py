"""Pytest configuration and shared fixtures for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


EMPLOYEE_SCHEMA_JSON = """
{
   "type" : "record",
   "namespace" : "dumond.lee",
   "name" : "Employee",
   "fields" : [
      { "name" : "name" , "type" : "string" },
      { "name" : "age" , "type" : "int" }
   ]
}
"""


@pytest.fixture
def employee_schema_json() -> str:
    """Two-field employee schema: string name and non-nullable int age."""
    return EMPLOYEE_SCHEMA_JSON
