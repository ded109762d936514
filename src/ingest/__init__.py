"""Delimited text ingestion.

This package maps raw delimited rows onto Avro record schemas, coerces
values into typed records, and drives whole-file conversions.
"""
