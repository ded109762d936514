"""Avro storage layer.

This package writes validated records into Avro container files
and reads them back for inspection.
"""
