"""
Utilities package for the Basic SQL Demo.

Exports shared helpers for logging and form-text parsing. Keep this package
lightweight and free of database access.
"""

from sqldemo.utils.logging import configure_logging, get_logger
from sqldemo.utils.parsing import parse_assignments, parse_identity, trim_fields

__all__ = [
    "configure_logging",
    "get_logger",
    "parse_assignments",
    "parse_identity",
    "trim_fields",
]
