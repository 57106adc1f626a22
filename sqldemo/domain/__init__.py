"""
Domain package for the Basic SQL Demo.

Exports the row model, the table schema descriptor and the error types.
Keep this package free of I/O.
"""

from sqldemo.domain.errors import IdentityAlreadyAssignedError, RecordError, StoreError
from sqldemo.domain.models import ColumnDefinition, Record, TableSchema

__all__ = [
    "ColumnDefinition",
    "IdentityAlreadyAssignedError",
    "Record",
    "RecordError",
    "StoreError",
    "TableSchema",
]
