"""
Data-access services for the Basic SQL Demo.

Re-exports the DatabaseService contract, its PostgreSQL implementation and
the schema introspection helpers so callers can import from
`sqldemo.services` directly.
"""

from sqldemo.services.abstract import AbstractDatabaseService, DatabaseService
from sqldemo.services.introspection import fetch_column_definitions, introspect_schema
from sqldemo.services.sql_service import SQLDatabaseService

__all__ = [
    "AbstractDatabaseService",
    "DatabaseService",
    "SQLDatabaseService",
    "fetch_column_definitions",
    "introspect_schema",
]
