"""
Basic SQL Demo - CRUD over a single PostgreSQL table.

This package provides:

- A `Record` row model with a set-once identity
- A `TableSchema` descriptor, written by hand or read from the live table
- A `DatabaseService` contract with a psycopg-backed implementation
- Form controllers for the display, insert, modify and delete forms
- A typer command-line front end

Every data-access failure surfaces as `StoreError`; statements always bind
values as parameters.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from sqldemo.config import Settings, get_settings
from sqldemo.controllers import (
    DeleteController,
    DisplayController,
    InsertController,
    ModifyController,
    Notice,
    NoticeLevel,
)
from sqldemo.domain import (
    ColumnDefinition,
    IdentityAlreadyAssignedError,
    Record,
    RecordError,
    StoreError,
    TableSchema,
)
from sqldemo.services import AbstractDatabaseService, DatabaseService, SQLDatabaseService
from sqldemo.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "ColumnDefinition",
    "Record",
    "TableSchema",
    "IdentityAlreadyAssignedError",
    "RecordError",
    "StoreError",
    # Data access
    "AbstractDatabaseService",
    "DatabaseService",
    "SQLDatabaseService",
    # Controllers
    "DeleteController",
    "DisplayController",
    "InsertController",
    "ModifyController",
    "Notice",
    "NoticeLevel",
    # Logging
    "configure_logging",
    "get_logger",
]
