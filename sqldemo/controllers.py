"""
Form controllers for the Basic SQL Demo.

One controller per form: display, insert, modify and delete. Each takes the
text a user typed, validates it (identities must parse, no field may be
blank), calls the DatabaseService and reports the outcome as a Notice.
Controllers never raise StoreError; they turn it into an error notice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Mapping, Optional

from sqldemo.domain.errors import StoreError
from sqldemo.domain.models import Record
from sqldemo.services.abstract import DatabaseService
from sqldemo.utils.logging import get_logger
from sqldemo.utils.parsing import parse_identity, trim_fields

log = get_logger(__name__)

MISSING_FIELDS = "Please fill in all fields before submitting!"
INVALID_IDENTITY = "Please enter a valid integer that represents a data row!"


class NoticeLevel(str, Enum):
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str

    @classmethod
    def info(cls, message: str) -> "Notice":
        return cls(NoticeLevel.INFORMATION, message)

    @classmethod
    def warning(cls, message: str) -> "Notice":
        return cls(NoticeLevel.WARNING, message)

    @classmethod
    def from_store_error(cls, error: StoreError) -> "Notice":
        cause = error.cause if error.cause is not None else error
        return cls(NoticeLevel.ERROR, f"Database error: {cause}")


@dataclass(frozen=True)
class Lookup:
    """Outcome of a search: the record found, or a notice explaining why not."""

    record: Optional[Record] = None
    notice: Optional[Notice] = None


@dataclass(frozen=True)
class TableView:
    """Everything a display needs: column headers, rows and an optional notice."""

    columns: List[str] = field(default_factory=list)
    records: List[Record] = field(default_factory=list)
    notice: Optional[Notice] = None


def _unknown_fields(service: DatabaseService, fields: Mapping[str, str]) -> Optional[Notice]:
    unknown = [name for name in fields if not service.schema.has_column(name)]
    if not unknown:
        return None
    return Notice.warning(f"Unknown field(s): {', '.join(unknown)}")


def _blank_fields(service: DatabaseService, fields: Mapping[str, str]) -> bool:
    return any(not fields.get(name) for name in service.schema.column_names)


def _record_from_fields(service: DatabaseService, fields: Mapping[str, str]) -> Record:
    return Record({name: fields[name] for name in service.schema.column_names})


class DisplayController:
    """Loads the whole table for display."""

    def __init__(self, service: DatabaseService) -> None:
        self.service = service

    def refresh(self) -> TableView:
        try:
            records = self.service.fetch_all()
        except StoreError as exc:
            log.error("Display refresh failed", extra={"error": str(exc)})
            return TableView(
                columns=list(self.service.schema.column_names),
                notice=Notice.from_store_error(exc),
            )
        return TableView(columns=list(self.service.schema.column_names), records=records)


class InsertController:
    """Creates a row from form fields."""

    def __init__(self, service: DatabaseService) -> None:
        self.service = service

    def submit(self, fields: Mapping[str, Optional[str]]) -> Notice:
        values = trim_fields(fields)
        unknown = _unknown_fields(self.service, values)
        if unknown is not None:
            return unknown
        if _blank_fields(self.service, values):
            return Notice.warning(MISSING_FIELDS)
        record = _record_from_fields(self.service, values)
        try:
            identity = self.service.insert(record)
        except StoreError as exc:
            return Notice.from_store_error(exc)
        return Notice.info(
            f"Data has successfully been inserted into the database with id={identity}!"
        )


class ModifyController:
    """Looks a row up by identity, then overwrites it from form fields."""

    def __init__(self, service: DatabaseService) -> None:
        self.service = service

    def search(self, id_text: Optional[str]) -> Lookup:
        identity = parse_identity(id_text)
        if identity is None or identity <= 0:
            return Lookup(notice=Notice.warning(INVALID_IDENTITY))
        try:
            record = self.service.fetch(identity)
        except StoreError as exc:
            return Lookup(notice=Notice.from_store_error(exc))
        if record is None:
            return Lookup(notice=Notice.warning(INVALID_IDENTITY))
        return Lookup(record=record)

    def submit(self, id_text: Optional[str], fields: Mapping[str, Optional[str]]) -> Notice:
        identity = parse_identity(id_text)
        values = trim_fields(fields)
        unknown = _unknown_fields(self.service, values)
        if unknown is not None:
            return unknown
        if identity is None or identity <= 0 or _blank_fields(self.service, values):
            return Notice.warning(MISSING_FIELDS)
        try:
            if not self.service.exists(identity):
                return Notice.warning(INVALID_IDENTITY)
            affected = self.service.update(identity, _record_from_fields(self.service, values))
        except StoreError as exc:
            return Notice.from_store_error(exc)
        if not affected:
            return Notice.warning(INVALID_IDENTITY)
        return Notice.info("The data row has successfully been updated!")


class DeleteController:
    """Deletes a row by identity after checking it exists."""

    def __init__(self, service: DatabaseService) -> None:
        self.service = service

    def submit(self, id_text: Optional[str]) -> Notice:
        identity = parse_identity(id_text)
        if identity is None:
            return Notice.warning(INVALID_IDENTITY)
        try:
            if not self.service.exists(identity):
                return Notice.warning(INVALID_IDENTITY)
            affected = self.service.delete(identity)
        except StoreError as exc:
            return Notice.from_store_error(exc)
        if not affected:
            return Notice.warning(INVALID_IDENTITY)
        return Notice.info(f"Entry {identity} has been successfully deleted from the database!")


__all__ = [
    "DeleteController",
    "DisplayController",
    "InsertController",
    "Lookup",
    "ModifyController",
    "Notice",
    "NoticeLevel",
    "TableView",
]
