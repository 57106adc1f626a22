"""
Data-access contract for the Basic SQL Demo.

Presentation-layer code (form controllers, the CLI) depends on the
DatabaseService protocol only. Every store-facing method either returns its
result or raises StoreError; nothing is retried and nothing is swallowed.
"""

from __future__ import annotations

import abc
from typing import List, Optional, Protocol, runtime_checkable

from sqldemo.domain.models import Record, TableSchema


@runtime_checkable
class DatabaseService(Protocol):
    """
    CRUD operations over a single table.

    Attributes
    ----------
    schema : TableSchema
        Descriptor of the target table the statements are built from.
    """

    schema: TableSchema

    def fetch_all(self) -> List[Record]:
        """Return every row of the table, ordered by identity."""
        ...

    def fetch(self, identity: int) -> Optional[Record]:
        """Return the row with this identity, or None when there is none."""
        ...

    def exists(self, identity: int) -> bool:
        """Return whether a row with this identity exists."""
        ...

    def insert(self, record: Record) -> int:
        """
        Insert the record's present columns and back-fill its identity.

        Returns
        -------
        int
            The identity assigned by the store.
        """
        ...

    def update(self, identity: int, record: Record) -> int:
        """Overwrite the record's present columns on the matching row; return rows affected."""
        ...

    def delete(self, identity: int) -> int:
        """Delete the matching row; return rows affected (0 when none matched)."""
        ...

    def list_column_names(self) -> List[str]:
        """Introspect the table's non-identity column names in ordinal order."""
        ...


class AbstractDatabaseService(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses set `schema` and implement every operation.
    """

    schema: TableSchema

    @abc.abstractmethod
    def fetch_all(self) -> List[Record]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def fetch(self, identity: int) -> Optional[Record]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def exists(self, identity: int) -> bool:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def insert(self, record: Record) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def update(self, identity: int, record: Record) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, identity: int) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def list_column_names(self) -> List[str]:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = ["DatabaseService", "AbstractDatabaseService"]
