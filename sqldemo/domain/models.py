"""
Domain models for the Basic SQL Demo.

`Record` is the in-memory form of one table row: an ordered mapping of column
values plus a set-once identity. `TableSchema` describes the target table and
is what the data-access service is parameterized with.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from sqldemo.domain.errors import IdentityAlreadyAssignedError, RecordError


class Record:
    """
    Representation of a single row in the target table.

    The identity is `None` until the store assigns one on insert; once set it
    cannot change. Column order follows insertion order.
    """

    __slots__ = ("_identity", "_columns")

    def __init__(
        self,
        columns: Optional[Mapping[str, Any]] = None,
        identity: Optional[int] = None,
    ) -> None:
        self._identity: Optional[int] = None
        self._columns: Dict[str, Any] = dict(columns or {})
        if identity is not None:
            self.assign_identity(identity)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], identity_column: str = "id") -> "Record":
        """
        Build a record from a raw query row, splitting out the identity column.
        """
        columns = {name: value for name, value in row.items() if name != identity_column}
        return cls(columns, identity=row.get(identity_column))

    @property
    def identity(self) -> Optional[int]:
        return self._identity

    def assign_identity(self, value: int) -> None:
        """
        Set the identity once.

        Raises
        ------
        IdentityAlreadyAssignedError
            If the record already carries an identity.
        RecordError
            If `value` is not an integer.
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise RecordError(f"Record identity must be an integer, got {value!r}")
        if self._identity is not None:
            raise IdentityAlreadyAssignedError(self._identity, value)
        self._identity = value

    def get(self, name: str, default: Any = None) -> Any:
        return self._columns.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self._columns[name] = value

    def column_names(self) -> List[str]:
        return list(self._columns)

    def values(self) -> Mapping[str, Any]:
        """Read-only snapshot of the column values."""
        return MappingProxyType(dict(self._columns))

    def __getitem__(self, name: str) -> Any:
        return self._columns[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __contains__(self, name: object) -> bool:
        return name in self._columns

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._columns))

    def __len__(self) -> int:
        return len(self._columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._identity == other._identity and self._columns == other._columns

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Record(identity={self._identity!r}, columns={self._columns!r})"


class ColumnDefinition(BaseModel):
    """A single column of the target table."""

    name: str = Field(..., min_length=1, description="Column name as stored.")
    data_type: str = Field("text", description="Store type name (information_schema.data_type).")
    nullable: bool = Field(True, description="Whether the column accepts NULL.")

    model_config = {"frozen": True}


class TableSchema(BaseModel):
    """
    Ordered description of the target table.

    `columns` never contains the identity column.
    """

    table: str = Field(..., min_length=1, description="Target table name.")
    namespace: str = Field("public", min_length=1, description="SQL schema holding the table.")
    identity_column: str = Field("id", min_length=1, description="Primary-key column.")
    columns: Tuple[ColumnDefinition, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_columns(self) -> "TableSchema":
        names = [column.name for column in self.columns]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate column names: {', '.join(duplicates)}")
        if self.identity_column in names:
            raise ValueError(
                f"Identity column '{self.identity_column}' must not be listed among columns"
            )
        return self

    @classmethod
    def of(
        cls,
        table: str,
        names: Iterable[str],
        identity_column: str = "id",
        namespace: str = "public",
    ) -> "TableSchema":
        """Build a text-typed schema from bare column names."""
        return cls(
            table=table,
            namespace=namespace,
            identity_column=identity_column,
            columns=tuple(ColumnDefinition(name=name) for name in names),
        )

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def has_column(self, name: str) -> bool:
        return any(column.name == name for column in self.columns)

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.table}"


__all__ = ["Record", "ColumnDefinition", "TableSchema"]
