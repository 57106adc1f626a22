"""
PostgreSQL implementation of the DatabaseService contract.

One class serves both the hand-written ("fixed") schema and the schema read
from the live table at startup: statements are composed from the TableSchema
the service is built with. Identifiers go through `psycopg.sql.Identifier`
and every value is a bound parameter.

Each operation opens a dedicated connection, runs a single statement and
closes the connection before returning. psycopg's connection context commits
on success and rolls back when an exception escapes.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Tuple

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from sqldemo.config import get_settings
from sqldemo.domain.errors import IdentityAlreadyAssignedError, StoreError
from sqldemo.domain.models import Record, TableSchema
from sqldemo.infrastructure.db_factory import get_sync_connection
from sqldemo.services.abstract import AbstractDatabaseService
from sqldemo.services.introspection import fetch_column_definitions, introspect_schema
from sqldemo.utils.logging import get_logger

log = get_logger(__name__)

ConnectionFactory = Callable[[], psycopg.Connection]


def _table_ref(schema: TableSchema) -> sql.Identifier:
    return sql.Identifier(schema.namespace, schema.table)


def _identifiers(names: List[str]) -> sql.Composed:
    return sql.SQL(", ").join(sql.Identifier(name) for name in names)


class SQLDatabaseService(AbstractDatabaseService):
    """
    CRUD over one PostgreSQL table described by a TableSchema.

    Parameters
    ----------
    schema : TableSchema
        Target table and its non-identity columns.
    dsn_override : str | None
        Connect to this DSN instead of the one built from settings.
    connection_factory : callable | None
        Zero-argument callable returning a fresh connection; takes precedence
        over `dsn_override`.
    """

    def __init__(
        self,
        schema: TableSchema,
        dsn_override: Optional[str] = None,
        connection_factory: Optional[ConnectionFactory] = None,
    ) -> None:
        self.schema = schema
        self._dsn_override = dsn_override
        self._connection_factory = connection_factory

    @classmethod
    def from_store(
        cls,
        table: Optional[str] = None,
        identity_column: Optional[str] = None,
        namespace: Optional[str] = None,
        dsn_override: Optional[str] = None,
        connection_factory: Optional[ConnectionFactory] = None,
    ) -> "SQLDatabaseService":
        """
        Introspect the target table once and build a service for it.

        Unset arguments fall back to the `DB_TABLE`, `DB_IDENTITY_COLUMN` and
        `DB_SCHEMA` settings.
        """
        settings = get_settings()
        table = table or settings.db_table
        identity_column = identity_column or settings.db_identity_column
        namespace = namespace or settings.db_schema

        bootstrap = cls(
            TableSchema(table=table, namespace=namespace, identity_column=identity_column),
            dsn_override=dsn_override,
            connection_factory=connection_factory,
        )
        operation = f"An error has occurred while introspecting table {namespace}.{table}"
        with bootstrap._connection(operation) as conn:
            schema = introspect_schema(conn, table, identity_column, namespace)
        log.info(
            "Schema loaded",
            extra={"table": schema.qualified_name, "columns": schema.column_names},
        )
        return cls(schema, dsn_override=dsn_override, connection_factory=connection_factory)

    # ------------------------------------------------------------------ plumbing

    def _connect(self) -> psycopg.Connection:
        if self._connection_factory is not None:
            return self._connection_factory()
        return get_sync_connection(self._dsn_override)

    @contextmanager
    def _connection(self, operation: str) -> Iterator[psycopg.Connection]:
        """Open a connection for one operation, wrapping driver failures in StoreError."""
        try:
            with self._connect() as conn:
                yield conn
        except psycopg.Error as exc:
            log.warning(
                operation,
                extra={"table": self.schema.qualified_name, "error": str(exc)},
            )
            raise StoreError(operation, exc) from exc

    @contextmanager
    def _cursor(self, operation: str) -> Iterator[psycopg.Cursor]:
        with self._connection(operation) as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                yield cur

    def _bound_columns(self, record: Record) -> Tuple[List[str], List[Any]]:
        """Column names and values to bind, in the record's insertion order."""
        names = record.column_names()
        if self.schema.identity_column in names:
            raise StoreError(
                f"Column '{self.schema.identity_column}' is the identity of "
                f"{self.schema.qualified_name} and cannot be written"
            )
        unknown = [name for name in names if not self.schema.has_column(name)]
        if unknown:
            raise StoreError(
                f"Unknown column(s) for {self.schema.qualified_name}: {', '.join(unknown)}"
            )
        values = record.values()
        return names, [values[name] for name in names]

    def _select(self) -> sql.Composed:
        fields = [self.schema.identity_column, *self.schema.column_names]
        return sql.SQL("SELECT {fields} FROM {table}").format(
            fields=_identifiers(fields),
            table=_table_ref(self.schema),
        )

    def _to_record(self, row: dict) -> Record:
        return Record.from_row(row, self.schema.identity_column)

    # ---------------------------------------------------------------- operations

    def fetch_all(self) -> List[Record]:
        query = sql.SQL("{select} ORDER BY {identity}").format(
            select=self._select(),
            identity=sql.Identifier(self.schema.identity_column),
        )
        with self._cursor("An error has occurred while attempting to retrieve all rows") as cur:
            log.debug("Fetching all rows", extra={"table": self.schema.qualified_name})
            cur.execute(query)
            rows = cur.fetchall()
        return [self._to_record(row) for row in rows]

    def fetch(self, identity: int) -> Optional[Record]:
        query = sql.SQL("{select} WHERE {identity} = %s").format(
            select=self._select(),
            identity=sql.Identifier(self.schema.identity_column),
        )
        operation = f"An error has occurred while retrieving row with id={identity}"
        with self._cursor(operation) as cur:
            cur.execute(query, (identity,))
            row = cur.fetchone()
        return self._to_record(row) if row is not None else None

    def exists(self, identity: int) -> bool:
        query = sql.SQL("SELECT 1 FROM {table} WHERE {identity} = %s LIMIT 1").format(
            table=_table_ref(self.schema),
            identity=sql.Identifier(self.schema.identity_column),
        )
        operation = f"An error has occurred while checking for a row with id={identity}"
        with self._cursor(operation) as cur:
            cur.execute(query, (identity,))
            return cur.fetchone() is not None

    def insert(self, record: Record) -> int:
        if record.identity is not None:
            raise IdentityAlreadyAssignedError(record.identity)
        names, params = self._bound_columns(record)
        if names:
            query = sql.SQL("INSERT INTO {table} ({fields}) VALUES ({values}) RETURNING {identity}")
            query = query.format(
                table=_table_ref(self.schema),
                fields=_identifiers(names),
                values=sql.SQL(", ").join(sql.Placeholder() for _ in names),
                identity=sql.Identifier(self.schema.identity_column),
            )
        else:
            query = sql.SQL("INSERT INTO {table} DEFAULT VALUES RETURNING {identity}").format(
                table=_table_ref(self.schema),
                identity=sql.Identifier(self.schema.identity_column),
            )

        operation = f"An error has occurred while inserting into {self.schema.qualified_name}"
        with self._cursor(operation) as cur:
            cur.execute(query, params)
            row = cur.fetchone()
            if row is None:
                raise StoreError(f"{operation}: no identity was returned")
            identity = row[self.schema.identity_column]
            if isinstance(identity, bool) or not isinstance(identity, int):
                raise StoreError(
                    f"{operation}: the store returned a non-integer identity {identity!r}"
                )
        record.assign_identity(identity)
        log.info("Row inserted", extra={"table": self.schema.qualified_name, "id": identity})
        return identity

    def update(self, identity: int, record: Record) -> int:
        names, params = self._bound_columns(record)
        operation = f"An error has occurred while updating row with id={identity}"
        if not names:
            raise StoreError(f"{operation}: the record has no columns to write")
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = {}").format(sql.Identifier(name), sql.Placeholder()) for name in names
        )
        query = sql.SQL("UPDATE {table} SET {assignments} WHERE {identity} = %s").format(
            table=_table_ref(self.schema),
            assignments=assignments,
            identity=sql.Identifier(self.schema.identity_column),
        )
        with self._cursor(operation) as cur:
            cur.execute(query, (*params, identity))
            affected = cur.rowcount
        log.info(
            "Row updated",
            extra={"table": self.schema.qualified_name, "id": identity, "rows": affected},
        )
        return affected

    def delete(self, identity: int) -> int:
        query = sql.SQL("DELETE FROM {table} WHERE {identity} = %s").format(
            table=_table_ref(self.schema),
            identity=sql.Identifier(self.schema.identity_column),
        )
        operation = f"An error has occurred while deleting row with id={identity}"
        with self._cursor(operation) as cur:
            cur.execute(query, (identity,))
            affected = cur.rowcount
        log.info(
            "Row deleted",
            extra={"table": self.schema.qualified_name, "id": identity, "rows": affected},
        )
        return affected

    def list_column_names(self) -> List[str]:
        operation = (
            f"An error has occurred while retrieving column names of {self.schema.qualified_name}"
        )
        with self._connection(operation) as conn:
            definitions = fetch_column_definitions(conn, self.schema.table, self.schema.namespace)
        if not definitions:
            raise StoreError(f"Table {self.schema.qualified_name} does not exist")
        return [
            column.name for column in definitions if column.name != self.schema.identity_column
        ]


__all__ = ["SQLDatabaseService", "ConnectionFactory"]
