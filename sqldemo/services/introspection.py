"""
Schema introspection for the target table.

Reads `information_schema.columns` so the service can be built from the live
table once at startup instead of inspecting result metadata on every query.
"""

from __future__ import annotations

from typing import List

import psycopg
from psycopg.rows import dict_row

from sqldemo.domain.errors import StoreError
from sqldemo.domain.models import ColumnDefinition, TableSchema

COLUMNS_QUERY = """
    SELECT column_name, data_type, is_nullable
    FROM information_schema.columns
    WHERE table_schema = %s AND table_name = %s
    ORDER BY ordinal_position;
"""


def fetch_column_definitions(
    conn: psycopg.Connection, table: str, namespace: str = "public"
) -> List[ColumnDefinition]:
    """
    Return every column of the table, identity included, in ordinal order.

    An empty list means the table does not exist (or is not visible to the
    connected role).
    """
    with conn.cursor(row_factory=dict_row) as cur:
        cur.execute(COLUMNS_QUERY, (namespace, table))
        rows = cur.fetchall()
    return [
        ColumnDefinition(
            name=row["column_name"],
            data_type=row["data_type"],
            nullable=row["is_nullable"] == "YES",
        )
        for row in rows
    ]


def introspect_schema(
    conn: psycopg.Connection,
    table: str,
    identity_column: str = "id",
    namespace: str = "public",
) -> TableSchema:
    """
    Build a TableSchema from the live table.

    Raises
    ------
    StoreError
        If the table is missing or has no column named `identity_column`.
    """
    definitions = fetch_column_definitions(conn, table, namespace)
    if not definitions:
        raise StoreError(f"Table {namespace}.{table} does not exist")
    if not any(column.name == identity_column for column in definitions):
        raise StoreError(
            f"Table {namespace}.{table} has no identity column '{identity_column}'"
        )
    return TableSchema(
        table=table,
        namespace=namespace,
        identity_column=identity_column,
        columns=tuple(column for column in definitions if column.name != identity_column),
    )


__all__ = ["COLUMNS_QUERY", "fetch_column_definitions", "introspect_schema"]
