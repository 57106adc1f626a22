from __future__ import annotations

import psycopg
import pytest
from psycopg import sql
from psycopg.rows import dict_row

from sqldemo.domain.errors import IdentityAlreadyAssignedError, StoreError
from sqldemo.domain.models import Record, TableSchema
from sqldemo.services.abstract import DatabaseService
from sqldemo.services.introspection import COLUMNS_QUERY
from sqldemo.services.sql_service import SQLDatabaseService

INSERTED_ID = 41
ROW_ID = 5


@pytest.fixture
def service(demo_schema: TableSchema, fake_store) -> SQLDatabaseService:
    return SQLDatabaseService(demo_schema, connection_factory=fake_store.connect)


def _column_rows(*names: str) -> list:
    return [
        {"column_name": name, "data_type": "integer" if name == "id" else "text", "is_nullable": "NO"}
        for name in names
    ]


def test_service_satisfies_protocol(service):
    assert isinstance(service, DatabaseService)


def test_fetch_all_maps_rows_into_records(service, fake_store):
    fake_store.queue(
        {"id": 1, "title": "A", "description": "B", "url": "C"},
        {"id": 2, "title": "D", "description": "E", "url": None},
    )

    records = service.fetch_all()

    assert [r.identity for r in records] == [1, 2]
    assert records[0].values() == {"title": "A", "description": "B", "url": "C"}
    assert records[1].get("url") is None
    query, params = fake_store.executed[0]
    assert isinstance(query, sql.Composable)
    assert params is None
    assert fake_store.connections[0].row_factories == [dict_row]


def test_fetch_all_on_empty_table_returns_empty_list(service, fake_store):
    fake_store.queue()
    assert service.fetch_all() == []


def test_fetch_returns_record_or_none(service, fake_store):
    fake_store.queue({"id": ROW_ID, "title": "A", "description": "B", "url": "C"})
    fake_store.queue()

    found = service.fetch(ROW_ID)
    missing = service.fetch(ROW_ID + 1)

    assert found == Record({"title": "A", "description": "B", "url": "C"}, identity=ROW_ID)
    assert missing is None
    assert [params for _, params in fake_store.executed] == [(ROW_ID,), (ROW_ID + 1,)]


def test_exists_reflects_lookup_result(service, fake_store):
    fake_store.queue({"?column?": 1})
    fake_store.queue()

    assert service.exists(ROW_ID) is True
    assert service.exists(ROW_ID) is False


def test_exists_propagates_store_failures(service, fake_store):
    fake_store.execute_error = psycopg.OperationalError("server closed the connection")

    with pytest.raises(StoreError) as excinfo:
        service.exists(ROW_ID)

    assert "checking for a row with id=5" in str(excinfo.value)


def test_insert_binds_values_in_record_order_and_back_fills_identity(service, fake_store):
    fake_store.queue({"id": INSERTED_ID})
    record = Record({"url": "C", "title": "A", "description": "B"})

    identity = service.insert(record)

    assert identity == INSERTED_ID
    assert record.identity == INSERTED_ID
    _, params = fake_store.executed[0]
    assert params == ("C", "A", "B")
    assert fake_store.connections[0].committed


def test_insert_never_interpolates_values_into_statement_text(service, fake_store):
    payload = "x'); DROP TABLE database_example; --"
    fake_store.queue({"id": INSERTED_ID})

    service.insert(Record({"title": payload, "description": "B", "url": "C"}))

    query, params = fake_store.executed[0]
    assert payload in params
    assert payload not in repr(query)


def test_insert_without_columns_uses_default_values(demo_schema, fake_store):
    service = SQLDatabaseService(demo_schema, connection_factory=fake_store.connect)
    fake_store.queue({"id": 1})

    assert service.insert(Record()) == 1
    _, params = fake_store.executed[0]
    assert params == ()


def test_insert_refuses_record_with_identity_before_touching_store(service, fake_store):
    record = Record({"title": "A"}, identity=3)

    with pytest.raises(IdentityAlreadyAssignedError):
        service.insert(record)

    assert fake_store.connections == []


def test_insert_rejects_unknown_columns_before_touching_store(service, fake_store):
    with pytest.raises(StoreError) as excinfo:
        service.insert(Record({"title": "A", "author": "nobody"}))

    assert "author" in str(excinfo.value)
    assert fake_store.connections == []


def test_insert_rejects_identity_column_among_values(service, fake_store):
    with pytest.raises(StoreError):
        service.insert(Record({"id": 99, "title": "A"}))
    assert fake_store.connections == []


def test_insert_without_returned_identity_rolls_back(service, fake_store):
    fake_store.queue()
    record = Record({"title": "A", "description": "B", "url": "C"})

    with pytest.raises(StoreError):
        service.insert(record)

    assert record.identity is None
    assert fake_store.connections[0].rolled_back


def test_insert_with_non_integer_identity_rolls_back(service, fake_store):
    fake_store.queue({"id": "3f2a9c"})
    record = Record({"title": "A", "description": "B", "url": "C"})

    with pytest.raises(StoreError) as excinfo:
        service.insert(record)

    assert "3f2a9c" in str(excinfo.value)
    assert record.identity is None
    assert fake_store.connections[0].rolled_back
    assert not fake_store.connections[0].committed


def test_update_binds_values_then_identity(service, fake_store):
    fake_store.rowcount = 1

    affected = service.update(ROW_ID, Record({"title": "A2", "url": "C2"}))

    assert affected == 1
    _, params = fake_store.executed[0]
    assert params == ("A2", "C2", ROW_ID)


def test_update_with_no_columns_fails_without_touching_store(service, fake_store):
    with pytest.raises(StoreError):
        service.update(ROW_ID, Record())
    assert fake_store.connections == []


def test_delete_returns_affected_rows_and_missing_identity_is_noop(service, fake_store):
    fake_store.rowcount = 0

    assert service.delete(12345) == 0
    _, params = fake_store.executed[0]
    assert params == (12345,)
    assert fake_store.connections[0].committed


def test_driver_errors_are_wrapped_with_cause_and_connection_released(service, fake_store):
    error = psycopg.errors.UniqueViolation("duplicate key value")
    fake_store.execute_error = error

    with pytest.raises(StoreError) as excinfo:
        service.delete(ROW_ID)

    assert excinfo.value.cause is error
    assert excinfo.value.__cause__ is error
    assert excinfo.value.operation == "An error has occurred while deleting row with id=5"
    assert "duplicate key value" in str(excinfo.value)
    conn = fake_store.connections[0]
    assert conn.rolled_back and conn.closed


def test_connection_failures_are_wrapped(service, fake_store):
    fake_store.connect_error = psycopg.OperationalError("connection refused")

    with pytest.raises(StoreError) as excinfo:
        service.fetch_all()

    assert "retrieve all rows" in excinfo.value.operation


def test_every_operation_uses_its_own_connection(service, fake_store):
    fake_store.queue()
    fake_store.queue()
    fake_store.rowcount = 0

    service.fetch_all()
    service.exists(1)
    service.delete(1)

    assert len(fake_store.connections) == 3
    assert all(conn.closed for conn in fake_store.connections)


def test_list_column_names_excludes_identity(service, fake_store):
    fake_store.queue(*_column_rows("id", "title", "description", "url"))

    assert service.list_column_names() == ["title", "description", "url"]
    query, params = fake_store.executed[0]
    assert query == COLUMNS_QUERY
    assert params == ("public", "database_example")


def test_list_column_names_fails_for_missing_table(service, fake_store):
    fake_store.queue()

    with pytest.raises(StoreError):
        service.list_column_names()


def test_from_store_introspects_schema_once(fake_store):
    fake_store.queue(*_column_rows("id", "title", "description", "url"))

    service = SQLDatabaseService.from_store(
        table="database_example", connection_factory=fake_store.connect
    )

    assert service.schema.column_names == ["title", "description", "url"]
    assert service.schema.identity_column == "id"
    assert service.schema.columns[0].nullable is False
    assert len(fake_store.executed) == 1


def test_from_store_uses_settings_defaults(monkeypatch, fake_store):
    monkeypatch.setenv("DB_TABLE", "bookmarks")
    monkeypatch.setenv("DB_SCHEMA", "demo")
    monkeypatch.setenv("DB_IDENTITY_COLUMN", "bookmark_id")
    fake_store.queue(*_column_rows("bookmark_id", "label"))

    service = SQLDatabaseService.from_store(connection_factory=fake_store.connect)

    assert service.schema.qualified_name == "demo.bookmarks"
    assert service.schema.identity_column == "bookmark_id"
    assert service.schema.column_names == ["label"]
    assert fake_store.executed[0][1] == ("demo", "bookmarks")


def test_from_store_fails_for_missing_table(fake_store):
    fake_store.queue()

    with pytest.raises(StoreError) as excinfo:
        SQLDatabaseService.from_store(table="nope", connection_factory=fake_store.connect)

    assert "does not exist" in str(excinfo.value)


def test_from_store_fails_without_identity_column(fake_store):
    fake_store.queue(*_column_rows("title", "url"))

    with pytest.raises(StoreError) as excinfo:
        SQLDatabaseService.from_store(table="database_example", connection_factory=fake_store.connect)

    assert "identity column" in str(excinfo.value)
