"""
Pytest configuration for the Basic SQL Demo.

Provides fixtures for:
- Fake psycopg connections so unit tests run without a database
- Database connection management for integration tests
- Demo table creation and cleanup
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

import psycopg
import pytest

from sqldemo.config import Settings, get_settings
from sqldemo.domain.models import TableSchema

DEMO_TABLE = "database_example"
DEMO_COLUMNS = ["title", "description", "url"]


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop the cached Settings so env changes made by a test are picked up."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# --------------------------------------------------------------------------- fakes


class FakeCursor:
    """Records executed statements and serves scripted result rows."""

    def __init__(self, conn: "FakeConnection") -> None:
        self._conn = conn
        self._rows: List[Dict[str, Any]] = []
        self.rowcount = -1
        self.closed = False

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    def execute(self, query: Any, params: Optional[Any] = None) -> None:
        store = self._conn.store
        store.executed.append((query, tuple(params) if params is not None else None))
        if store.execute_error is not None:
            raise store.execute_error
        self._rows = list(store.results.pop(0)) if store.results else []
        self.rowcount = store.rowcount if store.rowcount is not None else len(self._rows)

    def fetchone(self) -> Optional[Dict[str, Any]]:
        return self._rows.pop(0) if self._rows else None

    def fetchall(self) -> List[Dict[str, Any]]:
        rows, self._rows = self._rows, []
        return rows


class FakeConnection:
    """Mimics psycopg's connection context: commit on success, rollback on error, close."""

    def __init__(self, store: "FakeStore") -> None:
        self.store = store
        self.committed = False
        self.rolled_back = False
        self.closed = False
        self.row_factories: List[Any] = []

    def __enter__(self) -> "FakeConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.committed = True
        else:
            self.rolled_back = True
        self.closed = True

    def cursor(self, row_factory: Any = None) -> FakeCursor:
        self.row_factories.append(row_factory)
        return FakeCursor(self)


class FakeStore:
    """
    Connection factory plus a shared script for every connection it opens.

    `results` is a queue with one list of dict rows per executed statement.
    """

    def __init__(self) -> None:
        self.results: List[List[Dict[str, Any]]] = []
        self.executed: List[tuple] = []
        self.connections: List[FakeConnection] = []
        self.rowcount: Optional[int] = None
        self.execute_error: Optional[BaseException] = None
        self.connect_error: Optional[BaseException] = None

    def connect(self) -> FakeConnection:
        if self.connect_error is not None:
            raise self.connect_error
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn

    def queue(self, *rows: Dict[str, Any]) -> None:
        self.results.append(list(rows))


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def demo_schema() -> TableSchema:
    return TableSchema.of(DEMO_TABLE, DEMO_COLUMNS)


# --------------------------------------------------------------------- integration


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "sql_demo"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("PostgreSQL is not reachable")
    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the demo table exists by running db/init.sql.
    """
    init_sql_path = Path(__file__).parent.parent / "db" / "init.sql"
    with db_connection.cursor() as cur:
        cur.execute(init_sql_path.read_text(encoding="utf-8"))
    db_connection.commit()
    return True


@pytest.fixture(scope="function")
def clean_demo_table(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty the demo table and reset its identity sequence around each test.
    """
    with db_connection.cursor() as cur:
        cur.execute(f"TRUNCATE TABLE public.{DEMO_TABLE} RESTART IDENTITY;")
    db_connection.commit()
    yield
    with db_connection.cursor() as cur:
        cur.execute(f"TRUNCATE TABLE public.{DEMO_TABLE} RESTART IDENTITY;")
    db_connection.commit()
