"""
Database connection factory for the Basic SQL Demo.

Every data-access operation opens its own connection and closes it before
returning, so this module only composes the DSN and hands out fresh
connections. No pool, no retry layer.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import Connection

from sqldemo.config import Settings, get_settings


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a PostgreSQL DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def get_sync_connection(dsn_override: Optional[str] = None) -> Connection:
    """
    Open a dedicated synchronous connection.

    Use it as a context manager: psycopg commits on a clean exit, rolls back
    when an exception escapes, and closes the connection either way.

    Parameters
    ----------
    dsn_override : str | None
        Connect to this DSN instead of the one built from settings.

    Raises
    ------
    psycopg.OperationalError
        If the server cannot be reached or rejects the credentials.
    """
    settings = get_settings()
    return psycopg.connect(
        dsn_override or build_dsn(settings),
        connect_timeout=settings.db_connect_timeout,
    )


__all__ = ["build_dsn", "get_sync_connection"]
