"""
Infrastructure package for the Basic SQL Demo.

Centralizes database connectivity. Keep this layer focused on connection
handling, decoupled from statement building and record mapping.
"""

from sqldemo.infrastructure.db_factory import build_dsn, get_sync_connection

__all__ = [
    "build_dsn",
    "get_sync_connection",
]
