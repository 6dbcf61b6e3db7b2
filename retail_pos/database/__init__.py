"""
Database access
"""

from .async_db import (
    create_async_database_engine,
    dispose_engine,
    get_async_db,
    get_async_db_context,
    get_async_engine,
    get_session_factory,
)
from .setup import check_db_connection, create_tables, drop_tables, init_db

__all__ = [
    "create_async_database_engine",
    "dispose_engine",
    "get_async_db",
    "get_async_db_context",
    "get_async_engine",
    "get_session_factory",
    "check_db_connection",
    "create_tables",
    "drop_tables",
    "init_db",
]
