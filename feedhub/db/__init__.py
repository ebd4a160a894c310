"""Database management for feedhub."""

from .connection import close_connection_pool, get_connection, get_connection_pool
from .init import init_database, validate_connection
from .store import PostgresStore, Store

__all__ = [
    "PostgresStore",
    "Store",
    "close_connection_pool",
    "get_connection",
    "get_connection_pool",
    "init_database",
    "validate_connection",
]
