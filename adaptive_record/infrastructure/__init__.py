"""
Infrastructure package for Adaptive Record.

Centralizes PostgreSQL connectivity (connection factory, pooling) and the
persistence callbacks built on it. Keep this layer focused on I/O, decoupled
from the record store and SQL generation logic.
"""

from adaptive_record.infrastructure.db_factory import (
    PoolManager,
    build_dsn,
    get_sync_connection,
    get_sync_pool,
    sync_connection,
)
from adaptive_record.infrastructure.postgres import PostgresRecordPersistence

__all__ = [
    "PoolManager",
    "PostgresRecordPersistence",
    "build_dsn",
    "get_sync_connection",
    "get_sync_pool",
    "sync_connection",
]
