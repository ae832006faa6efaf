"""
Infrastructure package for the vendor store.

Centralizes database connectivity concerns (sync/async factories, pooling,
schema). Keep this layer focused on I/O and resource management, decoupled
from store and domain logic.
"""

from vendorstore.infrastructure.db_factory import (
    PoolManager,
    apply_statement_timeout,
    apply_statement_timeout_async,
    connection_kwargs,
    get_async_pool,
    get_sync_connection,
    get_sync_pool,
)
from vendorstore.infrastructure.schema import apply_schema, truncate_vendors

__all__ = [
    "PoolManager",
    "apply_schema",
    "apply_statement_timeout",
    "apply_statement_timeout_async",
    "connection_kwargs",
    "get_async_pool",
    "get_sync_connection",
    "get_sync_pool",
    "truncate_vendors",
]
