"""
Database connection factory utilities for the vendor store.

Provides centralized management of sync and async PostgreSQL connection pools
with proper lifecycle management. The PoolManager singleton ensures pools are
closed on application exit. Stores never reach for these singletons
themselves: callers build a pool here and inject it into the store.

Includes retry logic for transient connection failures using tenacity. Retries
apply to one-off administrative connections (schema setup, seeding) only;
store operations fail fast and leave retry policy to their caller.
"""

from __future__ import annotations

import asyncio
import atexit
import threading
from typing import Any, Dict, Optional

import psycopg
from psycopg import AsyncCursor, Connection, Cursor, sql
from psycopg_pool import AsyncConnectionPool, ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from vendorstore.config import Settings, build_dsn, get_settings
from vendorstore.utils.logging import get_logger

log = get_logger(__name__)


def _statement_timeout_sql(timeout_ms: int) -> sql.Composed:
    return sql.SQL("SET LOCAL statement_timeout = {}").format(sql.Literal(int(timeout_ms)))


def apply_statement_timeout(cur: Cursor, timeout_ms: int) -> None:
    """
    Bound every statement of the current transaction to `timeout_ms`.

    A non-positive value leaves the server default in place.
    """
    if timeout_ms > 0:
        cur.execute(_statement_timeout_sql(timeout_ms))


async def apply_statement_timeout_async(cur: AsyncCursor, timeout_ms: int) -> None:
    """Async counterpart of apply_statement_timeout."""
    if timeout_ms > 0:
        await cur.execute(_statement_timeout_sql(timeout_ms))


def connection_kwargs(settings: Settings) -> Dict[str, Any]:
    """
    Client-side libpq deadlines for pooled connections.

    `connect_timeout` bounds connection setup. Keepalives and
    `tcp_user_timeout` fail a socket whose peer stopped answering, which the
    server-side statement timeout cannot detect. Non-positive settings are
    left out.
    """
    kwargs: Dict[str, Any] = {}
    if settings.db_connect_timeout_seconds > 0:
        kwargs["connect_timeout"] = settings.db_connect_timeout_seconds
    if settings.db_tcp_user_timeout_ms > 0:
        kwargs.update(
            keepalives=1,
            keepalives_idle=max(1, settings.db_tcp_user_timeout_ms // 1000),
            keepalives_interval=1,
            keepalives_count=3,
            tcp_user_timeout=settings.db_tcp_user_timeout_ms,
        )
    return kwargs


class PoolManager:
    """
    Thread-safe singleton for managing database connection pools.

    Handles lifecycle management with automatic cleanup via atexit hook. The
    sync pool is closed there; the async pool belongs to an event loop and
    must be closed with `await close_async()` before that loop ends.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._sync_pool: Optional[ConnectionPool] = None
                cls._instance._async_pool: Optional[AsyncConnectionPool] = None
                cls._instance._async_lock = asyncio.Lock()
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_sync_pool(self, settings: Optional[Settings] = None) -> ConnectionPool:
        """
        Get or create the synchronous connection pool.

        Parameters
        ----------
        settings : Settings, optional
            Source of DSN, pool bounds, acquisition timeout and connection
            deadlines. Defaults to the cached application settings.

        Returns
        -------
        ConnectionPool
            The managed sync pool instance.
        """
        with self._lock:
            if self._sync_pool is None:
                settings = settings or get_settings()
                self._sync_pool = ConnectionPool(
                    conninfo=build_dsn(settings),
                    kwargs=connection_kwargs(settings),
                    min_size=settings.db_pool_min_size,
                    max_size=settings.db_pool_max_size,
                    timeout=settings.db_pool_timeout_seconds,
                    open=True,
                )
                log.info(
                    "Opened sync connection pool",
                    extra={
                        "min_size": settings.db_pool_min_size,
                        "max_size": settings.db_pool_max_size,
                    },
                )
            return self._sync_pool

    async def get_async_pool(self, settings: Optional[Settings] = None) -> AsyncConnectionPool:
        """
        Get or create the asynchronous connection pool.

        The pool is opened inside the running event loop on first use.
        Concurrent first callers wait for that one pool.
        """
        async with self._async_lock:
            if self._async_pool is None:
                settings = settings or get_settings()
                pool = AsyncConnectionPool(
                    conninfo=build_dsn(settings),
                    kwargs=connection_kwargs(settings),
                    min_size=settings.db_pool_min_size,
                    max_size=settings.db_pool_max_size,
                    timeout=settings.db_pool_timeout_seconds,
                    open=False,
                )
                await pool.open()
                self._async_pool = pool
                log.info(
                    "Opened async connection pool",
                    extra={
                        "min_size": settings.db_pool_min_size,
                        "max_size": settings.db_pool_max_size,
                    },
                )
            return self._async_pool

    async def close_async(self) -> None:
        """Close the async pool; must be awaited from its event loop."""
        async with self._async_lock:
            if self._async_pool is not None:
                pool, self._async_pool = self._async_pool, None
                await pool.close()

    def close_all(self) -> None:
        """
        Close the sync pool and release resources.

        This is called automatically on exit via atexit hook. An async pool
        still open at that point is reported, since no event loop is left to
        close it on.
        """
        with self._lock:
            if self._sync_pool is not None:
                try:
                    self._sync_pool.close()
                except psycopg.Error:
                    log.warning("Failed to close sync connection pool", exc_info=True)
                finally:
                    self._sync_pool = None
            if self._async_pool is not None:
                log.warning("Async connection pool was not closed; await close_async() first")
                self._async_pool = None


# Convenience functions for simple use cases


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection
    errors. Use this for administrative one-off operations.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn())


def get_sync_pool(settings: Optional[Settings] = None) -> ConnectionPool:
    """Get or create the synchronous connection pool via PoolManager."""
    return PoolManager().get_sync_pool(settings)


async def get_async_pool(settings: Optional[Settings] = None) -> AsyncConnectionPool:
    """Get or create the asynchronous connection pool via PoolManager."""
    return await PoolManager().get_async_pool(settings)


__all__ = [
    "PoolManager",
    "connection_kwargs",
    "apply_statement_timeout",
    "apply_statement_timeout_async",
    "get_async_pool",
    "get_sync_connection",
    "get_sync_pool",
]
