"""
Pytest configuration for the vendor store.

Provides fixtures for:
- Settings override for integration tests
- Database connection management and schema setup
- Table cleanup between integration tests
- A fresh in-memory store for unit tests
"""

from __future__ import annotations

import os
from typing import Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from vendorstore.config import Settings, build_dsn
from vendorstore.domain.models import Vendor
from vendorstore.infrastructure.schema import apply_schema, truncate_vendors
from vendorstore.store.memory import MemoryVendorStore


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
        db_name=os.getenv("DB_NAME", "vendor_store"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return build_dsn(test_settings)


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
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the vendors table and its indexes exist.
    """
    apply_schema(db_connection)
    return True


@pytest.fixture(scope="session")
def db_pool(
    test_dsn: str, db_schema_initialized: bool
) -> Generator[ConnectionPool, None, None]:
    """
    Session-scoped connection pool sized for the concurrency tests.
    """
    pool = ConnectionPool(conninfo=test_dsn, min_size=1, max_size=8, open=True)
    try:
        yield pool
    finally:
        pool.close()


@pytest.fixture(scope="function")
def clean_vendors_table(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty the vendors table before and after each test function.
    """
    truncate_vendors(db_connection)
    yield
    truncate_vendors(db_connection)


@pytest.fixture
def memory_store() -> MemoryVendorStore:
    return MemoryVendorStore()


@pytest.fixture
def casablanca() -> Vendor:
    return Vendor(title="Casablanca", year=1942, runtime=102, genres=["Drama", "Romance"])
