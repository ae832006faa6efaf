"""
Vendor Store - versioned resource store for vendor records on PostgreSQL.

This package provides a data-access layer that lets concurrent callers
create, fetch, conditionally update, delete and search vendors, including:

- Optimistic concurrency through a version-guarded conditional UPDATE
- Safelist-validated sorting rendered through a typed query builder
- Full-text title search and genre containment filtering
- Deterministic pagination with paging metadata

Stores receive their connection pool through the constructor, so tests and
embedders can swap in the in-memory store or their own pools.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from vendorstore.config import Settings, build_dsn, get_settings
from vendorstore.domain import (
    EditConflictError,
    Filters,
    InternalStoreError,
    Metadata,
    RecordNotFoundError,
    RetryableStoreError,
    StoreError,
    StoreTimeoutError,
    StoreUnavailableError,
    ValidationError,
    Validator,
    Vendor,
    VendorPatch,
    calculate_metadata,
    merge_patch,
    parse_list_query,
    validate_filters,
    validate_vendor,
)
from vendorstore.store import (
    AsyncVendorStore,
    MemoryVendorStore,
    Page,
    ResourceStore,
    VendorStore,
)
from vendorstore.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "build_dsn",
    "get_settings",
    # Domain
    "Vendor",
    "VendorPatch",
    "merge_patch",
    "validate_vendor",
    "Filters",
    "parse_list_query",
    "validate_filters",
    "Metadata",
    "calculate_metadata",
    "Validator",
    # Errors
    "StoreError",
    "RecordNotFoundError",
    "EditConflictError",
    "ValidationError",
    "RetryableStoreError",
    "StoreTimeoutError",
    "StoreUnavailableError",
    "InternalStoreError",
    # Stores
    "ResourceStore",
    "Page",
    "VendorStore",
    "AsyncVendorStore",
    "MemoryVendorStore",
    # Logging
    "configure_logging",
    "get_logger",
]
