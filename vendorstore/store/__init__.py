"""
Store package for the vendor store.

Re-exports the store interfaces and the concrete stores so downstream code
can import from `vendorstore.store` directly.
"""

from vendorstore.store.abstract import (
    AbstractResourceStore,
    AsyncResourceStore,
    Page,
    ResourceStore,
    SetContainment,
    TextSearchable,
)
from vendorstore.store.async_postgres import AsyncVendorStore
from vendorstore.store.memory import MemoryVendorStore, SubsetContainment, TokenTextSearch
from vendorstore.store.postgres import VendorStore
from vendorstore.store.queries import ArrayContainment, TsVectorTextSearch

__all__ = [
    # Interfaces
    "AbstractResourceStore",
    "AsyncResourceStore",
    "Page",
    "ResourceStore",
    "SetContainment",
    "TextSearchable",
    # Search capabilities
    "ArrayContainment",
    "SubsetContainment",
    "TokenTextSearch",
    "TsVectorTextSearch",
    # Concrete stores
    "AsyncVendorStore",
    "MemoryVendorStore",
    "VendorStore",
]
