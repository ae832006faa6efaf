"""
Domain package for the vendor store.

Exports the Vendor model, listing filters, paging metadata, validation helpers
and the error taxonomy. Keep this package free of I/O.
"""

from vendorstore.domain.errors import (
    EditConflictError,
    InternalStoreError,
    RecordNotFoundError,
    RetryableStoreError,
    StoreError,
    StoreTimeoutError,
    StoreUnavailableError,
    UnsafeSortError,
    ValidationError,
)
from vendorstore.domain.filters import (
    DEFAULT_SORT_SAFELIST,
    Filters,
    SortColumn,
    SortDirection,
    SortToken,
    parse_list_query,
    validate_filters,
)
from vendorstore.domain.metadata import Metadata, calculate_metadata
from vendorstore.domain.models import Vendor, VendorPatch, merge_patch, validate_vendor
from vendorstore.domain.validation import Validator

__all__ = [
    # Models
    "Vendor",
    "VendorPatch",
    "merge_patch",
    "validate_vendor",
    # Listing
    "DEFAULT_SORT_SAFELIST",
    "Filters",
    "SortColumn",
    "SortDirection",
    "SortToken",
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
    "UnsafeSortError",
    "RetryableStoreError",
    "StoreTimeoutError",
    "StoreUnavailableError",
    "InternalStoreError",
]
