"""
Error taxonomy shared by the vendor store and its callers.

Callers catch the specific subclasses to map outcomes to domain responses
(e.g. "retry with fresh data" for an edit conflict). Retryable failures are
grouped under RetryableStoreError; the store itself never retries.
"""

from __future__ import annotations

from typing import Dict, Optional


class StoreError(Exception):
    """Base class for every failure raised by the vendor store."""


class RecordNotFoundError(StoreError):
    """No record matches the identifier, or the identifier is below 1."""

    def __init__(self, message: str = "record not found") -> None:
        super().__init__(message)


class EditConflictError(StoreError):
    """
    A version-guarded update affected zero rows.

    Raised both when the record was concurrently updated to another version
    and when it was concurrently deleted; the two are indistinguishable from
    a single conditional write.
    """

    def __init__(self, message: str = "edit conflict") -> None:
        super().__init__(message)


class ValidationError(StoreError):
    """
    Field-tagged validation failure, raised before any store operation.

    Attributes
    ----------
    errors : dict[str, str]
        Mapping of field name to a human-readable message.
    """

    def __init__(self, errors: Optional[Dict[str, str]] = None) -> None:
        self.errors: Dict[str, str] = dict(errors or {})
        detail = ", ".join(f"{key}: {msg}" for key, msg in self.errors.items())
        super().__init__(f"validation failed ({detail})" if detail else "validation failed")


class UnsafeSortError(ValidationError):
    """A sort value outside the safelist reached the query builder."""

    def __init__(self, sort: str) -> None:
        super().__init__({"sort": "invalid sort value"})
        self.sort = sort


class RetryableStoreError(StoreError):
    """The backing store could not complete the operation in time."""


class StoreTimeoutError(RetryableStoreError):
    """The statement exceeded the per-operation deadline."""


class StoreUnavailableError(RetryableStoreError):
    """No connection could be obtained, or the connection was lost."""


class InternalStoreError(StoreError):
    """Any other unexpected backing-store failure."""


class InvalidRuntimeFormatError(ValueError):
    """A runtime string was not of the form '<n> mins'."""

    def __init__(self, value: object) -> None:
        super().__init__(f"invalid runtime format: {value!r}")


__all__ = [
    "StoreError",
    "RecordNotFoundError",
    "EditConflictError",
    "ValidationError",
    "UnsafeSortError",
    "RetryableStoreError",
    "StoreTimeoutError",
    "StoreUnavailableError",
    "InternalStoreError",
    "InvalidRuntimeFormatError",
]
