"""
Domain models for the vendor store.

Defines the Vendor record aligned with the `vendors` DDL in
`vendorstore.infrastructure.schema`, the Runtime type with
its "<n> mins" JSON form, and the VendorPatch used for partial updates.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer

from vendorstore.domain.errors import InvalidRuntimeFormatError
from vendorstore.domain.validation import Validator, unique

MIN_YEAR = 1888
MAX_GENRES = 5

_RUNTIME_RE = re.compile(r"^(\d+) mins$")


def parse_runtime(value: Any) -> Any:
    """
    Accept either a bare integer or the "<n> mins" string form.
    """
    if isinstance(value, str):
        match = _RUNTIME_RE.match(value.strip())
        if match is None:
            raise InvalidRuntimeFormatError(value)
        return int(match.group(1))
    return value


def format_runtime(value: int) -> str:
    return f"{value} mins"


Runtime = Annotated[
    int,
    BeforeValidator(parse_runtime),
    PlainSerializer(format_runtime, return_type=str, when_used="json"),
]


class Vendor(BaseModel):
    """
    Representation of a single row in the `vendors` table.

    `id`, `created_at` and `version` are owned by the store: an unsaved
    vendor carries `id == 0`, `created_at is None` and `version == 0`.
    """

    id: int = Field(0, description="Primary key (BIGSERIAL), 0 until persisted.")
    created_at: Optional[datetime] = Field(
        None, exclude=True, description="Row creation timestamp, set by the store."
    )
    title: str = Field(..., description="Display title.")
    year: int = Field(..., description="Release year.")
    runtime: Runtime = Field(..., description="Duration in minutes.")
    genres: List[str] = Field(default_factory=list, description="Genre labels.")
    version: int = Field(0, description="Optimistic concurrency token.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }


class VendorPatch(BaseModel):
    """
    Partial update input: only fields that are not None are applied.
    """

    title: Optional[str] = None
    year: Optional[int] = None
    runtime: Optional[Runtime] = None
    genres: Optional[List[str]] = None

    model_config = {"frozen": True}

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


def merge_patch(vendor: Vendor, patch: VendorPatch) -> Vendor:
    """
    Return a copy of `vendor` with the patch's provided fields replaced.

    Store-owned fields (`id`, `created_at`, `version`) are carried over as-is,
    so the merged vendor still presents the version that was read.
    """
    changes = patch.model_dump(exclude_none=True)
    if "genres" in changes:
        changes["genres"] = list(changes["genres"])
    return vendor.model_copy(update=changes)


def validate_vendor(v: Validator, vendor: Vendor, now: Optional[datetime] = None) -> None:
    """
    Record field-tagged errors for a candidate vendor on `v`.
    """
    current_year = (now or datetime.now()).year

    v.check(vendor.title.strip() != "", "title", "must be provided")

    v.check(vendor.year >= MIN_YEAR, "year", f"must be greater than or equal to {MIN_YEAR}")
    v.check(vendor.year <= current_year, "year", "must not be in the future")

    v.check(vendor.runtime != 0, "runtime", "must be provided")
    v.check(vendor.runtime > 0, "runtime", "must be a positive integer")

    v.check(len(vendor.genres) >= 1, "genres", "must contain at least 1 genre")
    v.check(len(vendor.genres) <= MAX_GENRES, "genres", "must not contain more than 5 genres")
    v.check(unique(vendor.genres), "genres", "must not contain duplicate values")


__all__ = [
    "MIN_YEAR",
    "MAX_GENRES",
    "Runtime",
    "Vendor",
    "VendorPatch",
    "format_runtime",
    "merge_patch",
    "parse_runtime",
    "validate_vendor",
]
