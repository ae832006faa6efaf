"""
In-process vendor store.

Holds vendors in a dict guarded by a lock, which plays the part of the
backing store's atomic write primitive. Useful as a test double for code that
depends on ResourceStore, and for embedded use where no PostgreSQL is
available. Title and genre matching mirror the PostgreSQL semantics of the
"simple" text-search configuration and the `@>` operator.
"""

from __future__ import annotations

import itertools
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Sequence

from vendorstore.domain.errors import EditConflictError, RecordNotFoundError
from vendorstore.domain.filters import Filters, SortDirection
from vendorstore.domain.metadata import calculate_metadata
from vendorstore.domain.models import Vendor
from vendorstore.store.abstract import (
    AbstractResourceStore,
    Page,
    SetContainment,
    TextSearchable,
    tokenize,
)

VendorPredicate = Callable[[Vendor], bool]


def _detached(vendor: Vendor) -> Vendor:
    """Copy whose genres list is not shared with the stored row."""
    return vendor.model_copy(update={"genres": list(vendor.genres)})


def _match_all(vendor: Vendor) -> bool:
    return True


class TokenTextSearch:
    """Every query token must appear among the field's tokens."""

    def text_match(self, field: str, query: str) -> VendorPredicate:
        wanted = set(tokenize(query))
        if not wanted:
            return _match_all
        return lambda vendor: wanted.issubset(tokenize(getattr(vendor, field)))


class SubsetContainment:
    """The field's values must be a superset of the requested values."""

    def contains_all(self, field: str, values: Sequence[str]) -> VendorPredicate:
        wanted = set(values)
        if not wanted:
            return _match_all
        return lambda vendor: wanted.issubset(getattr(vendor, field))


class MemoryVendorStore(AbstractResourceStore):
    """Vendor store kept in process memory."""

    def __init__(
        self,
        text_search: Optional[TextSearchable[VendorPredicate]] = None,
        containment: Optional[SetContainment[VendorPredicate]] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._rows: Dict[int, Vendor] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._text_search = text_search or TokenTextSearch()
        self._containment = containment or SubsetContainment()
        self._clock = clock

    def insert(self, vendor: Vendor) -> Vendor:
        with self._lock:
            stored = vendor.model_copy(
                update={
                    "id": next(self._ids),
                    "created_at": self._clock().replace(microsecond=0),
                    "version": 1,
                    "genres": list(vendor.genres),
                }
            )
            self._rows[stored.id] = stored
        return _detached(stored)

    def get(self, vendor_id: int) -> Vendor:
        if vendor_id < 1:
            raise RecordNotFoundError()
        with self._lock:
            stored = self._rows.get(vendor_id)
        if stored is None:
            raise RecordNotFoundError()
        return _detached(stored)

    def update(self, vendor: Vendor) -> Vendor:
        with self._lock:
            current = self._rows.get(vendor.id)
            if current is None or current.version != vendor.version:
                raise EditConflictError()
            stored = current.model_copy(
                update={
                    "title": vendor.title,
                    "year": vendor.year,
                    "runtime": vendor.runtime,
                    "genres": list(vendor.genres),
                    "version": current.version + 1,
                }
            )
            self._rows[vendor.id] = stored
        return vendor.model_copy(update={"version": stored.version})

    def delete(self, vendor_id: int) -> None:
        if vendor_id < 1:
            raise RecordNotFoundError()
        with self._lock:
            if self._rows.pop(vendor_id, None) is None:
                raise RecordNotFoundError()

    def get_all(self, title: str, genres: Sequence[str], filters: Filters) -> Page:
        token = filters.sort_token()
        title_match = self._text_search.text_match("title", title)
        genre_match = self._containment.contains_all("genres", genres)

        with self._lock:
            snapshot = list(self._rows.values())

        matched = sorted(
            (v for v in snapshot if title_match(v) and genre_match(v)),
            key=lambda v: v.id,
        )
        # Stable sort keeps the id ordering among equal keys in both directions.
        matched.sort(
            key=lambda v: getattr(v, token.column.value),
            reverse=token.direction is SortDirection.DESC,
        )

        start = filters.offset()
        page = [_detached(v) for v in matched[start : start + filters.limit()]]
        return Page(page, calculate_metadata(len(matched), filters.page, filters.page_size))


__all__ = ["MemoryVendorStore", "SubsetContainment", "TokenTextSearch", "tokenize"]
