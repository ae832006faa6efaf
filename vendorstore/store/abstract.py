"""
Store interfaces and search capabilities for the vendor store.

Concrete stores (PostgreSQL sync/async, in-memory) implement ResourceStore or
AsyncResourceStore and return a Page for listings. Title matching and genre
containment are expressed through the TextSearchable and SetContainment
capabilities, so a store can be backed by any technology that can evaluate
those two predicates plus an atomic conditional write.
"""

from __future__ import annotations

import abc
import re
from typing import List, NamedTuple, Protocol, Sequence, TypeVar, runtime_checkable

from vendorstore.domain.filters import Filters
from vendorstore.domain.metadata import Metadata
from vendorstore.domain.models import Vendor

P_co = TypeVar("P_co", covariant=True)

_TOKEN_RE = re.compile(r"[^\W_]+")


def tokenize(text: str) -> List[str]:
    """Lower-cased alphanumeric tokens, as the "simple" text-search parser yields them."""
    return _TOKEN_RE.findall(text.lower())


class Page(NamedTuple):
    """One page of a listing plus metadata computed over all matches."""

    vendors: List[Vendor]
    metadata: Metadata


@runtime_checkable
class TextSearchable(Protocol[P_co]):
    """
    Builds a token-level relevance match.

    A query with no tokens (empty, blank or punctuation only) matches everything.
    """

    def text_match(self, field: str, query: str) -> P_co:
        ...


@runtime_checkable
class SetContainment(Protocol[P_co]):
    """Builds a superset predicate; an empty value set matches everything."""

    def contains_all(self, field: str, values: Sequence[str]) -> P_co:
        ...


@runtime_checkable
class ResourceStore(Protocol):
    """
    Common interface of the synchronous vendor stores.

    Every method either returns its result or raises a StoreError subclass.
    """

    def insert(self, vendor: Vendor) -> Vendor:
        """Persist a new vendor; returns it with id, created_at and version 1."""
        ...

    def get(self, vendor_id: int) -> Vendor:
        """Fetch one vendor or raise RecordNotFoundError."""
        ...

    def update(self, vendor: Vendor) -> Vendor:
        """Replace all fields if the stored version matches; else EditConflictError."""
        ...

    def delete(self, vendor_id: int) -> None:
        """Remove one vendor or raise RecordNotFoundError."""
        ...

    def get_all(self, title: str, genres: Sequence[str], filters: Filters) -> Page:
        """Search, sort and paginate vendors."""
        ...


@runtime_checkable
class AsyncResourceStore(Protocol):
    """Asyncio counterpart of ResourceStore with identical semantics."""

    async def insert(self, vendor: Vendor) -> Vendor:
        ...

    async def get(self, vendor_id: int) -> Vendor:
        ...

    async def update(self, vendor: Vendor) -> Vendor:
        ...

    async def delete(self, vendor_id: int) -> None:
        ...

    async def get_all(self, title: str, genres: Sequence[str], filters: Filters) -> Page:
        ...


class AbstractResourceStore(abc.ABC):
    """
    Optional ABC helper for class-based synchronous stores.
    """

    @abc.abstractmethod
    def insert(self, vendor: Vendor) -> Vendor:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def get(self, vendor_id: int) -> Vendor:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def update(self, vendor: Vendor) -> Vendor:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, vendor_id: int) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def get_all(
        self, title: str, genres: Sequence[str], filters: Filters
    ) -> Page:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = [
    "AbstractResourceStore",
    "AsyncResourceStore",
    "Page",
    "ResourceStore",
    "SetContainment",
    "TextSearchable",
    "tokenize",
]
