"""
Listing parameters and the sort safelist.

The sort parameter is the only caller-controlled value that ends up in the
ORDER BY clause, so it is never passed through as a string: a validated sort
is decomposed into a SortToken built from enums, and the query builder only
accepts SortToken.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Mapping, Optional, Sequence, Tuple

from vendorstore.domain.errors import UnsafeSortError
from vendorstore.domain.validation import Validator, permitted_value

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20
DESCENDING_PREFIX = "-"


class SortColumn(str, Enum):
    ID = "id"
    TITLE = "title"
    YEAR = "year"
    RUNTIME = "runtime"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class SortToken:
    column: SortColumn
    direction: SortDirection


def _token_for(value: str) -> SortToken:
    if value.startswith(DESCENDING_PREFIX):
        return SortToken(SortColumn(value[len(DESCENDING_PREFIX):]), SortDirection.DESC)
    return SortToken(SortColumn(value), SortDirection.ASC)


DEFAULT_SORT_SAFELIST: Tuple[str, ...] = tuple(
    f"{prefix}{column.value}" for prefix in ("", DESCENDING_PREFIX) for column in SortColumn
)


@dataclass(frozen=True)
class Filters:
    """
    Paging and sorting request for a listing.

    Attributes
    ----------
    page : int
        1-based page number.
    page_size : int
        Records per page, 1..100.
    sort : str
        Requested sort, e.g. "title" or "-year".
    sort_safelist : tuple[str, ...]
        Server-declared permitted sort values. Every entry must name a
        SortColumn, optionally prefixed with "-".
    """

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort: str = "id"
    sort_safelist: Tuple[str, ...] = field(default=DEFAULT_SORT_SAFELIST)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sort_safelist", tuple(self.sort_safelist))
        for entry in self.sort_safelist:
            try:
                _token_for(entry)
            except ValueError as exc:
                raise ValueError(f"sort safelist entry {entry!r} is not a sortable column") from exc

    def sort_token(self) -> SortToken:
        """
        Decompose the sort value into column and direction.

        Raises UnsafeSortError unless the value is literally in the safelist.
        """
        if self.sort not in self.sort_safelist:
            raise UnsafeSortError(self.sort)
        return _token_for(self.sort)

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def validate_filters(v: Validator, filters: Filters) -> None:
    v.check(filters.page > 0, "page", "must be greater than zero")
    v.check(filters.page <= MAX_PAGE, "page", "must be a maximum of 10 million")
    v.check(filters.page_size > 0, "page_size", "must be greater than zero")
    v.check(filters.page_size <= MAX_PAGE_SIZE, "page_size", "must be a maximum of 100")

    v.check(permitted_value(filters.sort, *filters.sort_safelist), "sort", "invalid sort value")


def _read_string(params: Mapping[str, str], key: str, default: str) -> str:
    value = params.get(key)
    if not value:
        return default
    return value


def _read_csv(params: Mapping[str, str], key: str, default: List[str]) -> List[str]:
    value = params.get(key)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


def _read_int(params: Mapping[str, str], key: str, default: int, v: Validator) -> int:
    value = params.get(key)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        v.add_error(key, "must be an integer value")
        return default


def parse_list_query(
    params: Mapping[str, str],
    v: Validator,
    sort_safelist: Sequence[str] = DEFAULT_SORT_SAFELIST,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    default_sort: str = "id",
) -> Tuple[str, List[str], Filters]:
    """
    Read title, genres and filters from a flat string mapping.

    Malformed values are recorded on `v`; callers must check `v.valid()`
    before calling into the store.

    Returns
    -------
    tuple[str, list[str], Filters]
        Title query (may be empty), genre filter (may be empty), filters.
    """
    title = _read_string(params, "title", "")
    genres = _read_csv(params, "genres", [])
    filters = Filters(
        page=_read_int(params, "page", 1, v),
        page_size=_read_int(params, "page_size", default_page_size, v),
        sort=_read_string(params, "sort", default_sort),
        sort_safelist=tuple(sort_safelist),
    )
    validate_filters(v, filters)
    return title, genres, filters


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SORT_SAFELIST",
    "MAX_PAGE",
    "MAX_PAGE_SIZE",
    "Filters",
    "SortColumn",
    "SortDirection",
    "SortToken",
    "parse_list_query",
    "validate_filters",
]
