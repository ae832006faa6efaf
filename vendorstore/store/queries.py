"""
PostgreSQL statements, search predicates and error translation shared by the
sync and async PostgreSQL stores.

Caller-supplied values only ever travel as bound parameters. The one
structural part of a listing that varies per request, the ORDER BY clause, is
rendered from a SortToken (enum column + enum direction), never from a string.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator, List, Optional, Sequence, Tuple

import psycopg
from psycopg import errors as pg_errors
from psycopg import sql
from psycopg_pool import PoolTimeout

from vendorstore.domain.errors import (
    InternalStoreError,
    StoreTimeoutError,
    StoreUnavailableError,
)
from vendorstore.domain.filters import SortToken
from vendorstore.domain.models import Vendor
from vendorstore.store.abstract import tokenize
from vendorstore.utils.logging import get_logger

log = get_logger(__name__)

VENDOR_COLUMNS = "id, created_at, title, year, runtime, genres, version"

INSERT_VENDOR = """
    INSERT INTO vendors (title, year, runtime, genres)
    VALUES (%s, %s, %s, %s)
    RETURNING id, created_at, version"""

SELECT_VENDOR = f"""
    SELECT {VENDOR_COLUMNS}
    FROM vendors
    WHERE id = %s"""

UPDATE_VENDOR = """
    UPDATE vendors
    SET title = %s, year = %s, runtime = %s, genres = %s, version = version + 1
    WHERE id = %s AND version = %s
    RETURNING version"""

DELETE_VENDOR = """
    DELETE FROM vendors
    WHERE id = %s"""


@dataclass(frozen=True)
class SqlPredicate:
    """A WHERE-clause fragment and the parameters bound to its placeholders."""

    clause: sql.Composable
    params: Tuple[Any, ...] = field(default_factory=tuple)


MATCH_ALL = SqlPredicate(sql.SQL("TRUE"))


class TsVectorTextSearch:
    """
    Full-text match using `to_tsvector`/`plainto_tsquery`.

    With the "simple" configuration every query token must occur as a
    lower-cased token of the column; no stemming or stop words. A query
    without tokens would make `plainto_tsquery` match nothing, so it matches
    everything instead, as in the in-memory store.
    """

    def __init__(self, config: str = "simple") -> None:
        self.config = config

    def text_match(self, field: str, query: str) -> SqlPredicate:
        if not tokenize(query):
            return MATCH_ALL
        clause = sql.SQL("to_tsvector({config}, {field}) @@ plainto_tsquery({config}, %s)").format(
            config=sql.Literal(self.config),
            field=sql.Identifier(field),
        )
        return SqlPredicate(clause, (query,))


class ArrayContainment:
    """Array superset match using the `@>` operator (GIN-indexable)."""

    def contains_all(self, field: str, values: Sequence[str]) -> SqlPredicate:
        if not values:
            return MATCH_ALL
        clause = sql.SQL("{field} @> %s::text[]").format(field=sql.Identifier(field))
        return SqlPredicate(clause, (list(values),))


def order_by(token: SortToken) -> sql.Composed:
    """Render `ORDER BY <column> <direction>, id ASC` from a validated token."""
    if not isinstance(token, SortToken):
        raise TypeError(f"order_by() requires a SortToken, got {type(token).__name__}")
    return sql.SQL("ORDER BY {column} {direction}, id ASC").format(
        column=sql.Identifier(token.column.value),
        direction=sql.SQL(token.direction.value),
    )


def build_list_query(
    title: SqlPredicate,
    genres: SqlPredicate,
    token: SortToken,
    limit: int,
    offset: int,
) -> Tuple[sql.Composed, Tuple[Any, ...]]:
    """
    Build the paginated listing statement.

    Each row carries the total match count as its first column.
    """
    query = sql.SQL(
        """
    SELECT count(*) OVER(), {columns}
    FROM vendors
    WHERE ({title})
    AND ({genres})
    {order_by}
    LIMIT %s OFFSET %s"""
    ).format(
        columns=sql.SQL(VENDOR_COLUMNS),
        title=title.clause,
        genres=genres.clause,
        order_by=order_by(token),
    )
    return query, (*title.params, *genres.params, limit, offset)


def build_count_query(
    title: SqlPredicate, genres: SqlPredicate
) -> Tuple[sql.Composed, Tuple[Any, ...]]:
    """Build a statement counting every vendor matching both predicates."""
    query = sql.SQL(
        """
    SELECT count(*)
    FROM vendors
    WHERE ({title})
    AND ({genres})"""
    ).format(title=title.clause, genres=genres.clause)
    return query, (*title.params, *genres.params)


def insert_params(vendor: Vendor) -> Tuple[Any, ...]:
    return (vendor.title, vendor.year, vendor.runtime, list(vendor.genres))


def update_params(vendor: Vendor) -> Tuple[Any, ...]:
    return (
        vendor.title,
        vendor.year,
        vendor.runtime,
        list(vendor.genres),
        vendor.id,
        vendor.version,
    )


def row_to_vendor(row: Sequence[Any]) -> Vendor:
    """Map a row selected with VENDOR_COLUMNS to a Vendor."""
    vendor_id, created_at, title, year, runtime, genres, version = row
    return Vendor(
        id=vendor_id,
        created_at=created_at,
        title=title,
        year=year,
        runtime=runtime,
        genres=list(genres or []),
        version=version,
    )


def rows_to_page(rows: List[Sequence[Any]]) -> Tuple[List[Vendor], int]:
    """Split windowed listing rows into vendors and the total match count."""
    total = int(rows[0][0]) if rows else 0
    return [row_to_vendor(row[1:]) for row in rows], total


@contextmanager
def translate_errors(operation: str, vendor_id: Optional[int] = None) -> Generator[None, None, None]:
    """
    Re-raise driver and pool failures as the store's error taxonomy.

    Domain errors raised inside the block pass through untouched.
    """
    extra = {"operation": operation, "vendor_id": vendor_id}
    try:
        yield
    except pg_errors.QueryCanceled as exc:
        log.error(f"[STORE TIMEOUT] {operation}", extra=extra)
        raise StoreTimeoutError(f"{operation} exceeded its deadline") from exc
    except PoolTimeout as exc:
        log.error(f"[STORE UNAVAILABLE] {operation}: no connection available", extra=extra)
        raise StoreUnavailableError(f"{operation}: no connection available") from exc
    except psycopg.OperationalError as exc:
        log.error(f"[STORE UNAVAILABLE] {operation}: {exc}", extra=extra)
        raise StoreUnavailableError(f"{operation}: backing store unavailable") from exc
    except psycopg.Error as exc:
        log.exception(f"[STORE FAILED] {operation}", extra=extra)
        raise InternalStoreError(f"{operation} failed") from exc


__all__ = [
    "ArrayContainment",
    "DELETE_VENDOR",
    "INSERT_VENDOR",
    "MATCH_ALL",
    "SELECT_VENDOR",
    "SqlPredicate",
    "TsVectorTextSearch",
    "UPDATE_VENDOR",
    "build_count_query",
    "build_list_query",
    "insert_params",
    "order_by",
    "row_to_vendor",
    "rows_to_page",
    "translate_errors",
    "update_params",
]
