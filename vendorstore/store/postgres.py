"""
PostgreSQL-backed vendor store (synchronous, pooled).

Each operation borrows one connection from the injected pool, runs a single
transaction bounded by `SET LOCAL statement_timeout`, and returns it. The
store keeps no state besides the pool handle; the compare-and-set in
`update` is one conditional UPDATE, so concurrent writers are arbitrated by
PostgreSQL's row locking rather than by anything in-process.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional, Sequence

from psycopg import Cursor
from psycopg_pool import ConnectionPool

from vendorstore.config import Settings, get_settings
from vendorstore.domain.errors import EditConflictError, RecordNotFoundError
from vendorstore.domain.filters import Filters
from vendorstore.domain.metadata import calculate_metadata
from vendorstore.domain.models import Vendor
from vendorstore.infrastructure.db_factory import apply_statement_timeout, get_sync_pool
from vendorstore.store.abstract import AbstractResourceStore, Page, SetContainment, TextSearchable
from vendorstore.store.queries import (
    DELETE_VENDOR,
    INSERT_VENDOR,
    SELECT_VENDOR,
    UPDATE_VENDOR,
    ArrayContainment,
    SqlPredicate,
    TsVectorTextSearch,
    build_count_query,
    build_list_query,
    insert_params,
    row_to_vendor,
    rows_to_page,
    translate_errors,
    update_params,
)
from vendorstore.utils.logging import get_logger

log = get_logger(__name__)


class VendorStore(AbstractResourceStore):
    """
    Vendor CRUD and search against PostgreSQL.

    Parameters
    ----------
    pool : ConnectionPool
        Open psycopg pool; the store never closes it.
    statement_timeout_ms : int
        Per-operation statement deadline. Non-positive disables it.
    pool_timeout_seconds : float
        Maximum wait for a pooled connection.
    text_search, containment
        Predicate builders for title and genre filtering.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        statement_timeout_ms: int = 3_000,
        pool_timeout_seconds: float = 3.0,
        text_search: Optional[TextSearchable[SqlPredicate]] = None,
        containment: Optional[SetContainment[SqlPredicate]] = None,
    ) -> None:
        self._pool = pool
        self.statement_timeout_ms = statement_timeout_ms
        self.pool_timeout_seconds = pool_timeout_seconds
        self._text_search = text_search or TsVectorTextSearch()
        self._containment = containment or ArrayContainment()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "VendorStore":
        """Build a store on the shared pool managed by PoolManager."""
        settings = settings or get_settings()
        return cls(
            get_sync_pool(settings),
            statement_timeout_ms=settings.db_statement_timeout_ms,
            pool_timeout_seconds=settings.db_pool_timeout_seconds,
        )

    @contextmanager
    def _cursor(self) -> Generator[Cursor, None, None]:
        with self._pool.connection(timeout=self.pool_timeout_seconds) as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    apply_statement_timeout(cur, self.statement_timeout_ms)
                    yield cur

    def insert(self, vendor: Vendor) -> Vendor:
        with translate_errors("insert"):
            with self._cursor() as cur:
                cur.execute(INSERT_VENDOR, insert_params(vendor))
                vendor_id, created_at, version = cur.fetchone()

        log.debug("Inserted vendor", extra={"vendor_id": vendor_id})
        return vendor.model_copy(
            update={"id": vendor_id, "created_at": created_at, "version": version}
        )

    def get(self, vendor_id: int) -> Vendor:
        if vendor_id < 1:
            raise RecordNotFoundError()

        with translate_errors("get", vendor_id):
            with self._cursor() as cur:
                cur.execute(SELECT_VENDOR, (vendor_id,))
                row = cur.fetchone()

        if row is None:
            raise RecordNotFoundError()
        return row_to_vendor(row)

    def update(self, vendor: Vendor) -> Vendor:
        """
        Version-guarded full replace.

        Raises EditConflictError when no row has both the vendor's id and the
        version it was read at, whether it was updated or deleted meanwhile.
        """
        with translate_errors("update", vendor.id):
            with self._cursor() as cur:
                cur.execute(UPDATE_VENDOR, update_params(vendor))
                row = cur.fetchone()

        if row is None:
            log.debug(
                "Edit conflict", extra={"vendor_id": vendor.id, "version": vendor.version}
            )
            raise EditConflictError()
        return vendor.model_copy(update={"version": row[0]})

    def delete(self, vendor_id: int) -> None:
        if vendor_id < 1:
            raise RecordNotFoundError()

        with translate_errors("delete", vendor_id):
            with self._cursor() as cur:
                cur.execute(DELETE_VENDOR, (vendor_id,))
                deleted = cur.rowcount

        if deleted == 0:
            raise RecordNotFoundError()

    def get_all(self, title: str, genres: Sequence[str], filters: Filters) -> Page:
        token = filters.sort_token()
        title_match = self._text_search.text_match("title", title)
        genre_match = self._containment.contains_all("genres", genres)
        query, params = build_list_query(
            title_match, genre_match, token, filters.limit(), filters.offset()
        )

        with translate_errors("get_all"):
            with self._cursor() as cur:
                cur.execute(query, params)
                vendors, total = rows_to_page(cur.fetchall())
                if not vendors and filters.offset() > 0:
                    # Past the last page: the window count is unavailable.
                    count_query, count_params = build_count_query(title_match, genre_match)
                    cur.execute(count_query, count_params)
                    total = int(cur.fetchone()[0])

        return Page(vendors, calculate_metadata(total, filters.page, filters.page_size))


__all__ = ["VendorStore"]
