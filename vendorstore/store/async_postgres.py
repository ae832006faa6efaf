"""
PostgreSQL-backed vendor store for asyncio callers.

Same statements, deadlines and error taxonomy as VendorStore, over a
psycopg AsyncConnectionPool.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Sequence

from psycopg import AsyncCursor
from psycopg_pool import AsyncConnectionPool

from vendorstore.config import Settings, get_settings
from vendorstore.domain.errors import EditConflictError, RecordNotFoundError
from vendorstore.domain.filters import Filters
from vendorstore.domain.metadata import calculate_metadata
from vendorstore.domain.models import Vendor
from vendorstore.infrastructure.db_factory import apply_statement_timeout_async, get_async_pool
from vendorstore.store.abstract import Page, SetContainment, TextSearchable
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


class AsyncVendorStore:
    """Vendor CRUD and search against PostgreSQL using asyncio."""

    def __init__(
        self,
        pool: AsyncConnectionPool,
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
    async def from_settings(cls, settings: Optional[Settings] = None) -> "AsyncVendorStore":
        settings = settings or get_settings()
        return cls(
            await get_async_pool(settings),
            statement_timeout_ms=settings.db_statement_timeout_ms,
            pool_timeout_seconds=settings.db_pool_timeout_seconds,
        )

    @asynccontextmanager
    async def _cursor(self) -> AsyncGenerator[AsyncCursor, None]:
        async with self._pool.connection(timeout=self.pool_timeout_seconds) as conn:
            async with conn.transaction():
                async with conn.cursor() as cur:
                    await apply_statement_timeout_async(cur, self.statement_timeout_ms)
                    yield cur

    async def insert(self, vendor: Vendor) -> Vendor:
        with translate_errors("insert"):
            async with self._cursor() as cur:
                await cur.execute(INSERT_VENDOR, insert_params(vendor))
                vendor_id, created_at, version = await cur.fetchone()

        log.debug("Inserted vendor", extra={"vendor_id": vendor_id})
        return vendor.model_copy(
            update={"id": vendor_id, "created_at": created_at, "version": version}
        )

    async def get(self, vendor_id: int) -> Vendor:
        if vendor_id < 1:
            raise RecordNotFoundError()

        with translate_errors("get", vendor_id):
            async with self._cursor() as cur:
                await cur.execute(SELECT_VENDOR, (vendor_id,))
                row = await cur.fetchone()

        if row is None:
            raise RecordNotFoundError()
        return row_to_vendor(row)

    async def update(self, vendor: Vendor) -> Vendor:
        with translate_errors("update", vendor.id):
            async with self._cursor() as cur:
                await cur.execute(UPDATE_VENDOR, update_params(vendor))
                row = await cur.fetchone()

        if row is None:
            log.debug(
                "Edit conflict", extra={"vendor_id": vendor.id, "version": vendor.version}
            )
            raise EditConflictError()
        return vendor.model_copy(update={"version": row[0]})

    async def delete(self, vendor_id: int) -> None:
        if vendor_id < 1:
            raise RecordNotFoundError()

        with translate_errors("delete", vendor_id):
            async with self._cursor() as cur:
                await cur.execute(DELETE_VENDOR, (vendor_id,))
                deleted = cur.rowcount

        if deleted == 0:
            raise RecordNotFoundError()

    async def get_all(self, title: str, genres: Sequence[str], filters: Filters) -> Page:
        token = filters.sort_token()
        title_match = self._text_search.text_match("title", title)
        genre_match = self._containment.contains_all("genres", genres)
        query, params = build_list_query(
            title_match, genre_match, token, filters.limit(), filters.offset()
        )

        with translate_errors("get_all"):
            async with self._cursor() as cur:
                await cur.execute(query, params)
                vendors, total = rows_to_page(await cur.fetchall())
                if not vendors and filters.offset() > 0:
                    count_query, count_params = build_count_query(title_match, genre_match)
                    await cur.execute(count_query, count_params)
                    total = int((await cur.fetchone())[0])

        return Page(vendors, calculate_metadata(total, filters.page, filters.page_size))


__all__ = ["AsyncVendorStore"]
