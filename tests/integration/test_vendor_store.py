"""
Integration tests for the PostgreSQL vendor stores.

These tests run against a real PostgreSQL instance and verify that:
1. CRUD operations assign and guard server-owned fields
2. Concurrent version-guarded updates have exactly one winner
3. Full-text and containment search, sorting and paging agree with the in-memory store
4. Statement deadlines surface as StoreTimeoutError

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import os
import threading

import pytest
from psycopg import sql
from psycopg_pool import AsyncConnectionPool, ConnectionPool

from vendorstore.domain.errors import (
    EditConflictError,
    RecordNotFoundError,
    StoreTimeoutError,
    UnsafeSortError,
)
from vendorstore.domain.filters import Filters
from vendorstore.domain.metadata import Metadata
from vendorstore.domain.models import Vendor, VendorPatch, merge_patch
from vendorstore.store.async_postgres import AsyncVendorStore
from vendorstore.store.postgres import VendorStore
from vendorstore.store.queries import SqlPredicate

RACE_WRITERS = 2

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
)

CATALOGUE = [
    Vendor(title="Casablanca", year=1942, runtime=102, genres=["Drama", "Romance", "War"]),
    Vendor(title="The Godfather", year=1972, runtime=175, genres=["Crime", "Drama"]),
    Vendor(title="Alien", year=1979, runtime=117, genres=["Horror", "Sci-Fi"]),
    Vendor(title="Aliens", year=1986, runtime=137, genres=["Action", "Sci-Fi"]),
    Vendor(title="Roman Holiday", year=1953, runtime=118, genres=["Comedy", "Romance"]),
]


@pytest.fixture
def store(db_pool: ConnectionPool, clean_vendors_table) -> VendorStore:
    return VendorStore(db_pool, statement_timeout_ms=3_000, pool_timeout_seconds=3.0)


@pytest.fixture
def catalogue(store: VendorStore) -> VendorStore:
    for vendor in CATALOGUE:
        store.insert(vendor)
    return store


class TestCrud:
    def test_insert_then_get(self, store: VendorStore, casablanca: Vendor):
        created = store.insert(casablanca)
        fetched = store.get(created.id)

        assert created.id > 0
        assert created.version == 1
        assert created.created_at is not None
        assert fetched == created

    def test_casablanca_scenario(self, store: VendorStore, casablanca: Vendor):
        created = store.insert(casablanca)
        fetched = store.get(created.id)
        assert fetched.version == 1

        edited = merge_patch(fetched, VendorPatch(title="Casablanca (1942)"))
        updated = store.update(edited)
        assert updated.version == 2

        stored = store.get(created.id)
        assert stored.title == "Casablanca (1942)"
        assert (stored.year, stored.runtime, stored.genres, stored.created_at) == (
            1942,
            102,
            ["Drama", "Romance"],
            created.created_at,
        )

        with pytest.raises(EditConflictError):
            store.update(edited)

        store.delete(created.id)
        with pytest.raises(RecordNotFoundError):
            store.get(created.id)

    def test_update_after_delete_is_edit_conflict(self, store: VendorStore, casablanca: Vendor):
        created = store.insert(casablanca)
        store.delete(created.id)
        with pytest.raises(EditConflictError):
            store.update(created)

    def test_delete_missing_is_not_found(self, store: VendorStore):
        with pytest.raises(RecordNotFoundError):
            store.delete(999_999)

    def test_concurrent_updates_have_one_winner(self, store: VendorStore, casablanca: Vendor):
        created = store.insert(casablanca)
        barrier = threading.Barrier(RACE_WRITERS)
        outcomes: list[str] = []
        lock = threading.Lock()

        def writer(n: int) -> None:
            barrier.wait()
            try:
                store.update(created.model_copy(update={"title": f"Casablanca {n}"}))
                result = "ok"
            except EditConflictError:
                result = "conflict"
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(RACE_WRITERS)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(outcomes) == ["conflict", "ok"]
        assert store.get(created.id).version == 2


class TestSearch:
    def test_title_search_is_token_level(self, catalogue: VendorStore):
        vendors, _ = catalogue.get_all("alien", [], Filters())
        assert [v.title for v in vendors] == ["Alien"]

        vendors, _ = catalogue.get_all("holiday ROMAN", [], Filters())
        assert [v.title for v in vendors] == ["Roman Holiday"]

    def test_title_query_without_tokens_matches_everything(self, catalogue: VendorStore):
        vendors, metadata = catalogue.get_all("!!!", [], Filters())
        assert len(vendors) == len(CATALOGUE)
        assert metadata.total_records == len(CATALOGUE)

    def test_genre_containment(self, catalogue: VendorStore):
        vendors, _ = catalogue.get_all("", ["Drama"], Filters())
        assert {v.title for v in vendors} == {"Casablanca", "The Godfather"}

        vendors, metadata = catalogue.get_all("", [], Filters())
        assert metadata.total_records == len(CATALOGUE)

    def test_sort_and_pagination(self, catalogue: VendorStore):
        vendors, metadata = catalogue.get_all("", [], Filters(page=2, page_size=2, sort="-year"))
        assert [v.title for v in vendors] == ["The Godfather", "Roman Holiday"]
        assert metadata == Metadata(
            current_page=2, page_size=2, first_page=1, last_page=3, total_records=5
        )

    def test_page_past_the_end(self, catalogue: VendorStore):
        vendors, metadata = catalogue.get_all("", [], Filters(page=9, page_size=2))
        assert vendors == []
        assert (metadata.total_records, metadata.last_page) == (5, 3)

    def test_no_matches(self, catalogue: VendorStore):
        vendors, metadata = catalogue.get_all("zardoz", [], Filters())
        assert vendors == []
        assert metadata == Metadata()

    def test_unsafe_sort(self, catalogue: VendorStore):
        with pytest.raises(UnsafeSortError):
            catalogue.get_all("", [], Filters(sort="year desc"))


class _SleepingTitleSearch:
    """Title predicate that stalls the statement past its deadline."""

    def text_match(self, field: str, query: str) -> SqlPredicate:
        del field, query
        return SqlPredicate(sql.SQL("(SELECT true FROM pg_sleep(%s))"), (1.0,))


def test_statement_deadline_raises_timeout(db_pool: ConnectionPool, clean_vendors_table):
    store = VendorStore(db_pool, statement_timeout_ms=100, text_search=_SleepingTitleSearch())
    store.insert(Vendor(title="Up", year=2009, runtime=96, genres=["Animation"]))
    with pytest.raises(StoreTimeoutError):
        store.get_all("up", [], Filters())


@pytest.mark.asyncio
async def test_async_store_round_trip(test_dsn: str, clean_vendors_table, casablanca: Vendor):
    async with AsyncConnectionPool(test_dsn, min_size=1, max_size=2, open=False) as pool:
        store = AsyncVendorStore(pool)
        created = await store.insert(casablanca)
        updated = await store.update(created.model_copy(update={"runtime": 103}))
        assert updated.version == 2

        with pytest.raises(EditConflictError):
            await store.update(created)

        vendors, metadata = await store.get_all("casablanca", ["Romance"], Filters())
        assert [v.id for v in vendors] == [created.id]
        assert metadata.total_records == 1

        await store.delete(created.id)
        with pytest.raises(RecordNotFoundError):
            await store.get(created.id)
