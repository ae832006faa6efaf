from __future__ import annotations

import pytest
from psycopg import sql

from vendorstore.domain.filters import Filters, SortColumn, SortDirection, SortToken
from vendorstore.store.abstract import SetContainment, TextSearchable
from vendorstore.store.queries import (
    MATCH_ALL,
    ArrayContainment,
    TsVectorTextSearch,
    build_count_query,
    build_list_query,
    order_by,
    row_to_vendor,
    rows_to_page,
)


def _render(composable: sql.Composable) -> str:
    return " ".join(composable.as_string(None).split())


def test_postgres_predicates_satisfy_capability_protocols() -> None:
    assert isinstance(TsVectorTextSearch(), TextSearchable)
    assert isinstance(ArrayContainment(), SetContainment)


def test_empty_title_query_matches_everything() -> None:
    assert TsVectorTextSearch().text_match("title", "") is MATCH_ALL
    assert TsVectorTextSearch().text_match("title", "   ") is MATCH_ALL


def test_title_query_without_tokens_matches_everything() -> None:
    assert TsVectorTextSearch().text_match("title", "!!!") is MATCH_ALL
    assert TsVectorTextSearch().text_match("title", "-- _ ?") is MATCH_ALL


def test_title_query_is_bound_not_inlined() -> None:
    predicate = TsVectorTextSearch().text_match("title", "it's a trap")
    assert _render(predicate.clause) == (
        "to_tsvector('simple', \"title\") @@ plainto_tsquery('simple', %s)"
    )
    assert predicate.params == ("it's a trap",)


def test_empty_genre_filter_matches_everything() -> None:
    assert ArrayContainment().contains_all("genres", []) is MATCH_ALL


def test_genre_filter_uses_containment_operator() -> None:
    predicate = ArrayContainment().contains_all("genres", ("Drama", "Romance"))
    assert _render(predicate.clause) == '"genres" @> %s::text[]'
    assert predicate.params == (["Drama", "Romance"],)


def test_order_by_renders_identifier_and_direction_with_id_tiebreak() -> None:
    token = SortToken(SortColumn.YEAR, SortDirection.DESC)
    assert _render(order_by(token)) == 'ORDER BY "year" DESC, id ASC'


def test_order_by_rejects_raw_strings() -> None:
    with pytest.raises(TypeError, match="SortToken"):
        order_by("year DESC; DROP TABLE vendors")  # type: ignore[arg-type]


def test_list_query_binds_predicates_then_paging() -> None:
    filters = Filters(page=3, page_size=10, sort="-title")
    title = TsVectorTextSearch().text_match("title", "casablanca")
    genres = ArrayContainment().contains_all("genres", ["Drama"])

    query, params = build_list_query(
        title, genres, filters.sort_token(), filters.limit(), filters.offset()
    )
    rendered = _render(query)

    assert rendered.startswith("SELECT count(*) OVER(), id, created_at, title")
    assert "WHERE (to_tsvector('simple', \"title\") @@ plainto_tsquery('simple', %s))" in rendered
    assert 'AND ("genres" @> %s::text[])' in rendered
    assert rendered.endswith('ORDER BY "title" DESC, id ASC LIMIT %s OFFSET %s')
    assert params == ("casablanca", ["Drama"], 10, 20)


def test_list_query_without_filters_has_only_paging_params() -> None:
    query, params = build_list_query(
        MATCH_ALL, MATCH_ALL, Filters().sort_token(), limit=20, offset=0
    )
    assert "WHERE (TRUE) AND (TRUE)" in _render(query)
    assert params == (20, 0)


def test_count_query_reuses_predicate_params() -> None:
    genres = ArrayContainment().contains_all("genres", ["Drama"])
    query, params = build_count_query(MATCH_ALL, genres)
    assert _render(query) == 'SELECT count(*) FROM vendors WHERE (TRUE) AND ("genres" @> %s::text[])'
    assert params == (["Drama"],)


def test_rows_to_page_reads_window_count() -> None:
    rows = [
        (42, 1, None, "A", 2000, 90, ["Drama"], 1),
        (42, 2, None, "B", 2001, 91, ["Comedy"], 3),
    ]
    vendors, total = rows_to_page(rows)
    assert total == 42
    assert [v.id for v in vendors] == [1, 2]
    assert vendors[1].version == 3
    assert rows_to_page([]) == ([], 0)


def test_row_to_vendor_tolerates_null_genres() -> None:
    vendor = row_to_vendor((5, None, "A", 2000, 90, None, 1))
    assert vendor.genres == []
