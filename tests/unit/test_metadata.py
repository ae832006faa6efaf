from __future__ import annotations

import pytest

from vendorstore.domain.metadata import Metadata, calculate_metadata


def test_zero_records_yield_all_zero_metadata() -> None:
    metadata = calculate_metadata(0, page=4, page_size=20)
    assert metadata == Metadata()
    assert metadata.model_dump() == {}


@pytest.mark.parametrize(
    ("total", "page_size", "last_page"),
    [(1, 20, 1), (20, 20, 1), (21, 20, 2), (100, 1, 100), (101, 100, 2)],
)
def test_last_page_rounds_up(total: int, page_size: int, last_page: int) -> None:
    metadata = calculate_metadata(total, page=1, page_size=page_size)
    assert metadata.first_page == 1
    assert metadata.last_page == last_page
    assert metadata.total_records == total


def test_current_page_is_reported_even_past_the_end() -> None:
    metadata = calculate_metadata(15, page=9, page_size=10)
    assert metadata == Metadata(
        current_page=9, page_size=10, first_page=1, last_page=2, total_records=15
    )
    assert metadata.model_dump() == {
        "current_page": 9,
        "page_size": 10,
        "first_page": 1,
        "last_page": 2,
        "total_records": 15,
    }
