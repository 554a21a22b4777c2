import pytest

from core.validator import Validator
from recipes.filters import SORT_SAFELIST, Filters, calculate_metadata, resolve_sort, validate_filters


@pytest.mark.parametrize(
    "total, page_size, last_page",
    [(1, 10, 1), (10, 10, 1), (11, 10, 2), (99, 20, 5), (100, 100, 1), (101, 100, 2)],
)
def test_last_page_is_ceiling(total, page_size, last_page):
    metadata = calculate_metadata(total, 1, page_size)
    assert metadata.last_page == last_page
    assert metadata.first_page == 1
    assert metadata.total_records == total
    assert metadata.page_size == page_size


def test_metadata_is_zero_without_records():
    metadata = calculate_metadata(0, 3, 20)
    assert metadata.model_dump() == {
        "current_page": 0,
        "page_size": 0,
        "first_page": 0,
        "last_page": 0,
        "total_records": 0,
    }


def test_limit_and_offset():
    filters = Filters(page=3, page_size=25)
    assert filters.limit() == 25
    assert filters.offset() == 50


def test_validate_filters_accepts_defaults():
    v = Validator()
    validate_filters(v, Filters())
    assert v.valid()


def test_validate_filters_reports_each_field():
    v = Validator()
    validate_filters(v, Filters(page=0, page_size=101, sort="name"))
    assert v.errors == {
        "page": "must be greater than zero",
        "page_size": "must be a maximum of 100",
        "sort": "invalid sort value",
    }


def test_safelist_covers_both_directions():
    assert set(SORT_SAFELIST) == {
        "id", "title", "difficulty", "cuisinename",
        "-id", "-title", "-difficulty", "-cuisinename",
    }


@pytest.mark.parametrize(
    "sort, expected",
    [
        ("id", ("r.recipe_id ASC, r.recipe_id ASC", "ASC")),
        ("-title", ("r.title DESC, r.recipe_id ASC", "DESC")),
        ("cuisinename", ("c.cuisine_name ASC, r.recipe_id ASC", "ASC")),
        ("-difficulty", ("r.difficulty DESC, r.recipe_id ASC", "DESC")),
    ],
)
def test_resolve_sort_appends_id_tie_break(sort, expected):
    assert resolve_sort(Filters(sort=sort)) == expected


def test_sort_column_refuses_unlisted_key():
    with pytest.raises(ValueError):
        Filters(sort="title; DROP TABLE recipes").sort_column()
