"""
Listing filters: paging, sort resolution and pagination metadata.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from core.validator import Validator, permitted_value

from .schemas import Metadata

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100

# Sort key -> SQL expression. Keys are matched against SORT_SAFELIST before
# they get here, so nothing caller-supplied is interpolated into SQL.
# difficulty is a Postgres enum, so ordering by the column uses its ordinal:
# "-difficulty" gives Advanced, Medium, Easy, ties by ascending id.
SORT_EXPRESSIONS: dict[str, str] = {
    "id": "r.recipe_id",
    "title": "r.title",
    "difficulty": "r.difficulty",
    "cuisinename": "c.cuisine_name",
}

SORT_SAFELIST: tuple[str, ...] = tuple(SORT_EXPRESSIONS) + tuple(f"-{key}" for key in SORT_EXPRESSIONS)

TIE_BREAK = "r.recipe_id ASC"


@dataclass
class Filters:
    page: int = 1
    page_size: int = 50
    sort: str = "id"
    sort_safelist: tuple[str, ...] = field(default=SORT_SAFELIST)

    def sort_column(self) -> str:
        if self.sort not in self.sort_safelist:
            raise ValueError(f"unsafe sort parameter: {self.sort}")
        return self.sort.lstrip("-")

    def sort_direction(self) -> str:
        return "DESC" if self.sort.startswith("-") else "ASC"

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def validate_filters(v: Validator, filters: Filters) -> None:
    v.check(filters.page > 0, "page", "must be greater than zero")
    v.check(filters.page <= MAX_PAGE, "page", "must be a maximum of 10 million")
    v.check(filters.page_size > 0, "page_size", "must be greater than zero")
    v.check(filters.page_size <= MAX_PAGE_SIZE, "page_size", "must be a maximum of 100")
    v.check(permitted_value(filters.sort, filters.sort_safelist), "sort", "invalid sort value")


def resolve_sort(filters: Filters) -> tuple[str, str]:
    """
    Return (ORDER BY clause, direction) for a validated sort key.

    The clause always ends with the ascending recipe-id tie-break so that
    offset paging sees one total order.
    """
    expression = SORT_EXPRESSIONS[filters.sort_column()]
    direction = filters.sort_direction()
    return f"{expression} {direction}, {TIE_BREAK}", direction


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    if total_records <= 0:
        return Metadata()

    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=math.ceil(total_records / page_size),
        total_records=total_records,
    )
